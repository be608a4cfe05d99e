"""Validation of untrusted model output.

The model is asked for a bare JSON array of
{"issue": <number>, "likelihood": "high|medium|low", "reason": <optional>}
objects. Output is checked field by field: one bad element rejects the whole
response, since a partially understood answer cannot be trusted.
"""

import json
import math
from typing import Any, List

from errors import MalformedModelOutput
from models import MatchResult

VALID_LIKELIHOODS = ("high", "medium", "low")


def _is_number(value: Any) -> bool:
    # bool is an int subclass but not a JSON number
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)


def _reject_constant(name: str) -> Any:
    # NaN and Infinity are not valid JSON
    raise ValueError(f"Invalid JSON constant: {name}")


def verify_json_response(data: Any) -> bool:
    """Check that parsed JSON matches the expected result schema.

    Args:
        data (Any): Value produced by json.loads

    Returns:
        bool: True if data is a list (possibly empty) whose every element is
              an object with a numeric "issue" and a "likelihood" that is
              high/medium/low in any case. "reason" is not checked.
    """
    if not isinstance(data, list):
        return False
    for item in data:
        if not isinstance(item, dict):
            return False
        if not _is_number(item.get("issue")):
            return False
        likelihood = item.get("likelihood")
        if not isinstance(likelihood, str) or likelihood.lower() not in VALID_LIKELIHOODS:
            return False
    return True


def parse_model_output(text: str) -> List[MatchResult]:
    """Parse and validate the raw text of one batch response.

    Raises:
        MalformedModelOutput: If the text is not JSON or fails verify_json_response
    """
    try:
        parsed = json.loads(text, parse_constant=_reject_constant)
    except (ValueError, TypeError) as e:
        raise MalformedModelOutput(f"Error parsing AI output: {str(e)}", raw_text=text, not_json=True) from e

    if not verify_json_response(parsed):
        raise MalformedModelOutput("AI output did not pass the requested format check", raw_text=text)

    return [MatchResult.from_dict(item) for item in parsed]

"""Run configuration for the duplicate detector.

All settings are read from environment variables once, validated, and
stored in an immutable DetectorConfig that is passed explicitly to the rest
of the code. Invalid values raise InvalidArgument before any GitHub or model
call is made.

Environment Variables:
    GITHUB_TOKEN: Token used for both the GitHub API and the inference endpoint
    GITHUB_REPOSITORY: Repository in format "owner/repo"
    ISSUE_NUMBER, ISSUE_TITLE, ISSUE_BODY: The issue to check
    AI_ENDPOINT: Chat completions endpoint (default: GitHub Models)
    AI_MODEL: Model identifier
    MAX_TOKENS: Max output tokens per batch request (default 200)
    BATCH_SIZE: Candidates per request, 1-100 (default 50)
    ISSUE_STATE_FILTER: all | open | closed (default open)
    TIME_FILTER: Only compare issues updated at or after this date/time
    LABELS: Comma-separated labels to add when similar issues are found
    POST_COMMENT: "true" to post the report as a comment
"""

import os
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Mapping, Optional, Tuple

from errors import InvalidArgument

DEFAULT_ENDPOINT = "https://models.github.ai/inference"
DEFAULT_MODEL = "openai/gpt-4o-mini"
DEFAULT_MAX_TOKENS = 200
DEFAULT_BATCH_SIZE = 50
MAX_BATCH_SIZE = 100
VALID_ISSUE_STATES = ("all", "open", "closed")


def verify_batch_size(value) -> int:
    """Parse and range-check the batch size."""
    try:
        batch_size = int(value)
    except (TypeError, ValueError):
        raise InvalidArgument(f"batch_size must be between 1 and {MAX_BATCH_SIZE}, got {value!r}")
    if batch_size <= 0 or batch_size > MAX_BATCH_SIZE:
        raise InvalidArgument(f"batch_size must be between 1 and {MAX_BATCH_SIZE}, got {batch_size}")
    return batch_size


def verify_issue_state_input(issue_state: str) -> str:
    """Check the issue state filter. Matching is case-sensitive.

    Raises:
        InvalidArgument: Naming the offending value and the valid states
    """
    if issue_state in VALID_ISSUE_STATES:
        return issue_state
    raise InvalidArgument(
        f"Invalid issue state: {issue_state}. Valid states are: {', '.join(VALID_ISSUE_STATES)}"
    )


def process_date_input(date: str) -> datetime:
    """Parse an ISO-8601 date or date/time into an aware UTC datetime.

    Naive values are taken as UTC.

    Raises:
        InvalidArgument: If the value is not a valid date
    """
    try:
        parsed = datetime.fromisoformat(date.strip())
    except (AttributeError, ValueError):
        raise InvalidArgument(f"Invalid date format: {date}. Please provide a valid ISO-8601 date (e.g. 2024-03-07 or 2024-03-07T12:00:00Z).")
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def parse_labels(labels_input: str) -> Tuple[str, ...]:
    """Split a comma-separated label list, trimming each entry."""
    if not labels_input:
        return ()
    return tuple(label.strip() for label in labels_input.split(",") if label.strip())


def _positive_int(name: str, value: str) -> int:
    try:
        parsed = int(value)
    except (TypeError, ValueError):
        raise InvalidArgument(f"{name} must be a positive integer, got {value!r}")
    if parsed <= 0:
        raise InvalidArgument(f"{name} must be a positive integer, got {parsed}")
    return parsed


@dataclass(frozen=True)
class DetectorConfig:
    """Validated settings for one duplicate detection run."""
    token: str
    repository: str
    issue_number: int
    issue_title: str
    issue_body: str
    endpoint: str = DEFAULT_ENDPOINT
    model: str = DEFAULT_MODEL
    max_tokens: int = DEFAULT_MAX_TOKENS
    batch_size: int = DEFAULT_BATCH_SIZE
    issue_state_filter: str = "open"
    time_filter: Optional[datetime] = None
    labels: Tuple[str, ...] = ()
    post_comment: bool = False

    def __post_init__(self):
        verify_batch_size(self.batch_size)
        verify_issue_state_input(self.issue_state_filter)

    @property
    def owner(self) -> str:
        return self.repository.split("/")[0]

    @property
    def repo_name(self) -> str:
        return self.repository.split("/")[1]

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "DetectorConfig":
        """Load and validate configuration from environment variables.

        Args:
            environ (Optional[Mapping[str, str]]): Variables to read. Defaults to os.environ.

        Returns:
            DetectorConfig: The validated configuration

        Raises:
            InvalidArgument: If a required input is missing or any value is invalid
        """
        env = os.environ if environ is None else environ

        required = {
            "GITHUB_TOKEN": env.get("GITHUB_TOKEN", ""),
            "GITHUB_REPOSITORY": env.get("GITHUB_REPOSITORY", ""),
            "ISSUE_NUMBER": env.get("ISSUE_NUMBER", ""),
            "ISSUE_TITLE": env.get("ISSUE_TITLE", ""),
            "ISSUE_BODY": env.get("ISSUE_BODY", ""),
        }
        missing = [name for name, value in required.items() if not value]
        if missing:
            raise InvalidArgument(f"Required inputs are not set: {', '.join(missing)}")

        repository = required["GITHUB_REPOSITORY"]
        parts = repository.split("/")
        if len(parts) != 2 or not all(parts):
            raise InvalidArgument(f"GITHUB_REPOSITORY must be in format 'owner/repo', got {repository!r}")

        time_filter_input = env.get("TIME_FILTER", "")

        return cls(
            token=required["GITHUB_TOKEN"],
            repository=repository,
            issue_number=_positive_int("ISSUE_NUMBER", required["ISSUE_NUMBER"]),
            issue_title=required["ISSUE_TITLE"],
            issue_body=required["ISSUE_BODY"],
            endpoint=env.get("AI_ENDPOINT") or DEFAULT_ENDPOINT,
            model=env.get("AI_MODEL") or DEFAULT_MODEL,
            max_tokens=_positive_int("MAX_TOKENS", env.get("MAX_TOKENS") or DEFAULT_MAX_TOKENS),
            batch_size=verify_batch_size(env.get("BATCH_SIZE") or DEFAULT_BATCH_SIZE),
            issue_state_filter=verify_issue_state_input(env.get("ISSUE_STATE_FILTER") or "open"),
            time_filter=process_date_input(time_filter_input) if time_filter_input else None,
            labels=parse_labels(env.get("LABELS", "")),
            post_comment=env.get("POST_COMMENT", "").strip().lower() == "true",
        )

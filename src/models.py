"""Data types shared across the duplicate detection pipeline.

Classes:
    CandidateIssue: An existing issue eligible for comparison
    TargetIssue: The issue being checked for duplicates
    MatchResult: One validated judgment returned by the model
    BatchOutcome: What happened to a single batch
    DetectionResult: Aggregate of all batches for one run
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

# Batch outcome statuses
STATUS_MATCHED = "matched"
STATUS_EMPTY = "empty"
STATUS_NO_RESPONSE = "no_response"
STATUS_PARSE_ERROR = "parse_error"
STATUS_INVALID_FORMAT = "invalid_format"


@dataclass(frozen=True)
class CandidateIssue:
    """An existing issue that is compared against the target.

    Attributes:
        number (int): Issue number, unique within the run
        title (str): Issue title, may be empty
        body (str): Issue body, may be empty
        state (str): Lifecycle state reported by the tracker (open/closed)
        created_at (str): Creation timestamp (ISO-8601)
        updated_at (str): Last update timestamp (ISO-8601)
    """
    number: int
    title: str = ""
    body: str = ""
    state: str = ""
    created_at: str = ""
    updated_at: str = ""


@dataclass(frozen=True)
class TargetIssue:
    """The issue being checked for duplicates."""
    number: int
    title: str
    body: str


@dataclass(frozen=True)
class MatchResult:
    """A single validated entry from a model response.

    `likelihood` keeps the case the model used. `reason` is whatever the
    model returned for that key, or None when it was omitted.
    """
    issue: Union[int, float]
    likelihood: str
    reason: Optional[Any] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MatchResult":
        """Build a MatchResult from an element that already passed validation."""
        issue = data["issue"]
        if isinstance(issue, float) and issue.is_integer():
            issue = int(issue)
        return cls(issue=issue, likelihood=data["likelihood"], reason=data.get("reason"))


@dataclass(frozen=True)
class BatchOutcome:
    """Result of processing one batch.

    Attributes:
        index (int): 1-based batch index
        size (int): Number of candidates in the batch
        status (str): One of the STATUS_* constants
        matches (List[MatchResult]): Validated matches, empty unless status is matched
        error (Optional[str]): Failure description for parse_error/invalid_format/no_response
    """
    index: int
    size: int
    status: str
    matches: List[MatchResult] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def failed(self) -> bool:
        return self.status in (STATUS_NO_RESPONSE, STATUS_PARSE_ERROR, STATUS_INVALID_FORMAT)


@dataclass
class DetectionResult:
    """Aggregate of all batch outcomes for one run, in batch order."""
    outcomes: List[BatchOutcome] = field(default_factory=list)

    @property
    def matches(self) -> List[MatchResult]:
        results = []
        for outcome in self.outcomes:
            results.extend(outcome.matches)
        return results

    @property
    def batch_count(self) -> int:
        return len(self.outcomes)

    @property
    def failed_batches(self) -> List[BatchOutcome]:
        return [outcome for outcome in self.outcomes if outcome.failed]

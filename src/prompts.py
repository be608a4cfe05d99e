"""Prompt construction for batch duplicate checks.

Every batch is sent with the same SYSTEM_PROMPT, followed by a summary of the
current issue and the candidate issues in that batch. The output is
deterministic for a given input so runs can be reproduced from the logs.
"""

from typing import Sequence

from errors import EmptyBatch
from models import CandidateIssue

SYSTEM_PROMPT = """You are an assistant that identifies potential duplicate or semantically similar GitHub issues.
Return ONLY a JSON array. Include ONLY issues that have meaningful similarity to the current issue.
Output format example: [{"issue":23,"likelihood":"high", "reason":"Both issues refer to fixing a similar bug in the authentication flow."},{"issue":30,"likelihood":"medium","reason":"Some overlapping content in the mention of processing error codes."}]
Rules:
- Each item must have an integer "issue", a "likelihood" and an optional string "reason".
- likelihood must be one of: high | medium | low
- Provide at most 15 items.
- If no sufficiently similar issues exist, return []
- Leave out candidate issues that are not relevant instead of listing them as low.
- DO NOT add commentary, markdown, code fences, or any text outside the raw JSON array."""

CANDIDATE_SEPARATOR = "\n---\n"


def build_current_issue_summary(issue_number: int, issue_title: str, issue_body: str) -> str:
    """Render the target issue for inclusion in every batch prompt.

    Title and body are included verbatim, without escaping or truncation.
    """
    return f"Current Issue (#{issue_number})\nTitle: {issue_title}\nBody:\n{issue_body}"


def build_batch_user_content(
    current_issue_summary: str,
    batch_index: int,
    batch: Sequence[CandidateIssue]
) -> str:
    """Build the user message for one batch of candidate issues.

    Args:
        current_issue_summary (str): Output of build_current_issue_summary
        batch_index (int): 1-based index of the batch within the run
        batch (Sequence[CandidateIssue]): Candidates in this batch

    Returns:
        str: System instructions, the current issue summary and the
             candidates, each rendered as "#<number> <title>" followed by
             its body and separated by "---" lines

    Raises:
        EmptyBatch: If the batch holds no candidates
    """
    if not batch:
        raise EmptyBatch("Batch cannot be empty")

    batch_text = CANDIDATE_SEPARATOR.join(
        f"#{issue.number} {issue.title}\n{issue.body}" for issue in batch
    )
    return (
        f"{SYSTEM_PROMPT}\n\n{current_issue_summary}\n\n"
        f"Candidate Issues (Batch {batch_index}):\n{batch_text}"
    )

"""Markdown report of the issues the model flagged as similar.

The same renderer produces two shapes: the full report (with each
candidate's state) for the job summary, and a trimmed one without the state
line that is posted as an issue comment.
"""

from typing import Dict, Sequence

from models import CandidateIssue, MatchResult

NO_SIMILAR_ISSUES = "No similar issues found."
REPORT_HEADING = "## ⚠️ Potential Duplicate/Semantically Similar Issues Identified"
REPORT_INTRO = (
    "The following issues may be duplicates or semantically similar to the current issue. "
    "Please review them:"
)


def build_comment_body(
    results: Sequence[MatchResult],
    candidates: Sequence[CandidateIssue],
    include_state: bool = True
) -> str:
    """Render validated matches as Markdown.

    Args:
        results (Sequence[MatchResult]): Aggregated matches, rendered in order
        candidates (Sequence[CandidateIssue]): Issues the matches refer to
        include_state (bool): Whether to add a "**State:**" line per match

    Returns:
        str: The report, or NO_SIMILAR_ISSUES when there are no results.
             Matches whose issue is not among the candidates render N/A
             for title and state.
    """
    if not results:
        return NO_SIMILAR_ISSUES

    # First occurrence wins, as with a linear search
    by_number: Dict[int, CandidateIssue] = {}
    for candidate in candidates:
        by_number.setdefault(candidate.number, candidate)

    lines = [REPORT_HEADING, REPORT_INTRO, ""]
    for result in results:
        issue = by_number.get(result.issue)
        lines.append(f"**Issue** #{result.issue}: **{result.likelihood}**")
        lines.append(f"**Title:** {(issue.title if issue else None) or 'N/A'}")
        if include_state:
            lines.append(f"**State:** {(issue.state if issue else None) or 'N/A'}")
        lines.append(f"**Reason:** {result.reason or 'N/A'}")
        lines.append("")

    return "\n".join(lines)

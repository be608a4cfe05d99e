"""GitHub issue duplicate check using batched language model comparisons.

This script checks one issue against the other issues in its repository. The
candidate issues are split into batches, each batch is sent to a chat model
that returns a JSON list of similar issues, and the validated results are
reported on the job summary and, optionally, as a comment and labels on the
issue.

Key Features:
- Configuration from environment variables, validated before any API call
- Issue listing with state and "updated since" filters
- One model request per batch, with per-batch failure isolation
- Markdown report for the job summary and the issue comment
- Comment and label publishing that never fails the run

Environment Variables Required:
    GITHUB_TOKEN: GitHub token (also used for the inference endpoint)
    GITHUB_REPOSITORY: Repository in format "owner/repo"
    ISSUE_NUMBER, ISSUE_TITLE, ISSUE_BODY: The issue to check

See config.py for the optional settings.

Exit status is 1 only for invalid configuration or an unexpected error.
"""

import logging
import sys
import time
import traceback
from typing import Optional

from github import Auth, Github
from github.GithubException import GithubException
from github.Repository import Repository

from ai_inference import AIInferenceClient
from config import DetectorConfig
from duplicate_detector import DuplicateDetector, InferenceClient
from errors import InvalidArgument
from github_api import add_issue_labels, create_issue_comment, get_issues_to_compare
from models import (
    STATUS_EMPTY,
    STATUS_INVALID_FORMAT,
    STATUS_MATCHED,
    STATUS_NO_RESPONSE,
    STATUS_PARSE_ERROR,
    TargetIssue,
)
from report import NO_SIMILAR_ISSUES, build_comment_body
from step_summary import StepSummary

LOG_FILE = 'duplicate_detection.log'

BATCH_STATUS_MESSAGES = {
    STATUS_MATCHED: "AI response received",
    STATUS_EMPTY: "AI response received, no similar issues",
    STATUS_NO_RESPONSE: "No AI response",
    STATUS_PARSE_ERROR: "Error parsing AI response",
    STATUS_INVALID_FORMAT: "AI output did not pass requested format check, see logs for details",
}


def setup_logging(log_file: Optional[str] = LOG_FILE):
    handlers = [logging.StreamHandler()]
    if log_file:
        handlers.append(logging.FileHandler(log_file))
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s [%(levelname)s] %(message)s',
        handlers=handlers
    )


def log_configuration(config: DetectorConfig, summary: StepSummary):
    """Add the configuration summary to the log and the job summary."""
    lines = [
        f"- Repository: {config.repository}",
        f"- Issue Number: {config.issue_number}",
        f"- Issue State Filter: {config.issue_state_filter}",
        f"- Time Filter: {config.time_filter.isoformat() if config.time_filter else 'None'}",
        f"- Labels to Add: {', '.join(config.labels) if config.labels else 'None'}",
        f"- AI Endpoint: {config.endpoint}",
        f"- AI Model: {config.model}",
        f"- Max Tokens: {config.max_tokens}",
        f"- Batch Size: {config.batch_size}",
        f"- Post Comment: {config.post_comment}",
    ]
    summary.add_heading("Configuration Summary")
    logging.info("===== CONFIGURATION =====")
    for line in lines:
        summary.add_raw(line)
        logging.info(line)


def run(
    config: DetectorConfig,
    repo: Repository,
    client: InferenceClient,
    summary: StepSummary
) -> str:
    """Run the duplicate check for the configured issue.

    Args:
        config (DetectorConfig): Validated configuration
        repo (Repository): Repository holding the issue
        client (InferenceClient): Model client
        summary (StepSummary): Job summary to fill in

    Returns:
        str: The full report, NO_SIMILAR_ISSUES when nothing was found
    """
    summary.add_heading("Issues for Comparison Stats")
    logging.info("Fetching issues...")
    candidates = get_issues_to_compare(
        repo,
        config.issue_number,
        config.issue_state_filter,
        since=config.time_filter,
    )
    summary.add_raw(f"- Issues Found: {len(candidates)}")

    if not candidates:
        logging.info("No issues found to compare.")
        summary.add_raw("- No issues found for comparison.")
        return NO_SIMILAR_ISSUES

    summary.add_heading("AI Inference Stats")
    target = TargetIssue(config.issue_number, config.issue_title, config.issue_body)
    detector = DuplicateDetector(config, client)
    result = detector.detect(target, candidates)

    summary.add_raw(f"- Total Batches: {result.batch_count}")
    for outcome in result.outcomes:
        message = BATCH_STATUS_MESSAGES.get(outcome.status, outcome.status)
        if outcome.status == STATUS_PARSE_ERROR and outcome.error:
            message = f"{message}: {outcome.error}"
        summary.add_raw(f"- Batch {outcome.index}: {message}")

    matches = result.matches
    summary.add_heading("Parse & Process AI Responses")
    summary.add_raw(f"- Total Parsed Similar Issues from AI: {len(matches)}")

    if not matches:
        logging.info("No similar issues identified by AI.")
        summary.add_raw("- No similar issues identified by AI.")
        return NO_SIMILAR_ISSUES

    report = build_comment_body(matches, candidates, include_state=True)
    summary.add_heading("Comment & Labels Summary")
    summary.add_raw(report)

    if config.post_comment:
        logging.info("Posting comment...")
        comment_body = build_comment_body(matches, candidates, include_state=False)
        if create_issue_comment(repo, config.issue_number, comment_body, token=config.token):
            summary.add_raw("- Comment posted successfully.")
        else:
            summary.add_raw("- Failed to post comment.")

    if config.labels:
        labels = ", ".join(config.labels)
        if add_issue_labels(repo, config.issue_number, config.labels, token=config.token):
            summary.add_raw(f"- Labels added: {labels}")
        else:
            summary.add_raw(f"- Failed to add labels: {labels}")

    return report


def main() -> int:
    """Entry point. Returns the process exit status."""
    start_time = time.time()
    setup_logging()
    summary = StepSummary()

    try:
        config = DetectorConfig.from_env()
    except InvalidArgument as e:
        logging.critical(f"Invalid configuration: {str(e)}")
        return 1

    log_configuration(config, summary)

    try:
        gh = Github(auth=Auth.Token(config.token), per_page=100)
        repo = gh.get_repo(config.repository)
        client = AIInferenceClient(config)
        report = run(config, repo, client, summary)
        logging.info(f"Report for issue #{config.issue_number}:\n{report}")
        summary.add_raw("- Action completed successfully.")
    except GithubException as e:
        logging.critical(f"Failed to access repository {config.repository}: {str(e)}")
        return 1
    except Exception as e:
        logging.critical(f"Unexpected error: {str(e)}")
        logging.error(traceback.format_exc())
        return 1
    finally:
        summary.write()

    elapsed = time.time() - start_time
    logging.info(f"Duplicate detection completed in {elapsed:.2f} seconds")
    return 0


if __name__ == "__main__":
    sys.exit(main())

"""GitHub access for the duplicate detector.

Lists the issues to compare against and publishes the result (comment and
labels) on the issue being checked. PyGithub is used first; for publishing,
a failed PyGithub call falls back to the REST API through requests.

Dependencies:
    - github (PyGithub): Issue listing, comments and labels
    - requests: REST fallback when PyGithub fails

Publishing never raises: the functions log the failure and return False, so
a run that computed its results still finishes.
"""

import logging
import time
from datetime import datetime, timezone
from typing import Dict, List, Optional, Sequence

import requests
from github.GithubException import GithubException
from github.Repository import Repository
from requests.exceptions import RequestException

from errors import PublishFailure
from models import CandidateIssue

GITHUB_API = "https://api.github.com"
MAX_RETRIES = 3
RETRY_DELAY = 1
REQUEST_TIMEOUT = 30


def log_rate_limit_status(response, context: str):
    """Logs GitHub API rate limit status from response headers.

    Args:
        response: The response object from a GitHub API call
        context (str): Description of the API call context for logging
    """
    try:
        reset_timestamp = int(response.headers.get('x-ratelimit-reset', 0))
        reset_time_str = (
            datetime.fromtimestamp(reset_timestamp, tz=timezone.utc).isoformat()
            if reset_timestamp else 'N/A'
        )
        headers_to_log = {
            'limit': response.headers.get('x-ratelimit-limit'),
            'remaining': response.headers.get('x-ratelimit-remaining'),
            'used': response.headers.get('x-ratelimit-used'),
            'reset': reset_time_str,
            'resource': response.headers.get('x-ratelimit-resource')
        }
        logging.info(f"GitHub API Rate Limit Status after {context}: {headers_to_log}")
    except Exception as e:
        logging.warning(f"Could not log rate limit status after {context}: {str(e)}")


def _retry_after_seconds(value) -> Optional[int]:
    """Read a Retry-After header given in seconds.

    Returns None when the header is missing or uses the HTTP-date form.
    """
    try:
        return max(int(value), 0)
    except (TypeError, ValueError):
        return None


def retry_with_backoff(func, max_retries=MAX_RETRIES, initial_delay=RETRY_DELAY):
    """Decorator to retry a GitHub REST call with exponential backoff.

    Rate limited responses honour the Retry-After header when present.
    The last failure is re-raised.
    """
    def wrapper(*args, **kwargs):
        delay = initial_delay
        for attempt in range(max_retries):
            try:
                return func(*args, **kwargs)
            except RequestException as e:
                if attempt == max_retries - 1:
                    logging.error(f"Failed after {max_retries} attempts: {str(e)}")
                    raise

                response = getattr(e, 'response', None)
                retry_after = None
                if response is not None and response.status_code == 429:
                    header = response.headers.get('Retry-After')
                    retry_after = _retry_after_seconds(header)
                    if header and retry_after is None:
                        logging.warning(f"Ignoring unparseable Retry-After header: {header}")

                if retry_after is not None:
                    logging.warning(f"Rate limit hit, waiting {retry_after}s as specified in header")
                    time.sleep(retry_after + 1)
                else:
                    logging.warning(f"Request failed with {str(e)}, retrying in {delay}s ({attempt + 1}/{max_retries})")
                    time.sleep(delay)
                    delay *= 2
    return wrapper


def get_github_api_headers(token: str) -> Dict[str, str]:
    """Generate headers for GitHub API requests."""
    return {
        'Authorization': f'Bearer {token}',
        'Accept': 'application/vnd.github+json',
        'Content-Type': 'application/json'
    }


def _isoformat(value: Optional[datetime]) -> str:
    return value.isoformat() if value else ""


def get_issues_to_compare(
    repo: Repository,
    issue_number: int,
    issue_state: str,
    since: Optional[datetime] = None
) -> List[CandidateIssue]:
    """List the repository issues to compare against the current issue.

    Args:
        repo (Repository): PyGithub repository
        issue_number (int): Current issue, excluded from the result
        issue_state (str): all | open | closed
        since (Optional[datetime]): Only issues updated at or after this time

    Returns:
        List[CandidateIssue]: Issues in the order GitHub lists them, without
                              pull requests. If listing fails midway, the
                              issues fetched so far are returned.
    """
    kwargs = {"state": issue_state}
    if since is not None:
        kwargs["since"] = since

    collected = []
    try:
        for issue in repo.get_issues(**kwargs):
            if issue.number == issue_number or issue.pull_request is not None:
                continue
            collected.append(CandidateIssue(
                number=issue.number,
                title=issue.title or "",
                body=issue.body or "",
                state=issue.state,
                created_at=_isoformat(issue.created_at),
                updated_at=_isoformat(issue.updated_at),
            ))
    except GithubException as e:
        logging.error(f"Error fetching issues after {len(collected)} collected: {str(e)}")

    logging.info(f"Fetched {len(collected)} issue(s) to compare against #{issue_number}")
    return collected


@retry_with_backoff
def _post_issue_comment(owner: str, repo: str, issue_number: int, body: str, headers: Dict[str, str]):
    url = f"{GITHUB_API}/repos/{owner}/{repo}/issues/{issue_number}/comments"
    response = requests.post(url, headers=headers, json={"body": body}, timeout=REQUEST_TIMEOUT)
    response.raise_for_status()
    log_rate_limit_status(response, f"adding comment to #{issue_number}")
    return response


@retry_with_backoff
def _post_issue_labels(owner: str, repo: str, issue_number: int, labels: Sequence[str], headers: Dict[str, str]):
    url = f"{GITHUB_API}/repos/{owner}/{repo}/issues/{issue_number}/labels"
    response = requests.post(url, headers=headers, json={"labels": list(labels)}, timeout=REQUEST_TIMEOUT)
    response.raise_for_status()
    log_rate_limit_status(response, f"adding labels to #{issue_number}")
    return response


def _rest_fallback(action: str, token: Optional[str], call, *args):
    """Run a REST call after PyGithub failed, converting errors to PublishFailure."""
    if not token:
        raise PublishFailure(f"No GitHub token available for {action}")
    headers = get_github_api_headers(token)
    try:
        return call(*args, headers)
    except RequestException as e:
        response = getattr(e, 'response', None)
        if response is not None:
            logging.error(f"Response: {response.status_code} - {response.text[:200]}")
        raise PublishFailure(f"REST fallback for {action} failed: {str(e)}") from e


def create_issue_comment(repo: Repository, issue_number: int, body: str, token: Optional[str] = None) -> bool:
    """Post a comment on an issue.

    Args:
        repo (Repository): PyGithub repository
        issue_number (int): Issue to comment on
        body (str): Comment text (Markdown)
        token (Optional[str]): Token for the REST fallback

    Returns:
        bool: True if the comment was created
    """
    try:
        comment = repo.get_issue(issue_number).create_comment(body)
        logging.info(f"Comment created successfully: {comment.html_url}")
        return True
    except (GithubException, RequestException) as e:
        logging.error(f"Failed to add comment to issue #{issue_number} via PyGithub: {str(e)}")

    try:
        owner, repo_name = repo.full_name.split('/')
        _rest_fallback("adding comment", token, _post_issue_comment, owner, repo_name, issue_number, body)
        logging.info(f"Added comment to issue #{issue_number} via REST API")
        return True
    except PublishFailure as e:
        logging.error(f"Failed to add comment to issue #{issue_number}: {str(e)}")
        return False


def add_issue_labels(
    repo: Repository,
    issue_number: int,
    labels: Sequence[str],
    token: Optional[str] = None
) -> bool:
    """Add labels to an issue.

    Returns:
        bool: True if the labels were added (or there was nothing to add)
    """
    if not labels:
        return True

    try:
        repo.get_issue(issue_number).add_to_labels(*labels)
        logging.info(f"Labels added successfully to #{issue_number}: {', '.join(labels)}")
        return True
    except (GithubException, RequestException) as e:
        logging.error(f"Failed to add labels to issue #{issue_number} via PyGithub: {str(e)}")

    try:
        owner, repo_name = repo.full_name.split('/')
        _rest_fallback("adding labels", token, _post_issue_labels, owner, repo_name, issue_number, labels)
        logging.info(f"Added labels to issue #{issue_number} via REST API")
        return True
    except PublishFailure as e:
        logging.error(f"Failed to add labels to issue #{issue_number}: {str(e)}")
        return False

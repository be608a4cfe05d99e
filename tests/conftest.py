"""Pytest configuration and fixtures for the duplicate detector tests."""

import sys
from pathlib import Path
from typing import List, Optional

import pytest

src_dir = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(src_dir))

from config import DetectorConfig  # noqa: E402
from models import CandidateIssue  # noqa: E402


class FakeInferenceClient:
    """Returns canned responses in call order and records every prompt."""

    def __init__(self, responses: List[Optional[str]]):
        self.responses = list(responses)
        self.calls = []

    def complete(self, system_prompt: str, user_prompt: str) -> Optional[str]:
        self.calls.append((system_prompt, user_prompt))
        return self.responses.pop(0)


@pytest.fixture
def base_env():
    return {
        "GITHUB_TOKEN": "test-token",
        "GITHUB_REPOSITORY": "octo/widgets",
        "ISSUE_NUMBER": "42",
        "ISSUE_TITLE": "Login fails with 500",
        "ISSUE_BODY": "Submitting the login form returns a server error.",
    }


@pytest.fixture
def config_factory():
    def _make(**overrides) -> DetectorConfig:
        values = {
            "token": "test-token",
            "repository": "octo/widgets",
            "issue_number": 42,
            "issue_title": "Login fails with 500",
            "issue_body": "Submitting the login form returns a server error.",
        }
        values.update(overrides)
        return DetectorConfig(**values)
    return _make


@pytest.fixture
def make_candidates():
    def _make(count: int, start: int = 1) -> List[CandidateIssue]:
        return [
            CandidateIssue(
                number=n,
                title=f"Issue {n}",
                body=f"Body of issue {n}",
                state="open" if n % 2 else "closed",
                created_at="2024-01-01T00:00:00+00:00",
                updated_at="2024-01-02T00:00:00+00:00",
            )
            for n in range(start, start + count)
        ]
    return _make


@pytest.fixture
def fake_client_factory():
    return FakeInferenceClient

"""Tests for configuration loading and input validation."""

from datetime import datetime, timezone

import pytest

from config import (
    DEFAULT_BATCH_SIZE,
    DEFAULT_ENDPOINT,
    DEFAULT_MAX_TOKENS,
    DetectorConfig,
    parse_labels,
    process_date_input,
    verify_batch_size,
    verify_issue_state_input,
)
from errors import InvalidArgument


class TestVerifyIssueStateInput:

    @pytest.mark.parametrize("state", ["all", "open", "closed"])
    def test_valid_states(self, state):
        assert verify_issue_state_input(state) == state

    @pytest.mark.parametrize("state", ["invalid", "", "OPEN"])
    def test_invalid_states(self, state):
        with pytest.raises(InvalidArgument) as exc_info:
            verify_issue_state_input(state)
        assert str(exc_info.value) == (
            f"Invalid issue state: {state}. Valid states are: all, open, closed"
        )


class TestProcessDateInput:

    def test_date_time_with_zulu(self):
        assert process_date_input("2023-10-01T12:00:00Z") == datetime(2023, 10, 1, 12, tzinfo=timezone.utc)

    def test_date_only_is_midnight_utc(self):
        assert process_date_input("2023-10-01") == datetime(2023, 10, 1, tzinfo=timezone.utc)

    def test_offset_converted_to_utc(self):
        assert process_date_input("2023-10-01T14:00:00+02:00") == datetime(2023, 10, 1, 12, tzinfo=timezone.utc)

    @pytest.mark.parametrize("value", ["invalid-date", "2023-13-01", "03/07/2024", ""])
    def test_invalid_dates(self, value):
        with pytest.raises(InvalidArgument) as exc_info:
            process_date_input(value)
        assert str(exc_info.value) == f"Invalid date format: {value}. Please provide a valid ISO-8601 date (e.g. 2024-03-07 or 2024-03-07T12:00:00Z)."


class TestVerifyBatchSize:

    @pytest.mark.parametrize("value,expected", [(1, 1), ("50", 50), (100, 100)])
    def test_valid(self, value, expected):
        assert verify_batch_size(value) == expected

    @pytest.mark.parametrize("value", [0, -1, 101, "abc", None])
    def test_invalid(self, value):
        with pytest.raises(InvalidArgument, match="batch_size must be between 1 and 100"):
            verify_batch_size(value)


class TestParseLabels:

    def test_trims_entries(self):
        assert parse_labels(" duplicate , needs-triage,bug ") == ("duplicate", "needs-triage", "bug")

    def test_empty(self):
        assert parse_labels("") == ()

    def test_drops_empty_entries(self):
        assert parse_labels("duplicate,, ,") == ("duplicate",)


class TestDetectorConfig:

    def test_defaults(self, base_env):
        config = DetectorConfig.from_env(base_env)
        assert config.token == "test-token"
        assert config.owner == "octo"
        assert config.repo_name == "widgets"
        assert config.issue_number == 42
        assert config.endpoint == DEFAULT_ENDPOINT
        assert config.max_tokens == DEFAULT_MAX_TOKENS
        assert config.batch_size == DEFAULT_BATCH_SIZE
        assert config.issue_state_filter == "open"
        assert config.time_filter is None
        assert config.labels == ()
        assert config.post_comment is False

    def test_all_settings(self, base_env):
        base_env.update({
            "AI_ENDPOINT": "https://example.test/v1",
            "AI_MODEL": "gpt-4.1-nano",
            "MAX_TOKENS": "500",
            "BATCH_SIZE": "3",
            "ISSUE_STATE_FILTER": "all",
            "TIME_FILTER": "2024-05-01",
            "LABELS": "duplicate, triage",
            "POST_COMMENT": "true",
        })
        config = DetectorConfig.from_env(base_env)
        assert config.endpoint == "https://example.test/v1"
        assert config.model == "gpt-4.1-nano"
        assert config.max_tokens == 500
        assert config.batch_size == 3
        assert config.issue_state_filter == "all"
        assert config.time_filter == datetime(2024, 5, 1, tzinfo=timezone.utc)
        assert config.labels == ("duplicate", "triage")
        assert config.post_comment is True

    def test_is_immutable(self, base_env):
        config = DetectorConfig.from_env(base_env)
        with pytest.raises(AttributeError):
            config.batch_size = 10

    def test_missing_required_inputs(self, base_env):
        del base_env["ISSUE_BODY"]
        base_env["GITHUB_TOKEN"] = ""
        with pytest.raises(InvalidArgument, match="Required inputs are not set: GITHUB_TOKEN, ISSUE_BODY"):
            DetectorConfig.from_env(base_env)

    @pytest.mark.parametrize("repository", ["widgets", "octo/", "a/b/c"])
    def test_bad_repository(self, base_env, repository):
        base_env["GITHUB_REPOSITORY"] = repository
        with pytest.raises(InvalidArgument, match="owner/repo"):
            DetectorConfig.from_env(base_env)

    @pytest.mark.parametrize("key,value,message", [
        ("BATCH_SIZE", "0", "batch_size"),
        ("BATCH_SIZE", "101", "batch_size"),
        ("ISSUE_STATE_FILTER", "Open", "Invalid issue state: Open"),
        ("TIME_FILTER", "yesterday", "Invalid date format: yesterday"),
        ("ISSUE_NUMBER", "abc", "ISSUE_NUMBER"),
        ("MAX_TOKENS", "-5", "MAX_TOKENS"),
    ])
    def test_invalid_values(self, base_env, key, value, message):
        base_env[key] = value
        with pytest.raises(InvalidArgument, match=message):
            DetectorConfig.from_env(base_env)

    def test_direct_construction_validates(self, config_factory):
        with pytest.raises(InvalidArgument):
            config_factory(batch_size=0)
        with pytest.raises(InvalidArgument):
            config_factory(issue_state_filter="pending")

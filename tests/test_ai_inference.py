"""Tests for the chat completion client."""

from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest
from openai import OpenAIError

from ai_inference import AIInferenceClient


def _completion(content):
    return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=content))])


@pytest.fixture
def openai_client():
    return MagicMock()


@pytest.fixture
def client(config_factory, openai_client):
    config = config_factory(model="openai/gpt-4o-mini", max_tokens=321, endpoint="https://example.test/inference")
    return AIInferenceClient(config, client=openai_client)


class TestAIInferenceClient:

    def test_sends_system_and_user_messages(self, client, openai_client):
        openai_client.chat.completions.create.return_value = _completion("[]")

        assert client.complete("system text", "user text") == "[]"

        openai_client.chat.completions.create.assert_called_once_with(
            model="openai/gpt-4o-mini",
            messages=[
                {"role": "system", "content": "system text"},
                {"role": "user", "content": "user text"},
            ],
            max_tokens=321,
        )

    def test_api_error_returns_none(self, client, openai_client):
        openai_client.chat.completions.create.side_effect = OpenAIError("service unavailable")
        assert client.complete("s", "u") is None

    @pytest.mark.parametrize("content", [None, ""])
    def test_empty_content_returns_none(self, client, openai_client, content):
        openai_client.chat.completions.create.return_value = _completion(content)
        assert client.complete("s", "u") is None

    def test_no_choices_returns_none(self, client, openai_client):
        openai_client.chat.completions.create.return_value = SimpleNamespace(choices=[])
        assert client.complete("s", "u") is None

    def test_keeps_config_values(self, client):
        assert client.endpoint == "https://example.test/inference"
        assert client.model == "openai/gpt-4o-mini"
        assert client.max_tokens == 321

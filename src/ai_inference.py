"""Chat completion calls against an OpenAI-compatible inference endpoint.

The client sends one request per batch and never retries: a failed call is
logged and reported to the caller as None, so the batch is skipped while the
rest of the run continues.

Dependencies:
    - openai: Client for the chat completions API (works with GitHub Models
      and any other OpenAI-compatible endpoint via base_url)
    - tiktoken: Prompt token counts for the logs
"""

import logging
from typing import Optional

import tiktoken
from openai import OpenAI, OpenAIError

from config import DetectorConfig
from errors import UpstreamUnavailable

FALLBACK_ENCODING = "cl100k_base"


class AIInferenceClient:
    """Sends batch prompts to the configured model.

    Attributes:
        endpoint (str): Base URL of the inference endpoint
        model (str): Model identifier sent with every request
        max_tokens (int): Output token budget per request
        client (OpenAI): Underlying API client
    """

    def __init__(self, config: DetectorConfig, client: Optional[OpenAI] = None):
        self.endpoint = config.endpoint
        self.model = config.model
        self.max_tokens = config.max_tokens
        self.client = client or OpenAI(base_url=config.endpoint, api_key=config.token)
        self._tokenizer = None

        logging.info("AI configuration:")
        logging.info(f"Endpoint: {self.endpoint}")
        logging.info(f"Model: {self.model}")
        logging.info(f"Max Tokens: {self.max_tokens}")

    def _get_tokenizer(self):
        if self._tokenizer is None:
            # GitHub Models identifiers carry a publisher prefix, e.g. "openai/gpt-4o"
            model_name = self.model.split("/")[-1]
            try:
                self._tokenizer = tiktoken.encoding_for_model(model_name)
            except KeyError:
                self._tokenizer = tiktoken.get_encoding(FALLBACK_ENCODING)
        return self._tokenizer

    def count_tokens(self, text: str) -> int:
        """Count tokens in text using the model's tokenizer (or cl100k_base)."""
        return len(self._get_tokenizer().encode(text))

    def _request_completion(self, system_prompt: str, user_prompt: str) -> str:
        """Make the API call and return the message text.

        Raises:
            UpstreamUnavailable: If the call fails or returns no content
        """
        try:
            response = self.client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": user_prompt},
                ],
                max_tokens=self.max_tokens,
            )
        except OpenAIError as e:
            raise UpstreamUnavailable(f"Inference request failed: {str(e)}") from e

        if not response.choices:
            raise UpstreamUnavailable("Inference response contained no choices")
        content = response.choices[0].message.content
        if not content:
            raise UpstreamUnavailable("Inference response contained no content")
        return content

    def complete(self, system_prompt: str, user_prompt: str) -> Optional[str]:
        """Run one chat completion.

        Args:
            system_prompt (str): System message
            user_prompt (str): User message holding the batch

        Returns:
            Optional[str]: The model's text, or None if the request failed.
                           Failures are logged here.
        """
        if logging.getLogger().isEnabledFor(logging.DEBUG):
            try:
                prompt_tokens = self.count_tokens(system_prompt) + self.count_tokens(user_prompt)
                logging.debug(f"Prompt tokens: {prompt_tokens}")
            except Exception as e:
                logging.debug(f"Could not count prompt tokens: {str(e)}")

        try:
            return self._request_completion(system_prompt, user_prompt)
        except UpstreamUnavailable as e:
            logging.error(str(e))
            return None

"""Anthropic Claude API client implementing the completion contract.

The classifier treats the model as an opaque function: a system prompt, a
user message and a low fixed temperature go in, raw text comes out.
"""

import logging
from dataclasses import dataclass
from typing import Optional

import anthropic
from tenacity import retry, stop_after_attempt, wait_exponential, retry_if_exception_type

from soapbox_moderation.config import get_config, AnthropicConfig
from soapbox_moderation.exceptions import CompletionError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CompletionRequest:
    """Request sent to the completion service."""
    system_prompt: str
    user_message: str
    temperature: float = 0.1


class AnthropicClient:
    """Anthropic Claude API client.

    Rate limits are retried with exponential backoff. Every other API error,
    and the final rate limit error, is raised to the caller.
    """

    def __init__(self, config: Optional[AnthropicConfig] = None):
        """Initialize Anthropic client.

        Args:
            config: Anthropic configuration. If None, loads from environment.
        """
        self.config = config or get_config().anthropic
        self._client = None

    @property
    def client(self) -> anthropic.Anthropic:
        """Get or create Anthropic client."""
        if self._client is None:
            self._client = anthropic.Anthropic(
                api_key=self.config.api_key,
                timeout=self.config.timeout_seconds,
            )
        return self._client

    @property
    def model(self) -> str:
        return self.config.model

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=4, max=60),
        retry=retry_if_exception_type(anthropic.RateLimitError),
        reraise=True,
    )
    def complete(self, request: CompletionRequest) -> str:
        """Run one completion and return the raw response text.

        Args:
            request: System prompt, user message and temperature

        Returns:
            Model output text, possibly wrapped in markdown code fences

        Raises:
            anthropic.APIError: On API, connection or timeout failures
            CompletionError: If the response carries no text
        """
        response = self.client.messages.create(
            model=self.config.model,
            max_tokens=self.config.max_tokens,
            temperature=request.temperature,
            system=request.system_prompt,
            messages=[{"role": "user", "content": request.user_message}],
        )

        if not response.content:
            raise CompletionError("Completion response contained no content")

        text = getattr(response.content[0], "text", None)
        if not isinstance(text, str):
            raise CompletionError("Completion response contained no text block")

        logger.debug(
            f"Completion from {self.config.model}: "
            f"{response.usage.input_tokens} in / {response.usage.output_tokens} out tokens"
        )
        return text

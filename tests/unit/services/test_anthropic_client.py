"""Unit tests for the Anthropic completion client."""

from unittest.mock import MagicMock, patch

import anthropic
import pytest


def _rate_limit_error():
    return anthropic.RateLimitError(
        message="Rate limit exceeded",
        response=MagicMock(status_code=429),
        body={"error": {"message": "Rate limit exceeded"}},
    )


@pytest.fixture
def completion_request():
    from soapbox_moderation.services.anthropic_client import CompletionRequest

    return CompletionRequest(
        system_prompt="You are an advanced AI content moderator.",
        user_message='Analyze this post: "hello"',
    )


class TestAnthropicClientInit:
    """Tests for client initialization."""

    def test_uses_config_model(self):
        from soapbox_moderation.config import AnthropicConfig
        from soapbox_moderation.services.anthropic_client import AnthropicClient

        client = AnthropicClient(config=AnthropicConfig(api_key="test-key", model="claude-test"))

        assert client.model == "claude-test"

    def test_client_is_created_lazily(self, mock_anthropic_client):
        from soapbox_moderation.config import AnthropicConfig
        from soapbox_moderation.services.anthropic_client import AnthropicClient

        with patch("anthropic.Anthropic", return_value=mock_anthropic_client) as factory:
            client = AnthropicClient(config=AnthropicConfig(api_key="test-key", timeout_seconds=12.0))
            assert factory.call_count == 0

            assert client.client is mock_anthropic_client
            assert client.client is mock_anthropic_client
            factory.assert_called_once_with(api_key="test-key", timeout=12.0)


class TestComplete:
    """Tests for the completion call."""

    def test_returns_raw_text(self, mock_anthropic_client, completion_request):
        from soapbox_moderation.config import AnthropicConfig
        from soapbox_moderation.services.anthropic_client import AnthropicClient

        with patch("anthropic.Anthropic", return_value=mock_anthropic_client):
            client = AnthropicClient(config=AnthropicConfig(api_key="test-key"))
            text = client.complete(completion_request)

        assert '"priority": "high"' in text

    def test_request_parameters(self, mock_anthropic_client, completion_request):
        from soapbox_moderation.config import AnthropicConfig
        from soapbox_moderation.services.anthropic_client import AnthropicClient

        with patch("anthropic.Anthropic", return_value=mock_anthropic_client):
            config = AnthropicConfig(api_key="test-key", model="claude-test", max_tokens=600)
            AnthropicClient(config=config).complete(completion_request)

        call_kwargs = mock_anthropic_client.messages.create.call_args.kwargs
        assert call_kwargs["model"] == "claude-test"
        assert call_kwargs["max_tokens"] == 600
        assert call_kwargs["temperature"] == 0.1
        assert call_kwargs["system"] == "You are an advanced AI content moderator."
        assert call_kwargs["messages"] == [
            {"role": "user", "content": 'Analyze this post: "hello"'}
        ]

    def test_empty_content_raises_completion_error(self, completion_request):
        from soapbox_moderation.config import AnthropicConfig
        from soapbox_moderation.exceptions import CompletionError
        from soapbox_moderation.services.anthropic_client import AnthropicClient

        mock_response = MagicMock()
        mock_response.content = []
        mock_client = MagicMock()
        mock_client.messages.create.return_value = mock_response

        with patch("anthropic.Anthropic", return_value=mock_client):
            client = AnthropicClient(config=AnthropicConfig(api_key="test-key"))
            with pytest.raises(CompletionError):
                client.complete(completion_request)

    def test_non_text_block_raises_completion_error(self, completion_request):
        from soapbox_moderation.config import AnthropicConfig
        from soapbox_moderation.exceptions import CompletionError
        from soapbox_moderation.services.anthropic_client import AnthropicClient

        mock_response = MagicMock()
        mock_response.content = [MagicMock(text=None)]
        mock_client = MagicMock()
        mock_client.messages.create.return_value = mock_response

        with patch("anthropic.Anthropic", return_value=mock_client):
            client = AnthropicClient(config=AnthropicConfig(api_key="test-key"))
            with pytest.raises(CompletionError):
                client.complete(completion_request)


class TestRetry:
    """Tests for retry logic on rate limits."""

    def test_retries_on_rate_limit(self, mock_anthropic_response, completion_request):
        from soapbox_moderation.config import AnthropicConfig
        from soapbox_moderation.services.anthropic_client import AnthropicClient

        mock_client = MagicMock()
        mock_client.messages.create.side_effect = [
            _rate_limit_error(),
            mock_anthropic_response,
        ]

        with patch("anthropic.Anthropic", return_value=mock_client):
            with patch("tenacity.nap.time.sleep"):
                client = AnthropicClient(config=AnthropicConfig(api_key="test-key"))
                text = client.complete(completion_request)

        assert mock_client.messages.create.call_count == 2
        assert '"priority": "high"' in text

    def test_rate_limit_reraised_after_three_attempts(self, completion_request):
        from soapbox_moderation.config import AnthropicConfig
        from soapbox_moderation.services.anthropic_client import AnthropicClient

        mock_client = MagicMock()
        mock_client.messages.create.side_effect = [_rate_limit_error() for _ in range(3)]

        with patch("anthropic.Anthropic", return_value=mock_client):
            with patch("tenacity.nap.time.sleep"):
                client = AnthropicClient(config=AnthropicConfig(api_key="test-key"))
                with pytest.raises(anthropic.RateLimitError):
                    client.complete(completion_request)

        assert mock_client.messages.create.call_count == 3

    def test_other_api_errors_are_not_retried(self, completion_request):
        from soapbox_moderation.config import AnthropicConfig
        from soapbox_moderation.services.anthropic_client import AnthropicClient

        mock_client = MagicMock()
        mock_client.messages.create.side_effect = anthropic.AuthenticationError(
            message="Invalid API key",
            response=MagicMock(status_code=401),
            body={"error": {"type": "authentication_error"}},
        )

        with patch("anthropic.Anthropic", return_value=mock_client):
            client = AnthropicClient(config=AnthropicConfig(api_key="invalid-key"))
            with pytest.raises(anthropic.AuthenticationError):
                client.complete(completion_request)

        assert mock_client.messages.create.call_count == 1

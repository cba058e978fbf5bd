"""Service integrations for the moderation engine."""

from soapbox_moderation.services.anthropic_client import AnthropicClient, CompletionRequest

__all__ = [
    "AnthropicClient",
    "CompletionRequest",
]

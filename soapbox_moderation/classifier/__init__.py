"""Content classification against the moderation taxonomy."""

from soapbox_moderation.classifier.classifier import ModerationClassifier, parse_response
from soapbox_moderation.classifier.prompt import PromptBuilder

__all__ = ["ModerationClassifier", "PromptBuilder", "parse_response"]

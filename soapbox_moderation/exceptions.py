"""Exceptions raised by the moderation engine."""


class ModerationError(Exception):
    """Base exception for the moderation engine."""

    pass


class TrainingStoreError(ModerationError):
    """Raised when a training case cannot be stored or read."""

    pass


class InvalidTransitionError(ModerationError):
    """Raised when a content item is moved out of order through its lifecycle."""

    pass


class CompletionError(ModerationError):
    """Raised when the completion service returns an unusable response."""

    pass

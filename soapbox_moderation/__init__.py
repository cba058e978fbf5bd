"""Content moderation classifier with a moderator feedback loop."""

__version__ = "0.1.0"

"""Configuration management for the moderation engine.

Loads configuration from environment variables.
"""

import os
from dataclasses import dataclass, field
from functools import lru_cache


@dataclass(frozen=True)
class DatabaseConfig:
    """Training case database configuration."""
    url: str = "sqlite:///training_cases.db"

    @classmethod
    def from_env(cls) -> "DatabaseConfig":
        """Load database config from environment variables."""
        return cls(
            url=os.environ.get("TRAINING_DATABASE_URL", "sqlite:///training_cases.db"),
        )


@dataclass(frozen=True)
class AnthropicConfig:
    """Anthropic API configuration."""
    api_key: str
    model: str = "claude-sonnet-4-20250514"
    # Low, fixed temperature for consistent classification
    temperature: float = 0.1
    max_tokens: int = 600
    timeout_seconds: float = 30.0

    @classmethod
    def from_env(cls) -> "AnthropicConfig":
        """Load Anthropic config from environment variables."""
        return cls(
            api_key=os.environ.get("ANTHROPIC_API_KEY", ""),
            model=os.environ.get("MODERATION_MODEL", "claude-sonnet-4-20250514"),
            timeout_seconds=float(os.environ.get("MODERATION_TIMEOUT_SECONDS", "30")),
        )


@dataclass(frozen=True)
class LearningConfig:
    """Feedback loop tuning."""
    context_window: int = 20       # Most recent cases considered for prompt context
    excerpt_length: int = 100      # Characters of content quoted per correction
    accuracy_threshold: float = 0.8
    top_patterns: int = 5


@dataclass(frozen=True)
class AppConfig:
    """Main application configuration."""
    environment: str
    database: DatabaseConfig
    anthropic: AnthropicConfig
    learning: LearningConfig = field(default_factory=LearningConfig)

    # "memory" or "sql"
    training_store: str = "memory"
    max_concurrent_classifications: int = 8

    @classmethod
    def from_env(cls) -> "AppConfig":
        """Load full configuration from environment variables."""
        return cls(
            environment=os.environ.get("ENVIRONMENT", "dev"),
            database=DatabaseConfig.from_env(),
            anthropic=AnthropicConfig.from_env(),
            training_store=os.environ.get("TRAINING_STORE", "memory"),
            max_concurrent_classifications=int(
                os.environ.get("MAX_CONCURRENT_CLASSIFICATIONS", "8")
            ),
        )


@lru_cache(maxsize=1)
def get_config() -> AppConfig:
    """Get cached application configuration.

    Returns:
        AppConfig instance loaded from environment variables.
    """
    return AppConfig.from_env()

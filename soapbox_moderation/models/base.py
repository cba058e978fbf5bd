"""SQLAlchemy base configuration and engine management."""

from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import DeclarativeBase, sessionmaker
from sqlalchemy.pool import StaticPool

from soapbox_moderation.config import get_config


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""
    pass


def create_sync_engine(url: str | None = None) -> Engine:
    """Create a database engine for the training case table.

    Args:
        url: Database URL. If None, uses TRAINING_DATABASE_URL.
    """
    config = get_config()
    url = url or config.database.url

    if url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}
        # In-memory databases must share one connection across threads
        if url in ("sqlite://", "sqlite:///:memory:"):
            kwargs["poolclass"] = StaticPool
        return create_engine(url, echo=config.environment == "dev", **kwargs)

    return create_engine(
        url,
        echo=config.environment == "dev",
        pool_pre_ping=True,
    )


def get_sync_session(engine: Engine) -> sessionmaker:
    """Get sync session factory bound to an engine."""
    return sessionmaker(engine, expire_on_commit=False)

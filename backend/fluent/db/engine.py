"""Database engine and session factory."""

from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import Session, sessionmaker

from backend.fluent.config import Settings


def create_engine_from_settings(settings: Settings, database_url: str | None = None) -> Engine:
    """Create SQLAlchemy engine from settings.

    Args:
        settings: Application settings
        database_url: Optional URL overriding ``settings.database_url``

    Raises:
        ValueError: If the database URL is unset or empty.
    """
    url = database_url or settings.database_url

    if not url:
        raise ValueError(
            "DATABASE_URL must be set to a valid connection string. "
            "Please configure the database_url setting."
        )

    return create_engine(url, pool_pre_ping=True, echo=False)


def create_session_factory(engine: Engine) -> sessionmaker[Session]:
    """Create sessionmaker for creating database sessions.

    Args:
        engine: SQLAlchemy engine

    Returns:
        Sessionmaker bound to the engine
    """
    return sessionmaker(bind=engine, expire_on_commit=False)

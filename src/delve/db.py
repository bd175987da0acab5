"""Database engine setup."""

from sqlalchemy.engine import Engine
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, create_engine

from . import models  # noqa: F401  (registers the tables)
from .logging import get_logger

logger = get_logger(__name__)


def build_engine(database_url: str) -> Engine:
    """Create an engine; in-memory sqlite shares one connection."""
    if database_url in ("sqlite://", "sqlite:///:memory:"):
        return create_engine(
            database_url,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    return create_engine(database_url)


def init_db(engine: Engine) -> None:
    """Create every content and save table that does not exist yet."""
    SQLModel.metadata.create_all(engine)
    logger.debug("database_setup_complete")

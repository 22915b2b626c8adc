"""SQLModel database engine and session management."""

import logging

from sqlalchemy.engine import Engine
from sqlmodel import SQLModel, create_engine

from otp_auth.config import settings

logger = logging.getLogger(__name__)


def build_engine(database_url: str) -> Engine:
    # SQLite needs check_same_thread=False; PostgreSQL does not
    connect_args = {}
    if database_url.startswith("sqlite"):
        connect_args["check_same_thread"] = False
    return create_engine(database_url, echo=False, connect_args=connect_args)


engine = build_engine(settings.database_url)


def create_db_and_tables(bind: Engine | None = None):
    """Create all tables. Called on startup."""
    import otp_auth.models  # noqa: F401  registers the tables on the metadata

    SQLModel.metadata.create_all(bind or engine)
    logger.info("Database tables ready")

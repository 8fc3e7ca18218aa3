"""
Database utility functions.
Provides helpers for database operations and health checks.
"""

from pathlib import Path
from typing import Optional

import logfire
from sqlalchemy import text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import OperationalError

from database.base import Base, engine
from config import settings


def check_db_connection(bind: Optional[Engine] = None) -> bool:
    """
    Check if database connection is working.

    Returns:
        bool: True if connection is successful, False otherwise
    """
    try:
        with (bind or engine).connect() as connection:
            connection.execute(text("SELECT 1"))
        return True
    except OperationalError:
        return False


def sanitize_db_url(url: str) -> str:
    """
    Hide password in database URL for safe logging.

    Replaces the password portion of a database connection URL with "***"
    to prevent credentials from appearing in logs or error messages.
    """
    if "@" not in url:
        return url

    try:
        protocol, rest = url.split("://", 1)
        credentials, host = rest.split("@", 1)
        username = credentials.split(":", 1)[0]
        return f"{protocol}://{username}:***@{host}"
    except ValueError:
        return url


def get_db_info() -> dict:
    """
    Get database connection information and status.

    Returns:
        dict: Database information including connection status and URL (sanitized)
    """
    is_connected = check_db_connection()
    db_url_sanitized = sanitize_db_url(settings.database_url)

    return {
        "status": "connected" if is_connected else "disconnected",
        "url": db_url_sanitized,
        "environment": settings.environment,
    }


def init_db(bind: Optional[Engine] = None) -> None:
    """
    Create all tables that do not exist yet.

    Used at startup for local SQLite databases and by the test suite;
    deployed databases are managed with Alembic instead.
    """
    # Register every model on Base.metadata
    import models  # noqa: F401

    target = bind or engine
    if target.url.get_backend_name() == "sqlite" and target.url.database:
        Path(target.url.database).parent.mkdir(parents=True, exist_ok=True)

    Base.metadata.create_all(bind=target)
    logfire.info("Database tables ensured", url=sanitize_db_url(str(target.url)))

"""
Database session management utilities.
Provides context managers for database sessions.
"""

from contextlib import contextmanager
from typing import Callable, Generator, Optional

from sqlalchemy.orm import Session

from database.base import SessionLocal

SessionFactory = Callable[[], Session]


@contextmanager
def get_db_context(session_factory: Optional[SessionFactory] = None) -> Generator[Session, None, None]:
    """
    Database session context manager.

    Args:
        session_factory: Session factory to draw from (defaults to SessionLocal)

    Usage (read-only):
        with get_db_context() as db:
            sequence = db.get(MessageSequence, sequence_id)

    Usage (with write):
        with get_db_context() as db:
            db.add(sequence)
            db.commit()
    """
    db = (session_factory or SessionLocal)()
    try:
        yield db
    except BaseException:
        db.rollback()
        raise
    finally:
        db.close()

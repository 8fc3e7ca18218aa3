"""
Tone-of-voice configuration model for SQLAlchemy ORM.
Represents the tov_configs table.
"""

from datetime import datetime, timezone
from uuid import uuid4

from sqlalchemy import Column, String, Text, DateTime, Float, Uuid
from sqlalchemy.orm import relationship

from database.base import Base

DEFAULT_HUMOR = 0.3
DEFAULT_ENTHUSIASM = 0.5


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TovConfig(Base):
    """
    Named set of tone axes, each a float in [0, 1].

    formality, warmth and directness are mandatory; humor and enthusiasm
    fall back to 0.3 and 0.5.
    """

    __tablename__ = "tov_configs"

    id = Column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid4,
        nullable=False,
        comment="Unique tone config ID"
    )

    name = Column(String(255), nullable=False)

    formality = Column(Float, nullable=False)
    warmth = Column(Float, nullable=False)
    directness = Column(Float, nullable=False)
    humor = Column(Float, nullable=True, default=DEFAULT_HUMOR)
    enthusiasm = Column(Float, nullable=True, default=DEFAULT_ENTHUSIASM)

    custom_instructions = Column(
        Text,
        nullable=True,
        comment="Free-text instructions appended verbatim to the tone paragraphs"
    )

    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)

    sequences = relationship(
        "MessageSequence",
        back_populates="tov_config"
    )

    def touch(self) -> None:
        """Bump updated_at after a field update."""
        self.updated_at = _utcnow()

    def __repr__(self) -> str:
        return f"<TovConfig(id={self.id}, name='{self.name}')>"

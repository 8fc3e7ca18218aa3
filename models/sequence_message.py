"""
SequenceMessage model for SQLAlchemy ORM.
One generated message, owned by exactly one MessageSequence.
"""

from datetime import datetime, timezone
from uuid import uuid4

from sqlalchemy import Column, Integer, String, Text, DateTime, Float, ForeignKey, UniqueConstraint, JSON, Uuid
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import relationship

from database.base import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SequenceMessage(Base):
    """Message at one step of a sequence. Step numbers start at 1."""

    __tablename__ = "sequence_messages"

    id = Column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid4,
        nullable=False
    )

    sequence_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("message_sequences.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )

    step_number = Column(Integer, nullable=False)

    message_type = Column(
        String(50),
        nullable=False,
        comment="connection_request, follow_up_value, case_study, social_proof, direct_ask, breakup"
    )

    subject = Column(String(500), nullable=True)
    body = Column(Text, nullable=False)
    thinking_process = Column(Text, nullable=True)
    confidence_score = Column(Float, nullable=True)

    personalization_points = Column(
        JSON().with_variant(JSONB, "postgresql"),
        nullable=True,
        comment="List of {point, source, reasoning}"
    )

    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)

    sequence = relationship("MessageSequence", back_populates="messages")

    __table_args__ = (
        UniqueConstraint("sequence_id", "step_number", name="uq_sequence_messages_step"),
    )

    def __repr__(self) -> str:
        return (
            f"<SequenceMessage(sequence_id={self.sequence_id}, "
            f"step={self.step_number}, type='{self.message_type}')>"
        )

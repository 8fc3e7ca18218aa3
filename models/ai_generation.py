"""
AIGeneration model for SQLAlchemy ORM.
Append-only audit record of every model call attempt.
"""

from datetime import datetime, timezone
from uuid import uuid4

from sqlalchemy import Column, Integer, String, Text, DateTime, Float, ForeignKey, Index, Uuid
from sqlalchemy.orm import relationship

from database.base import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AIGeneration(Base):
    """
    One model call attempt.

    Token counts stay NULL until a response is received, so failed
    attempts carry only model, prompt, latency, status and error.
    """

    __tablename__ = "ai_generations"

    id = Column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid4,
        nullable=False
    )

    sequence_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("message_sequences.id", ondelete="CASCADE"),
        nullable=False
    )

    generation_type = Column(
        String(50),
        nullable=False,
        comment="profile_analysis | sequence_generation"
    )

    model = Column(String(255), nullable=False)

    prompt_tokens = Column(Integer, nullable=True)
    completion_tokens = Column(Integer, nullable=True)
    total_tokens = Column(Integer, nullable=True)
    estimated_cost_usd = Column(Float, nullable=True)
    latency_ms = Column(Integer, nullable=True)

    raw_prompt = Column(Text, nullable=True, comment="JSON-encoded chat messages sent")
    raw_response = Column(Text, nullable=True, comment="Raw model output")

    status = Column(
        String(20),
        nullable=False,
        comment="success | error | timeout"
    )

    error_message = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)

    sequence = relationship("MessageSequence", back_populates="generations")

    __table_args__ = (
        Index("ix_ai_generations_sequence_id", "sequence_id"),
    )

    def __repr__(self) -> str:
        return (
            f"<AIGeneration(sequence_id={self.sequence_id}, type='{self.generation_type}', "
            f"model='{self.model}', status='{self.status}')>"
        )

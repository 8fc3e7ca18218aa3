"""
MessageSequence model for SQLAlchemy ORM.
Represents the message_sequences table, which owns the generation lifecycle.
"""

from datetime import datetime, timezone
from uuid import uuid4

from sqlalchemy import Column, Integer, Text, DateTime, Float, ForeignKey, Index, Enum, JSON, Uuid
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import relationship

from database.base import Base
from pipeline.core.exceptions import InvalidStatusTransitionError
from pipeline.models.core import SequenceStatus


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class MessageSequence(Base):
    """
    A generated outreach sequence for one prospect.

    Attributes:
        id (UUID): Primary key
        prospect_id (UUID): Foreign key to prospects
        tov_config_id (UUID): Foreign key to tov_configs
        company_context (str): Caller-supplied context
        sequence_length (int): Requested number of messages
        status (SequenceStatus): pending -> generating -> completed | failed
        prospect_analysis (dict): Normalized pass-1 output
        overall_confidence (float): Pass-2 confidence in [0, 1]
        error_message (str): Failure message when status is failed

    Relationships:
        messages: Ordered SequenceMessage rows
        generations: AIGeneration attempt rows
    """

    __tablename__ = "message_sequences"

    id = Column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid4,
        nullable=False,
        comment="Unique sequence ID"
    )

    prospect_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("prospects.id"),
        nullable=False,
        comment="Prospect the sequence targets"
    )

    tov_config_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("tov_configs.id"),
        nullable=False,
        comment="Tone configuration used for pass 2"
    )

    company_context = Column(Text, nullable=False)

    sequence_length = Column(Integer, nullable=False)

    status = Column(
        Enum(
            SequenceStatus,
            name="sequence_status_enum",
            native_enum=False,
            values_callable=lambda enum_cls: [member.value for member in enum_cls],
        ),
        nullable=False,
        default=SequenceStatus.PENDING,
        comment="Current status: pending, generating, completed, failed"
    )

    prospect_analysis = Column(
        JSON().with_variant(JSONB, "postgresql"),
        nullable=True,
        comment="Normalized prospect analysis from pass 1"
    )

    overall_confidence = Column(Float, nullable=True)

    error_message = Column(
        Text,
        nullable=True,
        comment="Error details if status is failed"
    )

    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)

    # Relationships
    prospect = relationship("Prospect", back_populates="sequences")
    tov_config = relationship("TovConfig", back_populates="sequences")

    messages = relationship(
        "SequenceMessage",
        back_populates="sequence",
        order_by="SequenceMessage.step_number",
        cascade="all, delete-orphan"
    )

    generations = relationship(
        "AIGeneration",
        back_populates="sequence",
        order_by="AIGeneration.created_at",
        cascade="all, delete-orphan"
    )

    __table_args__ = (
        Index("ix_message_sequences_created_at", "created_at"),
        Index("ix_message_sequences_status", "status"),
    )

    def transition_to(self, target: SequenceStatus) -> None:
        """
        Move the sequence to a new status.

        Raises:
            InvalidStatusTransitionError: If the change is not a forward step
        """
        current = SequenceStatus(self.status) if self.status is not None else SequenceStatus.PENDING
        if not current.can_transition_to(target):
            raise InvalidStatusTransitionError(current.value, target.value)
        self.status = target
        self.updated_at = _utcnow()

    def touch(self) -> None:
        """Bump updated_at after a field update."""
        self.updated_at = _utcnow()

    def __repr__(self) -> str:
        return (
            f"<MessageSequence(id={self.id}, prospect_id={self.prospect_id}, "
            f"status='{self.status}')>"
        )

"""
Prospect model for SQLAlchemy ORM.
Represents the prospects table: cached subject profiles keyed by LinkedIn URL.
"""

from datetime import datetime, timezone
from uuid import uuid4

from sqlalchemy import Column, String, Text, DateTime, JSON, Uuid
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import relationship

from database.base import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Prospect(Base):
    """
    Prospect model representing a resolved subject profile.

    Attributes:
        id (UUID): Primary key, auto-generated
        linkedin_url (str): Normalized profile URL, unique cache key
        linkedin_username (str): Profile handle extracted from the URL
        full_name, headline, summary, current_company, current_position,
        location, industry (str): Flattened profile fields used in prompts
        profile_data (dict): Full structured profile (experiences, education)

    Relationships:
        sequences: One-to-many relationship with MessageSequence
    """

    __tablename__ = "prospects"

    id = Column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid4,
        nullable=False,
        comment="Unique prospect ID"
    )

    linkedin_url = Column(
        String(500),
        nullable=False,
        unique=True,
        comment="Normalized LinkedIn profile URL"
    )

    linkedin_username = Column(String(255), nullable=True, comment="LinkedIn handle")

    full_name = Column(String(255), nullable=True)
    headline = Column(String(500), nullable=True)
    summary = Column(Text, nullable=True)
    current_company = Column(String(255), nullable=True)
    current_position = Column(String(255), nullable=True)
    location = Column(String(255), nullable=True)
    industry = Column(String(255), nullable=True)

    profile_data = Column(
        JSON().with_variant(JSONB, "postgresql"),
        nullable=True,
        comment="Structured profile blob (experiences, education)"
    )

    # Timestamps
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)

    # Relationships
    sequences = relationship(
        "MessageSequence",
        back_populates="prospect"
    )

    def __repr__(self) -> str:
        """String representation of Prospect model."""
        return f"<Prospect(id={self.id}, linkedin_url='{self.linkedin_url}')>"

    def to_dict(self) -> dict:
        """
        Convert prospect model to dictionary.

        Returns:
            dict: Prospect data, with profile_data as a dict
        """
        return {
            "id": str(self.id),
            "linkedin_url": self.linkedin_url,
            "linkedin_username": self.linkedin_username,
            "full_name": self.full_name,
            "headline": self.headline,
            "summary": self.summary,
            "current_company": self.current_company,
            "current_position": self.current_position,
            "location": self.location,
            "industry": self.industry,
            "profile_data": self.profile_data or {},
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }

"""Sequence-related Pydantic schemas for the generation API."""

import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field, ConfigDict

from models.tov_config import DEFAULT_ENTHUSIASM, DEFAULT_HUMOR
from pipeline.models.core import SequenceStatus
from pipeline.steps.prospect_analyzer.models import ProspectAnalysis
from schemas.pagination import Pagination


class TovConfigInput(BaseModel):
    """Inline tone configuration supplied with a generation request."""

    formality: float = Field(..., ge=0.0, le=1.0)
    warmth: float = Field(..., ge=0.0, le=1.0)
    directness: float = Field(..., ge=0.0, le=1.0)
    humor: float = Field(default=DEFAULT_HUMOR, ge=0.0, le=1.0)
    enthusiasm: float = Field(default=DEFAULT_ENTHUSIASM, ge=0.0, le=1.0)
    custom_instructions: Optional[str] = Field(default=None, max_length=2000)


class GenerateSequenceRequest(BaseModel):
    """Request schema for POST /api/sequences/generate"""

    prospect_url: str = Field(
        ...,
        min_length=1,
        max_length=500,
        description="LinkedIn profile URL (https://linkedin.com/in/<handle>) or bare handle"
    )

    tov_config: Optional[TovConfigInput] = Field(
        default=None,
        description="Inline tone configuration; stored as a new tone config"
    )

    tov_config_id: Optional[uuid.UUID] = Field(
        default=None,
        description="Existing tone config to use; takes precedence over tov_config"
    )

    company_context: str = Field(
        ...,
        min_length=5,
        max_length=5000,
        description="What the sender's company does and what is being offered"
    )

    sequence_length: int = Field(default=3, ge=1, le=10)

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "prospect_url": "https://www.linkedin.com/in/jane-doe",
                "tov_config": {
                    "formality": 0.8,
                    "warmth": 0.6,
                    "directness": 0.5
                },
                "company_context": "We help engineering teams cut onboarding time in half.",
                "sequence_length": 3
            }
        }
    )


class ProspectSummary(BaseModel):
    """Prospect fields shown alongside a sequence."""

    id: Optional[uuid.UUID] = None
    full_name: str = "Unknown"
    headline: str = ""
    current_company: str = ""
    current_position: str = ""
    linkedin_url: str = ""


class TovConfigSummary(BaseModel):
    """Tone config fields shown alongside a sequence."""

    id: Optional[uuid.UUID] = None
    name: str = ""
    formality: float = 0.5
    warmth: float = 0.5
    directness: float = 0.5
    humor: Optional[float] = None
    enthusiasm: Optional[float] = None
    label: str = "Balanced"


class PersonalizationPointResponse(BaseModel):
    point: str = ""
    source: str = ""
    reasoning: str = ""


class MessageResponse(BaseModel):
    """One message of a sequence."""

    step_number: int
    message_type: str
    subject: Optional[str] = None
    body: str
    thinking_process: str = ""
    confidence_score: float = 0.0
    personalization_points: List[PersonalizationPointResponse] = Field(default_factory=list)


class AIMetadata(BaseModel):
    """Aggregate over every generation attempt of a sequence."""

    total_tokens: int = 0
    total_cost_usd: float = 0.0
    models_used: List[str] = Field(
        default_factory=list,
        description="Distinct models, in the order they were first used"
    )


class SequenceResponse(BaseModel):
    """Response schema for a fully hydrated sequence."""

    id: uuid.UUID
    status: SequenceStatus
    prospect: ProspectSummary
    tov_config: TovConfigSummary
    company_context: str
    sequence_length: int
    prospect_analysis: Optional[ProspectAnalysis] = None
    overall_confidence: Optional[float] = None
    error_message: Optional[str] = None
    messages: List[MessageResponse] = Field(default_factory=list)
    ai_metadata: AIMetadata
    created_at: datetime
    updated_at: datetime


class SequenceListItem(BaseModel):
    """Row in GET /api/sequences."""

    id: uuid.UUID
    status: SequenceStatus
    company_context: str
    sequence_length: int
    overall_confidence: Optional[float] = None
    created_at: datetime
    prospect_name: Optional[str] = None
    prospect_headline: Optional[str] = None
    prospect_company: Optional[str] = None
    prospect_url: Optional[str] = None
    tov_name: Optional[str] = None


class SequenceListResponse(BaseModel):
    sequences: List[SequenceListItem]
    pagination: Pagination

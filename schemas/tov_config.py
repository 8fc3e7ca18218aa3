"""Tone-of-voice configuration schemas."""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, ConfigDict

from models.tov_config import DEFAULT_ENTHUSIASM, DEFAULT_HUMOR, TovConfig
from services.tov_translator import get_tov_label


class TovConfigCreate(BaseModel):
    """Request schema for POST /api/tov-configs"""

    name: str = Field(..., min_length=1, max_length=255)
    formality: float = Field(..., ge=0.0, le=1.0)
    warmth: float = Field(..., ge=0.0, le=1.0)
    directness: float = Field(..., ge=0.0, le=1.0)
    humor: float = Field(default=DEFAULT_HUMOR, ge=0.0, le=1.0)
    enthusiasm: float = Field(default=DEFAULT_ENTHUSIASM, ge=0.0, le=1.0)
    custom_instructions: Optional[str] = Field(default=None, max_length=2000)

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "name": "Warm executive",
                "formality": 0.8,
                "warmth": 0.8,
                "directness": 0.4,
                "custom_instructions": "Never mention pricing in the first message."
            }
        }
    )


class TovConfigUpdate(BaseModel):
    """Request schema for PUT /api/tov-configs/{id}; omitted fields are unchanged."""

    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    formality: Optional[float] = Field(default=None, ge=0.0, le=1.0)
    warmth: Optional[float] = Field(default=None, ge=0.0, le=1.0)
    directness: Optional[float] = Field(default=None, ge=0.0, le=1.0)
    humor: Optional[float] = Field(default=None, ge=0.0, le=1.0)
    enthusiasm: Optional[float] = Field(default=None, ge=0.0, le=1.0)
    custom_instructions: Optional[str] = Field(default=None, max_length=2000)


class TovConfigResponse(BaseModel):
    """Response schema for tone config data."""

    id: uuid.UUID
    name: str
    formality: float
    warmth: float
    directness: float
    humor: Optional[float] = None
    enthusiasm: Optional[float] = None
    custom_instructions: Optional[str] = None
    label: str
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)

    @classmethod
    def from_model(cls, config: TovConfig) -> "TovConfigResponse":
        return cls(
            id=config.id,
            name=config.name,
            formality=config.formality,
            warmth=config.warmth,
            directness=config.directness,
            humor=config.humor,
            enthusiasm=config.enthusiasm,
            custom_instructions=config.custom_instructions,
            label=get_tov_label(config.formality, config.warmth, config.directness),
            created_at=config.created_at,
            updated_at=config.updated_at,
        )


class DeleteResponse(BaseModel):
    message: str

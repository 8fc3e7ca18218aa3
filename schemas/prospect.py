"""Prospect schemas."""

import uuid
from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict


class ProspectListItem(BaseModel):
    """Row in GET /api/prospects."""

    id: uuid.UUID
    linkedin_url: str
    full_name: Optional[str] = None
    headline: Optional[str] = None
    current_company: Optional[str] = None
    current_position: Optional[str] = None
    location: Optional[str] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ProspectResponse(ProspectListItem):
    """Full stored prospect, including the structured profile blob."""

    linkedin_username: Optional[str] = None
    summary: Optional[str] = None
    industry: Optional[str] = None
    profile_data: Optional[Dict[str, Any]] = None
    updated_at: datetime

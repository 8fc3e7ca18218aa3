"""
Pydantic schemas for request/response validation.
"""

from schemas.pagination import Pagination
from schemas.prospect import ProspectListItem, ProspectResponse
from schemas.sequence import (
    AIMetadata,
    GenerateSequenceRequest,
    MessageResponse,
    ProspectSummary,
    SequenceListItem,
    SequenceListResponse,
    SequenceResponse,
    TovConfigInput,
    TovConfigSummary,
)
from schemas.tov_config import (
    DeleteResponse,
    TovConfigCreate,
    TovConfigResponse,
    TovConfigUpdate,
)

__all__ = [
    "Pagination",

    # Prospect schemas
    "ProspectListItem",
    "ProspectResponse",

    # Sequence schemas
    "AIMetadata",
    "GenerateSequenceRequest",
    "MessageResponse",
    "ProspectSummary",
    "SequenceListItem",
    "SequenceListResponse",
    "SequenceResponse",
    "TovConfigInput",
    "TovConfigSummary",

    # Tone config schemas
    "DeleteResponse",
    "TovConfigCreate",
    "TovConfigResponse",
    "TovConfigUpdate",
]

"""
Sequence generation API endpoints.

Generation runs synchronously within the request: the response is the
completed sequence, or an error once the sequence has been marked failed.
"""

import uuid

from fastapi import APIRouter, Depends, status
from sqlalchemy import func
from sqlalchemy.orm import Session
import logfire

from api.dependencies import PaginationParams, SequenceGeneratorDep
from api.errors import to_http_exception
from database import get_db
from models.message_sequence import MessageSequence
from models.prospect import Prospect
from models.tov_config import TovConfig
from pipeline.core.exceptions import PipelineExecutionError
from schemas.pagination import Pagination
from schemas.sequence import (
    GenerateSequenceRequest,
    SequenceListItem,
    SequenceListResponse,
    SequenceResponse,
)
from services.sequence_generator import build_sequence_response


router = APIRouter(prefix="/api/sequences", tags=["Sequences"])


@router.post("/generate", response_model=SequenceResponse, status_code=status.HTTP_201_CREATED)
async def generate_sequence(
    request: GenerateSequenceRequest,
    generator: SequenceGeneratorDep,
):
    """
    Generate a personalized outreach sequence.

    Runs prospect analysis then sequence generation, each with retries and
    model fallback. Every model call attempt is recorded.

    Raises:
        HTTPException 400: If neither tov_config nor tov_config_id is given,
            or prospect_url is not a LinkedIn profile
        HTTPException 404: If tov_config_id does not exist
        HTTPException 422: If request validation fails
        HTTPException 502: If the model failed or returned unusable output
    """
    with logfire.span(
        "api.generate_sequence",
        prospect_url=request.prospect_url,
        sequence_length=request.sequence_length
    ):
        try:
            return await generator.generate(request)
        except PipelineExecutionError as e:
            raise to_http_exception(e) from e


@router.get("", response_model=SequenceListResponse)
async def list_sequences(
    pagination: PaginationParams,
    db: Session = Depends(get_db),
):
    """List sequences, newest first, with prospect and tone config names."""
    with logfire.span("api.list_sequences", **pagination):
        rows = (
            db.query(
                MessageSequence,
                Prospect.full_name,
                Prospect.headline,
                Prospect.current_company,
                Prospect.linkedin_url,
                TovConfig.name,
            )
            .outerjoin(Prospect, MessageSequence.prospect_id == Prospect.id)
            .outerjoin(TovConfig, MessageSequence.tov_config_id == TovConfig.id)
            .order_by(MessageSequence.created_at.desc())
            .limit(pagination["limit"])
            .offset(pagination["offset"])
            .all()
        )

        total = db.query(func.count(MessageSequence.id)).scalar() or 0

        sequences = [
            SequenceListItem(
                id=sequence.id,
                status=sequence.status,
                company_context=sequence.company_context,
                sequence_length=sequence.sequence_length,
                overall_confidence=sequence.overall_confidence,
                created_at=sequence.created_at,
                prospect_name=prospect_name,
                prospect_headline=prospect_headline,
                prospect_company=prospect_company,
                prospect_url=prospect_url,
                tov_name=tov_name,
            )
            for sequence, prospect_name, prospect_headline, prospect_company, prospect_url, tov_name in rows
        ]

        return SequenceListResponse(
            sequences=sequences,
            pagination=Pagination(total=total, **pagination),
        )


@router.get("/{sequence_id}", response_model=SequenceResponse)
async def get_sequence(
    sequence_id: uuid.UUID,
    db: Session = Depends(get_db),
):
    """
    Retrieve a sequence with its messages and AI usage totals.

    Raises:
        HTTPException 404: If the sequence doesn't exist
    """
    with logfire.span("api.get_sequence", sequence_id=str(sequence_id)):
        try:
            return build_sequence_response(db, sequence_id)
        except PipelineExecutionError as e:
            raise to_http_exception(e) from e

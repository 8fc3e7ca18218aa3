"""Read-only endpoints for cached prospects."""

import uuid
from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from api.dependencies import PaginationParams
from database import get_db
from models.prospect import Prospect
from schemas.prospect import ProspectListItem, ProspectResponse


router = APIRouter(prefix="/api/prospects", tags=["Prospects"])


@router.get("", response_model=List[ProspectListItem])
async def list_prospects(
    pagination: PaginationParams,
    db: Session = Depends(get_db),
):
    """List cached prospects, newest first."""
    return (
        db.query(Prospect)
        .order_by(Prospect.created_at.desc())
        .limit(pagination["limit"])
        .offset(pagination["offset"])
        .all()
    )


@router.get("/{prospect_id}", response_model=ProspectResponse)
async def get_prospect(
    prospect_id: uuid.UUID,
    db: Session = Depends(get_db),
):
    """Retrieve a cached prospect including its structured profile."""
    prospect = db.get(Prospect, prospect_id)
    if prospect is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Prospect not found"
        )
    return prospect

"""Tone-of-voice configuration CRUD endpoints."""

import uuid
from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
import logfire

from database import get_db
from models.message_sequence import MessageSequence
from models.tov_config import TovConfig
from schemas.tov_config import (
    DeleteResponse,
    TovConfigCreate,
    TovConfigResponse,
    TovConfigUpdate,
)


router = APIRouter(prefix="/api/tov-configs", tags=["Tone Configs"])


def _get_or_404(db: Session, config_id: uuid.UUID) -> TovConfig:
    config = db.get(TovConfig, config_id)
    if config is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="TOV config not found"
        )
    return config


@router.post("", response_model=TovConfigResponse, status_code=status.HTTP_201_CREATED)
async def create_tov_config(
    request: TovConfigCreate,
    db: Session = Depends(get_db),
):
    """Create a named tone configuration."""
    config = TovConfig(**request.model_dump())
    db.add(config)
    db.commit()
    db.refresh(config)

    logfire.info("TOV config created", tov_config_id=str(config.id), name=config.name)
    return TovConfigResponse.from_model(config)


@router.get("", response_model=List[TovConfigResponse])
async def list_tov_configs(db: Session = Depends(get_db)):
    """List tone configurations, newest first."""
    configs = db.query(TovConfig).order_by(TovConfig.created_at.desc()).all()
    return [TovConfigResponse.from_model(config) for config in configs]


@router.get("/{config_id}", response_model=TovConfigResponse)
async def get_tov_config(
    config_id: uuid.UUID,
    db: Session = Depends(get_db),
):
    """Retrieve a tone configuration."""
    return TovConfigResponse.from_model(_get_or_404(db, config_id))


@router.put("/{config_id}", response_model=TovConfigResponse)
async def update_tov_config(
    config_id: uuid.UUID,
    request: TovConfigUpdate,
    db: Session = Depends(get_db),
):
    """Update the supplied fields of a tone configuration."""
    config = _get_or_404(db, config_id)

    for field, value in request.model_dump(exclude_unset=True).items():
        setattr(config, field, value)
    config.touch()

    db.commit()
    db.refresh(config)

    logfire.info("TOV config updated", tov_config_id=str(config.id))
    return TovConfigResponse.from_model(config)


@router.delete("/{config_id}", response_model=DeleteResponse)
async def delete_tov_config(
    config_id: uuid.UUID,
    db: Session = Depends(get_db),
):
    """
    Delete a tone configuration.

    Raises:
        HTTPException 404: If the config doesn't exist
        HTTPException 409: If sequences still reference it
    """
    config = _get_or_404(db, config_id)

    in_use = db.query(MessageSequence.id).filter(MessageSequence.tov_config_id == config_id).first()
    if in_use:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="TOV config is used by existing sequences"
        )

    db.delete(config)
    db.commit()

    logfire.info("TOV config deleted", tov_config_id=str(config_id))
    return DeleteResponse(message="TOV config deleted")

"""Shared FastAPI dependencies."""

from functools import lru_cache
from typing import Annotated

from fastapi import Depends, Query

from config.settings import get_settings, settings
from services.sequence_generator import SequenceGenerator, create_sequence_generator


@lru_cache
def get_sequence_generator() -> SequenceGenerator:
    """
    Process-wide sequence generator built from settings.

    Overridden in tests via app.dependency_overrides.
    """
    return create_sequence_generator(get_settings())


def pagination_params(
    limit: int = Query(default=None, ge=1),
    offset: int = Query(default=0, ge=0)
) -> dict:
    """Reusable pagination with configurable defaults and max limits from settings."""
    if limit is None:
        limit = settings.pagination_default_limit
    limit = min(limit, settings.pagination_max_limit)

    return {"limit": limit, "offset": offset}


# Type aliases for dependency injection
PaginationParams = Annotated[dict, Depends(pagination_params)]
SequenceGeneratorDep = Annotated[SequenceGenerator, Depends(get_sequence_generator)]

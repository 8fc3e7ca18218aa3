"""Mapping from pipeline errors to HTTP responses."""

from fastapi import HTTPException, status

from pipeline.core.exceptions import (
    ExternalAPIError,
    NotFoundError,
    ParseError,
    PipelineExecutionError,
    ValidationError,
)


def to_http_exception(error: PipelineExecutionError) -> HTTPException:
    """
    ValidationError -> 400, NotFoundError -> 404,
    model failures (ExternalAPIError, ParseError) -> 502, anything else -> 500.
    """
    if isinstance(error, ValidationError):
        code = status.HTTP_400_BAD_REQUEST
    elif isinstance(error, NotFoundError):
        code = status.HTTP_404_NOT_FOUND
    elif isinstance(error, (ExternalAPIError, ParseError)):
        code = status.HTTP_502_BAD_GATEWAY
    else:
        code = status.HTTP_500_INTERNAL_SERVER_ERROR

    return HTTPException(status_code=code, detail=str(error))

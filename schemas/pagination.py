"""Pagination metadata returned by list endpoints."""

from pydantic import BaseModel


class Pagination(BaseModel):
    limit: int
    offset: int
    total: int

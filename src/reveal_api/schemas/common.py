"""Shared Pydantic schemas for common API elements."""
from __future__ import annotations

from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """Body returned for every rejected request."""

    kind: str = Field(..., description="Machine-readable error kind")
    detail: str = Field(..., description="Human-readable message")

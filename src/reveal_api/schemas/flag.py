# src/reveal_api/schemas/flag.py
"""Flag-related Pydantic schemas."""

from pydantic import BaseModel, Field


class FlagCreate(BaseModel):
    """Schema for flagging a post or comment."""

    reason: str = Field(..., description="One of the reasons from /flag-reasons")
    details: str | None = Field(
        None,
        description="Free text, required when reason is 'other' (max 500 characters)",
    )


class FlagAccepted(BaseModel):
    """Acknowledgement returned when a flag is recorded."""

    status: str = "flagged"
    target_type: str
    target_id: str
    reason: str


class FlagReasonsResponse(BaseModel):
    """Server-defined flag reasons keyed by value."""

    reasons: dict[str, str]

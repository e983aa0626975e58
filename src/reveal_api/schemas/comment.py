# src/reveal_api/schemas/comment.py
"""Comment-related Pydantic schemas."""

import datetime

from pydantic import BaseModel, ConfigDict, Field


class CommentCreate(BaseModel):
    """Schema for creating a comment on a post."""

    content: str = Field(..., description="Comment body (3-1000 characters)")


class CommentResponse(BaseModel):
    """Schema for comment information returned by the API."""

    id: str
    post_id: str
    content: str
    created_at: datetime.datetime

    model_config = ConfigDict(from_attributes=True)

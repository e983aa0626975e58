# src/reveal_api/schemas/__init__.py
"""
Pydantic schemas for API request/response models.

These schemas define the structure of API data for serialization and validation.
"""

from .comment import CommentCreate, CommentResponse
from .common import ErrorResponse
from .flag import FlagAccepted, FlagCreate, FlagReasonsResponse
from .post import PostCreate, PostResponse, PostSummaryResponse
from .vote import VoteAggregateResponse, VoteCreate

__all__ = [
    "CommentCreate", "CommentResponse",
    "ErrorResponse",
    "FlagAccepted", "FlagCreate", "FlagReasonsResponse",
    "PostCreate", "PostResponse", "PostSummaryResponse",
    "VoteAggregateResponse", "VoteCreate",
]

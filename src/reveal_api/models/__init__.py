"""SQLAlchemy models for the Reveal application."""

from .comment import Comment
from .flag import FLAG_REASON_DESCRIPTIONS, FlagReason, FlagRecord
from .post import Post
from .target import TargetType
from .vote import VoteRecord, VoteState

__all__ = [
    "Comment",
    "FLAG_REASON_DESCRIPTIONS", "FlagReason", "FlagRecord",
    "Post",
    "TargetType",
    "VoteRecord", "VoteState",
]

# src/reveal_api/schemas/post.py
"""Post-related Pydantic schemas."""

import datetime

from pydantic import BaseModel, ConfigDict, Field

from reveal_api.models import Post
from reveal_api.services.votes import VoteAggregate


class PostCreate(BaseModel):
    """Schema for creating a new post.

    Length bounds are enforced after trimming by the post store, so only the
    field types are checked here.
    """

    title: str = Field(..., description="Post title (1-100 characters)")
    content: str = Field(..., description="Post body (10-5000 characters)")


class PostResponse(BaseModel):
    """Schema for post information returned by the API."""

    id: str
    seq: int = Field(..., description="Creation sequence; pass as `after` to page forward")
    title: str
    content: str
    created_at: datetime.datetime

    model_config = ConfigDict(from_attributes=True)


class PostSummaryResponse(PostResponse):
    """Post in a listing, with its vote tallies as seen by the caller."""

    upvotes: int = 0
    downvotes: int = 0
    score: int = 0
    user_vote: str = Field("none", alias="userVote")

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    @classmethod
    def from_post(cls, post: Post, aggregate: VoteAggregate) -> "PostSummaryResponse":
        return cls(
            id=post.id,
            seq=post.seq,
            title=post.title,
            content=post.content,
            created_at=post.created_at,
            upvotes=aggregate.upvotes,
            downvotes=aggregate.downvotes,
            score=aggregate.score,
            user_vote=aggregate.user_vote.value,
        )

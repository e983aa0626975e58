# src/reveal_api/schemas/vote.py
"""Vote-related Pydantic schemas."""

from pydantic import BaseModel, ConfigDict, Field

from reveal_api.services.votes import VoteAggregate


class VoteCreate(BaseModel):
    """Schema for casting a vote.

    Only ``upvote`` and ``downvote`` are accepted; a vote is retracted by
    casting the same type again.
    """

    vote_type: str = Field(..., description="'upvote' or 'downvote'")


class VoteAggregateResponse(BaseModel):
    """Full vote state of a target as seen by the requesting actor."""

    target_type: str
    target_id: str
    upvotes: int
    downvotes: int
    score: int
    user_vote: str = Field(..., alias="userVote")

    model_config = ConfigDict(populate_by_name=True)

    @classmethod
    def from_aggregate(cls, aggregate: VoteAggregate) -> "VoteAggregateResponse":
        return cls(
            target_type=aggregate.target_type.value,
            target_id=aggregate.target_id,
            upvotes=aggregate.upvotes,
            downvotes=aggregate.downvotes,
            score=aggregate.score,
            user_vote=aggregate.user_vote.value,
        )

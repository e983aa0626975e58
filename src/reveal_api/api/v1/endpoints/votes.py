# src/reveal_api/api/v1/endpoints/votes.py
"""Vote endpoints shared by posts and comments."""

from fastapi import APIRouter

from reveal_api.api.v1.dependencies import (
    CurrentActorDep,
    EngagementDep,
    OptionalActorDep,
    TargetCollection,
)
from reveal_api.schemas.vote import VoteAggregateResponse, VoteCreate

router = APIRouter(tags=["votes"])


@router.get("/{collection}/{target_id}/votes", response_model=VoteAggregateResponse)
def get_votes(
    collection: TargetCollection,
    target_id: str,
    actor_id: OptionalActorDep,
    service: EngagementDep,
) -> VoteAggregateResponse:
    """Get vote counts for a post or comment and the caller's current vote."""
    aggregate = service.get_votes(collection.target_type, target_id, actor_id)
    return VoteAggregateResponse.from_aggregate(aggregate)


@router.post("/{collection}/{target_id}/vote", response_model=VoteAggregateResponse)
def cast_vote(
    collection: TargetCollection,
    target_id: str,
    vote_data: VoteCreate,
    actor_id: CurrentActorDep,
    service: EngagementDep,
) -> VoteAggregateResponse:
    """Vote on a post or comment.

    Casting the same vote type twice retracts the vote. The response is the
    full updated aggregate.
    """
    aggregate = service.cast_vote(actor_id, collection.target_type, target_id, vote_data.vote_type)
    return VoteAggregateResponse.from_aggregate(aggregate)

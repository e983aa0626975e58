# src/reveal_api/api/v1/endpoints/flags.py
"""Flag endpoints shared by posts and comments."""

from fastapi import APIRouter, status

from reveal_api.api.v1.dependencies import CurrentActorDep, EngagementDep, TargetCollection
from reveal_api.schemas.flag import FlagAccepted, FlagCreate, FlagReasonsResponse

router = APIRouter(tags=["flags"])


@router.get("/flag-reasons", response_model=FlagReasonsResponse)
def get_flag_reasons(service: EngagementDep) -> FlagReasonsResponse:
    """Get the available flag reasons."""
    return FlagReasonsResponse(reasons=service.list_flag_reasons())


@router.post(
    "/{collection}/{target_id}/flag",
    response_model=FlagAccepted,
    status_code=status.HTTP_201_CREATED,
)
def submit_flag(
    collection: TargetCollection,
    target_id: str,
    flag_data: FlagCreate,
    actor_id: CurrentActorDep,
    service: EngagementDep,
) -> FlagAccepted:
    """Flag a post or comment. Each actor may flag a target once."""
    record = service.submit_flag(
        actor_id,
        collection.target_type,
        target_id,
        flag_data.reason,
        flag_data.details,
    )
    return FlagAccepted(
        target_type=record.target_type,
        target_id=record.target_id,
        reason=record.reason,
    )

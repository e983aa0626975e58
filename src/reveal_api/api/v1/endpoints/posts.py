# src/reveal_api/api/v1/endpoints/posts.py
"""Post and comment endpoints for the Reveal API."""

from fastapi import APIRouter, Query, status

from reveal_api.api.v1.dependencies import CurrentActorDep, EngagementDep, OptionalActorDep
from reveal_api.models import Comment, Post
from reveal_api.schemas.comment import CommentCreate, CommentResponse
from reveal_api.schemas.post import PostCreate, PostResponse, PostSummaryResponse
from reveal_api.services.content import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE

router = APIRouter(prefix="/posts", tags=["posts"])


@router.get("", response_model=list[PostSummaryResponse])
def list_posts(
    service: EngagementDep,
    actor_id: OptionalActorDep,
    limit: int = Query(
        DEFAULT_PAGE_SIZE,
        ge=1,
        le=MAX_PAGE_SIZE,
        description="Maximum number of posts to return",
    ),
    after: int | None = Query(None, description="Return posts created after this seq"),
) -> list[PostSummaryResponse]:
    """List posts in creation order with their vote counts.

    Args:
        service: Engagement service for this request
        actor_id: Caller, when known, for `userVote`
        limit: Maximum number of posts to return (max 100)
        after: Cursor from the `seq` of the last post already seen

    Returns:
        Posts in ascending creation order
    """
    return [
        PostSummaryResponse.from_post(post, aggregate)
        for post, aggregate in service.list_posts(limit=limit, after=after, actor_id=actor_id)
    ]


@router.post("", response_model=PostResponse, status_code=status.HTTP_201_CREATED)
def create_post(
    payload: PostCreate,
    actor_id: CurrentActorDep,
    service: EngagementDep,
) -> Post:
    """Submit a post anonymously."""
    return service.create_post(actor_id, payload.title, payload.content)


@router.get("/{post_id}/comments", response_model=list[CommentResponse])
def list_comments(post_id: str, service: EngagementDep) -> list[Comment]:
    """Get the comments on a post, oldest first."""
    return service.list_comments(post_id)


@router.post(
    "/{post_id}/comments",
    response_model=CommentResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_comment(
    post_id: str,
    payload: CommentCreate,
    actor_id: CurrentActorDep,
    service: EngagementDep,
) -> Comment:
    """Submit a comment on a post."""
    return service.create_comment(actor_id, post_id, payload.content)

"""Shared API dependencies for actor resolution and service wiring."""

import enum
from typing import Annotated

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from reveal_api.core.errors import ActorUnavailableError
from reveal_api.core.settings import settings
from reveal_api.db.session import get_db
from reveal_api.models import TargetType
from reveal_api.services.engagement import EngagementService
from reveal_api.services.identity import ActorIdentityResolver, get_identity_resolver
from reveal_api.services.rate_limit import RateLimiter, get_rate_limiter

# Type alias for database session dependency
SessionDep = Annotated[Session, Depends(get_db)]


def get_rate_limiter_dep() -> RateLimiter:
    """Return the shared rate limiter."""
    return get_rate_limiter()


def get_identity_resolver_dep() -> ActorIdentityResolver:
    """Return the shared actor identity resolver."""
    return get_identity_resolver()


RateLimiterDep = Annotated[RateLimiter, Depends(get_rate_limiter_dep)]
ResolverDep = Annotated[ActorIdentityResolver, Depends(get_identity_resolver_dep)]


def request_origin(request: Request) -> str | None:
    """Return the origin metadata used to derive the actor.

    Args:
        request: Incoming request

    Returns:
        When forwarded headers are trusted, the ``X-Forwarded-For`` hop
        appended by the outermost trusted proxy; otherwise the socket peer
        address. None if neither is available.
    """
    if settings.trust_forwarded_for:
        forwarded = request.headers.get("x-forwarded-for", "")
        hops = [hop.strip() for hop in forwarded.split(",") if hop.strip()]
        # Hops to the left of the trusted proxies are client-controlled.
        if len(hops) >= settings.trusted_proxy_count:
            return hops[-settings.trusted_proxy_count]
    if request.client is None:
        return None
    return request.client.host


def get_current_actor(request: Request, resolver: ResolverDep) -> bytes:
    """Resolve the anonymous actor for a mutating request.

    Raises:
        ActorUnavailableError: If the request carries no origin metadata
    """
    return resolver.resolve(request_origin(request))


def get_optional_actor(request: Request, resolver: ResolverDep) -> bytes | None:
    """Resolve the actor for a read, or None when the origin is unknown."""
    try:
        return resolver.resolve(request_origin(request))
    except ActorUnavailableError:
        return None


def get_engagement_service(db: SessionDep, limiter: RateLimiterDep) -> EngagementService:
    """Build the per-request engagement service."""
    return EngagementService(db, limiter)


# Type aliases for actor and service dependencies
CurrentActorDep = Annotated[bytes, Depends(get_current_actor)]
OptionalActorDep = Annotated[bytes | None, Depends(get_optional_actor)]
EngagementDep = Annotated[EngagementService, Depends(get_engagement_service)]


class TargetCollection(str, enum.Enum):
    """URL collection names for votable and flaggable content."""

    POSTS = "posts"
    COMMENTS = "comments"

    @property
    def target_type(self) -> TargetType:
        return TargetType.POST if self is TargetCollection.POSTS else TargetType.COMMENT

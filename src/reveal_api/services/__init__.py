# src/reveal_api/services/__init__.py
"""Business logic services for the Reveal application."""

from .content import CommentStore, PostStore
from .engagement import EngagementService
from .flags import FlagRegistry
from .identity import ActorIdentityResolver
from .rate_limit import InMemoryRateLimiter, RateLimiter, RedisRateLimiter
from .votes import VoteAggregate, VoteLedger

__all__ = [
    "ActorIdentityResolver",
    "CommentStore",
    "EngagementService",
    "FlagRegistry",
    "InMemoryRateLimiter",
    "PostStore",
    "RateLimiter",
    "RedisRateLimiter",
    "VoteAggregate",
    "VoteLedger",
]

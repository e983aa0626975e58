# src/reveal_api/api/v1/__init__.py
"""Version 1 API endpoints."""

from .endpoints import flags_router, posts_router, system_router, votes_router

__all__ = [
    "flags_router",
    "posts_router",
    "system_router",
    "votes_router",
]

# src/reveal_api/api/v1/endpoints/__init__.py
"""API endpoint modules for version 1."""

from .flags import router as flags_router
from .posts import router as posts_router
from .system import router as system_router
from .votes import router as votes_router

__all__ = [
    "flags_router",
    "posts_router",
    "system_router",
    "votes_router",
]

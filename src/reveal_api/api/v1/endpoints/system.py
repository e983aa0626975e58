"""System and transparency endpoints for the Reveal API."""

from __future__ import annotations

from fastapi import APIRouter

from reveal_api.core.settings import settings
from reveal_api.services import content
from reveal_api.services.flags import DETAILS_MAX_LENGTH, list_reasons

router = APIRouter(prefix="/system", tags=["system", "transparency"])


@router.get("/config")
def get_public_config() -> dict[str, object]:
    """Return a sanitized snapshot of public runtime configuration.

    Excludes secrets and connection strings; clients use the rate limits to
    pace retries after a 429.
    """
    return {
        "app": {
            "name": settings.app_name,
            "version": settings.app_version,
        },
        "rate_limits": {
            action: {"max_actions": limit, "window_seconds": window}
            for action, (limit, window) in settings.rate_limit_budgets.items()
        },
        "limits": {
            "title": [content.TITLE_MIN_LENGTH, content.TITLE_MAX_LENGTH],
            "post_content": [content.POST_CONTENT_MIN_LENGTH, content.POST_CONTENT_MAX_LENGTH],
            "comment_content": [content.COMMENT_MIN_LENGTH, content.COMMENT_MAX_LENGTH],
            "flag_details_max": DETAILS_MAX_LENGTH,
            "page_size_max": content.MAX_PAGE_SIZE,
        },
        "flag_reasons": sorted(list_reasons()),
    }

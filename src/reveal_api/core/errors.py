"""Error taxonomy shared by the engagement services and the HTTP layer.

Every caller-facing failure carries a machine-readable ``kind`` and the HTTP
status it maps to. ``InternalError`` never carries storage details in its
public message; the detail is logged where it is raised.
"""

from __future__ import annotations


class EngagementError(Exception):
    """Base exception for all engagement ledger failures."""

    kind: str = "error"
    status_code: int = 400

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(EngagementError):
    """Malformed or out-of-range input."""

    kind = "validation_error"
    status_code = 400


class ActorUnavailableError(EngagementError):
    """Request origin metadata is missing, so no actor can be derived."""

    kind = "actor_unavailable"
    status_code = 400


class NotFoundError(EngagementError):
    """The referenced post or comment does not exist."""

    kind = "not_found"
    status_code = 404


class ConflictError(EngagementError):
    """Duplicate flag submission by the same actor on the same target."""

    kind = "conflict"
    status_code = 409


class RateLimitedError(EngagementError):
    """Action budget exceeded for the current window."""

    kind = "rate_limited"
    status_code = 429

    def __init__(self, message: str, *, retry_after: float = 0.0) -> None:
        super().__init__(message)
        self.retry_after = retry_after


class InternalError(EngagementError):
    """Storage or transaction failure; not the caller's fault."""

    kind = "internal_error"
    status_code = 500

    def __init__(self, message: str = "Internal server error") -> None:
        super().__init__(message)

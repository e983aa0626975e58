"""Flag registry: one flag per (target, actor) against a closed reason set."""

from __future__ import annotations

import logging

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from reveal_api.core.errors import ConflictError, ValidationError
from reveal_api.models import FLAG_REASON_DESCRIPTIONS, FlagReason, FlagRecord, TargetType
from reveal_api.services.content import parse_target_type, require_target
from reveal_api.services.identity import actor_tag
from reveal_api.services.locks import KeyedLockTable, get_flag_locks

logger = logging.getLogger(__name__)

DETAILS_MAX_LENGTH = 500


def list_reasons() -> dict[str, str]:
    """Return the server-defined reason set with human descriptions."""
    return {reason.value: description for reason, description in FLAG_REASON_DESCRIPTIONS.items()}


def validate_flag(reason: FlagReason | str, details: str | None) -> tuple[FlagReason, str | None]:
    """Check a reason/details pair and return the normalised values.

    Raises:
        ValidationError: For an unknown reason, over-long details, or
            ``other`` without details.
    """
    try:
        parsed = FlagReason(reason)
    except ValueError as err:
        raise ValidationError("Invalid flag reason") from err

    text = (details or "").strip()
    if len(text) > DETAILS_MAX_LENGTH:
        raise ValidationError(f"Details too long (max {DETAILS_MAX_LENGTH} characters)")
    if parsed is FlagReason.OTHER and not text:
        raise ValidationError("Details required when reason is 'other'")
    return parsed, text or None


class FlagRegistry:
    """First-submission-wins flags on posts and comments."""

    def __init__(self, db: Session, *, locks: KeyedLockTable | None = None) -> None:
        self.db = db
        self.locks = locks or get_flag_locks()

    def _existing(self, target_type: TargetType, target_id: str, actor_id: bytes) -> FlagRecord | None:
        return self.db.get(FlagRecord, (target_type.value, target_id, actor_id))

    def submit_flag(
        self,
        target_type: TargetType | str,
        target_id: str,
        actor_id: bytes,
        reason: FlagReason | str,
        details: str | None = None,
    ) -> FlagRecord:
        """Persist a flag unless the actor already flagged this target.

        Raises:
            ValidationError: If the reason/details pair is invalid.
            NotFoundError: If the target does not exist.
            ConflictError: If a flag already exists for this actor and target.
        """
        parsed_reason, clean_details = validate_flag(reason, details)
        target_type = parse_target_type(target_type)
        key = (target_type.value, target_id, actor_id)

        with self.locks.hold(key):
            try:
                require_target(self.db, target_type, target_id)
                if self._existing(target_type, target_id, actor_id) is not None:
                    raise ConflictError(f"You have already flagged this {target_type.value}")
                record = FlagRecord(
                    target_type=target_type.value,
                    target_id=target_id,
                    actor_id=actor_id,
                    reason=parsed_reason.value,
                    details=clean_details,
                )
                self.db.add(record)
                self.db.flush()
                self.db.commit()
            except IntegrityError as err:
                self.db.rollback()
                raise ConflictError(f"You have already flagged this {target_type.value}") from err
            except Exception:
                self.db.rollback()
                raise

        logger.info(
            "Flag by %s on %s %s: %s",
            actor_tag(actor_id),
            target_type.value,
            target_id,
            parsed_reason.value,
        )
        return record

    def flag_summary(self, target_type: TargetType | str, target_id: str) -> dict[str, int]:
        """Return flag counts per reason for a target, for moderation consumers."""
        target_type = parse_target_type(target_type)
        require_target(self.db, target_type, target_id)
        rows = self.db.execute(
            select(FlagRecord.reason, func.count())
            .where(
                FlagRecord.target_type == target_type.value,
                FlagRecord.target_id == target_id,
            )
            .group_by(FlagRecord.reason)
        ).all()
        return {reason: int(count) for reason, count in rows}

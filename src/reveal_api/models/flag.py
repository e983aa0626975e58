# src/reveal_api/models/flag.py
"""Models recording content flags submitted by anonymous actors."""

import datetime
import enum

from sqlalchemy import CheckConstraint, DateTime, Index, LargeBinary, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from reveal_api.db.session import Base
from reveal_api.db.time import utcnow


class FlagReason(str, enum.Enum):
    """Closed set of reasons a target can be flagged for."""

    SPAM = "spam"
    INAPPROPRIATE = "inappropriate"
    HATE_SPEECH = "hate_speech"
    HARASSMENT = "harassment"
    VIOLENCE = "violence"
    OTHER = "other"


FLAG_REASON_DESCRIPTIONS: dict[FlagReason, str] = {
    FlagReason.SPAM: "Spam or unwanted content",
    FlagReason.INAPPROPRIATE: "Inappropriate content",
    FlagReason.HATE_SPEECH: "Hate speech or discrimination",
    FlagReason.HARASSMENT: "Harassment or bullying",
    FlagReason.VIOLENCE: "Violence or threats",
    FlagReason.OTHER: "Other (please specify)",
}


class FlagRecord(Base):
    """First-submission-wins flag from one actor on one target.

    Rows are never updated or withdrawn; a second submission for the same key
    is a conflict.
    """

    __tablename__ = "flag_record"
    __table_args__ = (
        CheckConstraint("target_type IN ('post', 'comment')", name="ck_flag_record_target_type"),
        Index("ix_flag_record_target", "target_type", "target_id"),
    )

    target_type: Mapped[str] = mapped_column(String(16), primary_key=True)
    target_id: Mapped[str] = mapped_column(String(36), primary_key=True)
    actor_id: Mapped[bytes] = mapped_column(LargeBinary(32), primary_key=True)

    reason: Mapped[str] = mapped_column(String(32), nullable=False)
    details: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime.datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )

# src/reveal_api/models/vote.py
"""Models capturing voting interactions on posts and comments."""

import datetime
import enum

from sqlalchemy import CheckConstraint, DateTime, Index, LargeBinary, String
from sqlalchemy.orm import Mapped, mapped_column

from reveal_api.db.session import Base
from reveal_api.db.time import utcnow


class VoteState(str, enum.Enum):
    """Current state of one actor's vote on one target."""

    NONE = "none"
    UPVOTE = "upvote"
    DOWNVOTE = "downvote"


class VoteRecord(Base):
    """Per-actor vote on a post or comment.

    The composite primary key allows at most one live record per
    (target_type, target_id, actor_id). Retracted votes keep their row with
    state ``none`` so the record set still covers every actor that voted.
    """

    __tablename__ = "vote_record"
    __table_args__ = (
        CheckConstraint("target_type IN ('post', 'comment')", name="ck_vote_record_target_type"),
        CheckConstraint(
            "state IN ('none', 'upvote', 'downvote')",
            name="ck_vote_record_state",
        ),
        Index("ix_vote_record_target", "target_type", "target_id"),
    )

    target_type: Mapped[str] = mapped_column(String(16), primary_key=True)
    target_id: Mapped[str] = mapped_column(String(36), primary_key=True)
    actor_id: Mapped[bytes] = mapped_column(LargeBinary(32), primary_key=True)

    state: Mapped[str] = mapped_column(String(16), nullable=False, default=VoteState.NONE.value)
    updated_at: Mapped[datetime.datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        onupdate=utcnow,
    )

# src/reveal_api/models/comment.py
"""SQLAlchemy model for comments attached to posts."""

import datetime

from sqlalchemy import DateTime, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from reveal_api.db.session import Base
from reveal_api.db.time import utcnow
from reveal_api.models.post import new_public_id


class Comment(Base):
    """Write-once comment on a post."""

    __tablename__ = "comment"
    __table_args__ = (Index("ix_comment_post_id_seq", "post_id", "seq"),)

    seq: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    id: Mapped[str] = mapped_column(
        String(36),
        unique=True,
        nullable=False,
        default=new_public_id,
    )
    post_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("post.id"),
        nullable=False,
    )
    content: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime.datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )

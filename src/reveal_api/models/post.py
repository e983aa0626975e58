# src/reveal_api/models/post.py
"""SQLAlchemy model for anonymous posts."""

import datetime
import uuid

from sqlalchemy import DateTime, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from reveal_api.db.session import Base
from reveal_api.db.time import utcnow


def new_public_id() -> str:
    """Return a fresh opaque identifier for a content item."""
    return str(uuid.uuid4())


class Post(Base):
    """Primary content entity.

    Posts are write-once: there is no update or delete path, and nothing about
    the author is stored.
    """

    __tablename__ = "post"

    # Monotonic insertion sequence; used for ordering and pagination cursors only.
    seq: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    id: Mapped[str] = mapped_column(
        String(36),
        unique=True,
        nullable=False,
        default=new_public_id,
    )
    title: Mapped[str] = mapped_column(String(100), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime.datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )

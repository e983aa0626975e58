"""Write-once stores for posts and comments."""

from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.orm import Session

from reveal_api.core.errors import NotFoundError, ValidationError
from reveal_api.models import Comment, Post, TargetType

logger = logging.getLogger(__name__)

TITLE_MIN_LENGTH = 1
TITLE_MAX_LENGTH = 100
POST_CONTENT_MIN_LENGTH = 10
POST_CONTENT_MAX_LENGTH = 5000
COMMENT_MIN_LENGTH = 3
COMMENT_MAX_LENGTH = 1000

DEFAULT_PAGE_SIZE = 50
MAX_PAGE_SIZE = 100


def clean_text(value: str | None, field: str, *, min_length: int, max_length: int) -> str:
    """Trim surrounding whitespace and enforce length bounds.

    Raises:
        ValidationError: If the trimmed value is shorter or longer than allowed.
    """
    text = (value or "").strip()
    if len(text) < min_length:
        if min_length <= 1:
            raise ValidationError(f"{field} cannot be empty")
        raise ValidationError(f"{field} must be at least {min_length} characters long")
    if len(text) > max_length:
        raise ValidationError(f"{field} too long (max {max_length} characters)")
    return text


class PostStore:
    """Append-only access to posts."""

    def __init__(self, db: Session) -> None:
        self.db = db

    def create_post(self, title: str, content: str) -> Post:
        """Validate and stage a new post; the caller owns the commit."""
        post = Post(
            title=clean_text(
                title, "Title", min_length=TITLE_MIN_LENGTH, max_length=TITLE_MAX_LENGTH
            ),
            content=clean_text(
                content,
                "Content",
                min_length=POST_CONTENT_MIN_LENGTH,
                max_length=POST_CONTENT_MAX_LENGTH,
            ),
        )
        self.db.add(post)
        self.db.flush()
        logger.debug("Created post %s", post.id)
        return post

    def get_post(self, post_id: str) -> Post | None:
        return self.db.execute(select(Post).where(Post.id == post_id)).scalars().first()

    def require_post(self, post_id: str) -> Post:
        post = self.get_post(post_id)
        if post is None:
            raise NotFoundError("Post not found")
        return post

    def list_posts(self, limit: int = DEFAULT_PAGE_SIZE, after: int | None = None) -> list[Post]:
        """Return posts in creation order.

        Args:
            limit: Page size, between 1 and ``MAX_PAGE_SIZE``.
            after: Only return posts created after the post with this ``seq``.
        """
        if not 1 <= limit <= MAX_PAGE_SIZE:
            raise ValidationError(f"limit must be between 1 and {MAX_PAGE_SIZE}")
        stmt = select(Post)
        if after is not None:
            stmt = stmt.where(Post.seq > after)
        stmt = stmt.order_by(Post.seq).limit(limit)
        return list(self.db.execute(stmt).scalars())


class CommentStore:
    """Append-only access to comments."""

    def __init__(self, db: Session) -> None:
        self.db = db
        self.posts = PostStore(db)

    def create_comment(self, post_id: str, content: str) -> Comment:
        """Validate and stage a new comment on an existing post."""
        text = clean_text(
            content,
            "Comment",
            min_length=COMMENT_MIN_LENGTH,
            max_length=COMMENT_MAX_LENGTH,
        )
        self.posts.require_post(post_id)
        comment = Comment(post_id=post_id, content=text)
        self.db.add(comment)
        self.db.flush()
        logger.debug("Created comment %s on post %s", comment.id, post_id)
        return comment

    def get_comment(self, comment_id: str) -> Comment | None:
        return self.db.execute(select(Comment).where(Comment.id == comment_id)).scalars().first()

    def list_comments(self, post_id: str) -> list[Comment]:
        """Return the comments of a post in creation order."""
        self.posts.require_post(post_id)
        stmt = select(Comment).where(Comment.post_id == post_id).order_by(Comment.seq)
        return list(self.db.execute(stmt).scalars())


def parse_target_type(target_type: TargetType | str) -> TargetType:
    """Coerce a target kind, rejecting anything but post or comment."""
    try:
        return TargetType(target_type)
    except ValueError as err:
        raise ValidationError("Invalid target type") from err


def target_exists(db: Session, target_type: TargetType | str, target_id: str) -> bool:
    """Return True if the post or comment named by the target exists."""
    model = Post if parse_target_type(target_type) is TargetType.POST else Comment
    found = db.execute(select(model.seq).where(model.id == target_id)).first()
    return found is not None


def require_target(db: Session, target_type: TargetType | str, target_id: str) -> None:
    """Raise NotFoundError unless the target exists."""
    if not target_exists(db, target_type, target_id):
        noun = "Post" if parse_target_type(target_type) is TargetType.POST else "Comment"
        raise NotFoundError(f"{noun} not found")

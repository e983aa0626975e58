"""Request-level composition of identity, throttling and the ledger stores.

Every mutating operation runs: rate-limit check for the resolved actor, then
the target-specific store, committed as one unit. Reads go straight to the
stores and never touch the limiter or write anything.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from reveal_api.core.errors import EngagementError, InternalError, RateLimitedError
from reveal_api.models import Comment, FlagRecord, Post, TargetType
from reveal_api.services.content import DEFAULT_PAGE_SIZE, CommentStore, PostStore
from reveal_api.services.flags import FlagRegistry, list_reasons
from reveal_api.services.identity import actor_tag
from reveal_api.services.rate_limit import ActionClass, RateLimiter
from reveal_api.services.votes import VoteAggregate, VoteLedger

logger = logging.getLogger(__name__)

_RATE_LIMIT_MESSAGES = {
    ActionClass.POST_CREATE: "You're posting too frequently. Please wait a moment before posting again.",
    ActionClass.COMMENT_CREATE: (
        "You're commenting too frequently. Please wait a moment before commenting again."
    ),
    ActionClass.VOTE: "You're voting too frequently. Please wait a moment.",
    ActionClass.FLAG: "You're flagging too frequently. Please wait a moment.",
}


class EngagementService:
    """Engagement operations bound to one request's database session."""

    def __init__(
        self,
        db: Session,
        limiter: RateLimiter,
        *,
        votes: VoteLedger | None = None,
        flags: FlagRegistry | None = None,
    ) -> None:
        self.db = db
        self.limiter = limiter
        self.posts = PostStore(db)
        self.comments = CommentStore(db)
        self.votes = votes or VoteLedger(db)
        self.flags = flags or FlagRegistry(db)

    @contextmanager
    def _storage_guard(self, operation: str) -> Iterator[None]:
        """Roll back and report storage failures as an opaque InternalError."""
        try:
            yield
        except EngagementError:
            self.db.rollback()
            raise
        except SQLAlchemyError as err:
            self.db.rollback()
            logger.exception("Storage failure during %s", operation)
            raise InternalError() from err

    def _throttle(self, actor_id: bytes, action: ActionClass) -> None:
        if self.limiter.check(actor_id, action):
            return
        retry_after = self.limiter.retry_after(actor_id, action)
        logger.info(
            "Rate limited %s for %s (retry in %.1fs)",
            actor_tag(actor_id),
            action.value,
            retry_after,
        )
        raise RateLimitedError(_RATE_LIMIT_MESSAGES[action], retry_after=retry_after)

    # --- Mutations -----------------------------------------------------------------
    def create_post(self, actor_id: bytes, title: str, content: str) -> Post:
        self._throttle(actor_id, ActionClass.POST_CREATE)
        with self._storage_guard("create_post"):
            post = self.posts.create_post(title, content)
            self.db.commit()
        logger.info("Post %s created", post.id)
        return post

    def create_comment(self, actor_id: bytes, post_id: str, content: str) -> Comment:
        self._throttle(actor_id, ActionClass.COMMENT_CREATE)
        with self._storage_guard("create_comment"):
            comment = self.comments.create_comment(post_id, content)
            self.db.commit()
        logger.info("Comment %s created on post %s", comment.id, post_id)
        return comment

    def cast_vote(
        self,
        actor_id: bytes,
        target_type: TargetType | str,
        target_id: str,
        vote_type: str,
    ) -> VoteAggregate:
        self._throttle(actor_id, ActionClass.VOTE)
        with self._storage_guard("cast_vote"):
            return self.votes.apply_vote(target_type, target_id, actor_id, vote_type)

    def submit_flag(
        self,
        actor_id: bytes,
        target_type: TargetType | str,
        target_id: str,
        reason: str,
        details: str | None = None,
    ) -> FlagRecord:
        self._throttle(actor_id, ActionClass.FLAG)
        with self._storage_guard("submit_flag"):
            return self.flags.submit_flag(target_type, target_id, actor_id, reason, details)

    # --- Reads ---------------------------------------------------------------------
    def list_posts(
        self,
        limit: int = DEFAULT_PAGE_SIZE,
        after: int | None = None,
        actor_id: bytes | None = None,
    ) -> list[tuple[Post, VoteAggregate]]:
        """Return a page of posts, each paired with its vote tallies.

        The tallies for the whole page come from one grouped query.
        """
        with self._storage_guard("list_posts"):
            posts = self.posts.list_posts(limit=limit, after=after)
            tallies = self.votes.aggregates_for(
                TargetType.POST, [post.id for post in posts], actor_id
            )
        return [(post, tallies[post.id]) for post in posts]

    def list_comments(self, post_id: str) -> list[Comment]:
        with self._storage_guard("list_comments"):
            return self.comments.list_comments(post_id)

    def get_votes(
        self,
        target_type: TargetType | str,
        target_id: str,
        actor_id: bytes | None = None,
    ) -> VoteAggregate:
        with self._storage_guard("get_votes"):
            return self.votes.get_aggregate(target_type, target_id, actor_id)

    @staticmethod
    def list_flag_reasons() -> dict[str, str]:
        return list_reasons()

"""Tests for the request-level engagement service."""

import pytest
from sqlalchemy import select
from sqlalchemy.exc import OperationalError

from reveal_api.core.errors import InternalError, RateLimitedError, ValidationError
from reveal_api.models import Post, VoteRecord
from reveal_api.services.engagement import EngagementService
from reveal_api.services.rate_limit import InMemoryRateLimiter

TIGHT_BUDGETS = {
    "post-create": (2, 600),
    "comment-create": (2, 300),
    "vote": (2, 120),
    "flag": (2, 600),
}


@pytest.fixture()
def tight_limiter(clock) -> InMemoryRateLimiter:
    return InMemoryRateLimiter(TIGHT_BUDGETS, clock)


@pytest.fixture()
def service(db_session, tight_limiter) -> EngagementService:
    return EngagementService(db_session, tight_limiter)


def test_vote_over_budget_leaves_ledger_unchanged(service, test_post, actor) -> None:
    voter = actor("10.0.0.1")
    service.cast_vote(voter, "post", test_post.id, "upvote")
    service.cast_vote(voter, "post", test_post.id, "downvote")

    with pytest.raises(RateLimitedError) as excinfo:
        service.cast_vote(voter, "post", test_post.id, "upvote")
    assert excinfo.value.retry_after == pytest.approx(120.0)

    aggregate = service.get_votes("post", test_post.id, voter)
    assert (aggregate.upvotes, aggregate.downvotes) == (0, 1)
    assert aggregate.user_vote.value == "downvote"


def test_budget_recovers_after_window(service, test_post, actor, clock) -> None:
    voter = actor("10.0.0.1")
    service.cast_vote(voter, "post", test_post.id, "upvote")
    service.cast_vote(voter, "post", test_post.id, "upvote")
    clock.advance(120)
    assert service.cast_vote(voter, "post", test_post.id, "upvote").upvotes == 1


def test_reads_do_not_consume_budget(service, tight_limiter, test_post, actor) -> None:
    for _ in range(10):
        service.get_votes("post", test_post.id, actor("10.0.0.1"))
        service.list_posts()
        service.list_comments(test_post.id)
    assert tight_limiter.active_windows() == 0


def test_rejected_input_still_counts_against_budget(service, actor) -> None:
    author = actor("10.0.0.1")
    with pytest.raises(ValidationError):
        service.create_post(author, "Title", "too short")
    service.create_post(author, "Title", "long enough body")
    with pytest.raises(RateLimitedError, match="posting too frequently"):
        service.create_post(author, "Title", "long enough body")


def test_create_comment_commits(service, db_session, test_post, actor) -> None:
    comment = service.create_comment(actor("10.0.0.1"), test_post.id, "nice post")
    assert [c.id for c in service.list_comments(test_post.id)] == [comment.id]


def test_storage_failure_is_opaque_and_rolled_back(service, db_session, actor, monkeypatch) -> None:
    def _fail(title, content):
        db_session.add(Post(title=title, content=content))
        db_session.flush()
        raise OperationalError("INSERT INTO post", {}, Exception("disk I/O error"))

    monkeypatch.setattr(service.posts, "create_post", _fail)

    with pytest.raises(InternalError) as excinfo:
        service.create_post(actor("10.0.0.1"), "Title", "long enough body")
    assert excinfo.value.message == "Internal server error"
    assert db_session.execute(select(Post)).first() is None


def test_flag_rate_limit(service, test_post, test_comment, actor) -> None:
    flagger = actor("10.0.0.1")
    service.submit_flag(flagger, "post", test_post.id, "spam")
    service.submit_flag(flagger, "comment", test_comment.id, "spam")
    with pytest.raises(RateLimitedError, match="flagging too frequently"):
        service.submit_flag(actor("10.0.0.1"), "post", test_post.id, "violence")


def test_rate_limited_vote_writes_no_record(service, test_post, actor, db_session) -> None:
    voter = actor("10.0.0.9")
    service.limiter.check(voter, "vote")
    service.limiter.check(voter, "vote")
    with pytest.raises(RateLimitedError):
        service.cast_vote(voter, "post", test_post.id, "upvote")
    assert db_session.execute(select(VoteRecord)).first() is None


def test_invalid_target_type_through_service(service, test_post, actor) -> None:
    with pytest.raises(ValidationError, match="Invalid target type"):
        service.cast_vote(actor("10.0.0.1"), "widget", test_post.id, "upvote")
    with pytest.raises(ValidationError, match="Invalid target type"):
        service.get_votes("widget", test_post.id)


def test_list_posts_pairs_tallies(service, test_post, actor) -> None:
    service.cast_vote(actor("10.0.0.1"), "post", test_post.id, "upvote")
    [(post, aggregate)] = service.list_posts(actor_id=actor("10.0.0.1"))
    assert post.id == test_post.id
    assert (aggregate.upvotes, aggregate.user_vote.value) == (1, "upvote")

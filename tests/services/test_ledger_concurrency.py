"""Concurrent writers against a file-backed database."""

import threading
from concurrent.futures import ThreadPoolExecutor

import pytest
from sqlalchemy.orm import sessionmaker

from reveal_api.core.errors import ConflictError
from reveal_api.models import Post
from reveal_api.services.flags import FlagRegistry
from reveal_api.services.identity import ActorIdentityResolver
from reveal_api.services.votes import VoteLedger

WORKERS = 8


@pytest.fixture()
def file_sessions(file_engine) -> sessionmaker:
    return sessionmaker(bind=file_engine, autoflush=False, expire_on_commit=False)


@pytest.fixture()
def post_id(file_sessions) -> str:
    with file_sessions() as session:
        post = Post(title="Contended", content="Everyone votes on this one.")
        session.add(post)
        session.commit()
        return post.id


def _run_concurrently(count, fn):
    barrier = threading.Barrier(count)

    def _worker(index):
        barrier.wait()
        return fn(index)

    with ThreadPoolExecutor(max_workers=count) as pool:
        return list(pool.map(_worker, range(count)))


def test_distinct_actors_all_counted(file_sessions, post_id) -> None:
    resolver = ActorIdentityResolver("test-salt")

    def _vote(index):
        with file_sessions() as session:
            VoteLedger(session).apply_vote("post", post_id, resolver.resolve(f"10.2.0.{index}"), "upvote")

    _run_concurrently(WORKERS, _vote)

    with file_sessions() as session:
        aggregate = VoteLedger(session).get_aggregate("post", post_id)
    assert aggregate.upvotes == WORKERS
    assert aggregate.downvotes == 0


def test_same_actor_votes_are_serialized(file_sessions, post_id) -> None:
    voter = ActorIdentityResolver("test-salt").resolve("10.3.0.1")

    def _vote(index):
        with file_sessions() as session:
            VoteLedger(session).apply_vote("post", post_id, voter, "upvote")

    # An even number of toggles from one actor always ends retracted.
    _run_concurrently(WORKERS, _vote)

    with file_sessions() as session:
        aggregate = VoteLedger(session).get_aggregate("post", post_id, voter)
    assert aggregate.upvotes == 0
    assert aggregate.user_vote.value == "none"


def test_concurrent_duplicate_flags_admit_one(file_sessions, post_id) -> None:
    flagger = ActorIdentityResolver("test-salt").resolve("10.4.0.1")

    def _flag(index):
        with file_sessions() as session:
            try:
                FlagRegistry(session).submit_flag("post", post_id, flagger, "spam")
            except ConflictError:
                return False
            return True

    results = _run_concurrently(WORKERS, _flag)
    assert results.count(True) == 1
    assert results.count(False) == WORKERS - 1

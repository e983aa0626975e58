"""Vote ledger: one vote record per (target, actor) with derived tallies."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass

from sqlalchemy import and_, case, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from reveal_api.core.errors import ValidationError
from reveal_api.core.settings import settings
from reveal_api.models import TargetType, VoteRecord, VoteState
from reveal_api.services.content import parse_target_type, require_target
from reveal_api.services.identity import actor_tag
from reveal_api.services.locks import KeyedLockTable, get_vote_locks

logger = logging.getLogger(__name__)

CASTABLE_STATES = frozenset({VoteState.UPVOTE, VoteState.DOWNVOTE})


@dataclass(frozen=True)
class VoteAggregate:
    """Tallies for one target as seen by one actor."""

    target_type: TargetType
    target_id: str
    upvotes: int
    downvotes: int
    user_vote: VoteState = VoteState.NONE

    @property
    def score(self) -> int:
        return self.upvotes - self.downvotes


def next_vote_state(existing: VoteState, requested: VoteState) -> VoteState:
    """Return the state a record moves to when ``requested`` is cast.

    Repeating the current non-neutral vote retracts it; any other request
    moves the record straight to the requested state.
    """
    if requested == existing and existing is not VoteState.NONE:
        return VoteState.NONE
    return requested


def parse_requested_state(requested: VoteState | str) -> VoteState:
    """Coerce a client-supplied vote type, rejecting anything but up/down."""
    try:
        state = VoteState(requested)
    except ValueError:
        state = None
    if state not in CASTABLE_STATES:
        raise ValidationError("Invalid vote type. Must be 'upvote' or 'downvote'")
    return state


class VoteLedger:
    """Apply and read votes for posts and comments.

    Writers on one (target, actor) key are serialized by a lock stripe held
    from the record read through the commit, plus a row lock where the
    database supports it. Tallies are always recomputed from the records.
    """

    def __init__(
        self,
        db: Session,
        *,
        locks: KeyedLockTable | None = None,
        insert_retries: int | None = None,
    ) -> None:
        self.db = db
        self.locks = locks or get_vote_locks()
        self.insert_retries = (
            settings.ledger_insert_retries if insert_retries is None else insert_retries
        )
        if self.insert_retries < 0:
            raise ValueError("insert_retries must not be negative")

    @staticmethod
    def _tally_columns(actor_id: bytes | None) -> list:
        columns = [
            func.coalesce(func.sum(case((VoteRecord.state == VoteState.UPVOTE.value, 1), else_=0)), 0),
            func.coalesce(
                func.sum(case((VoteRecord.state == VoteState.DOWNVOTE.value, 1), else_=0)), 0
            ),
        ]
        if actor_id is not None:
            columns.append(
                func.max(case((VoteRecord.actor_id == actor_id, VoteRecord.state), else_=None))
            )
        return columns

    @staticmethod
    def _aggregate_from_row(
        target_type: TargetType, target_id: str, row, actor_id: bytes | None
    ) -> VoteAggregate:
        user_vote = VoteState.NONE
        if actor_id is not None and row[2] is not None:
            user_vote = VoteState(row[2])
        return VoteAggregate(
            target_type=target_type,
            target_id=target_id,
            upvotes=int(row[0]),
            downvotes=int(row[1]),
            user_vote=user_vote,
        )

    def _tally(self, target_type: TargetType, target_id: str, actor_id: bytes | None) -> VoteAggregate:
        row = self.db.execute(
            select(*self._tally_columns(actor_id)).where(
                VoteRecord.target_type == target_type.value,
                VoteRecord.target_id == target_id,
            )
        ).one()
        return self._aggregate_from_row(target_type, target_id, row, actor_id)

    def aggregates_for(
        self,
        target_type: TargetType | str,
        target_ids: Sequence[str],
        actor_id: bytes | None = None,
    ) -> dict[str, VoteAggregate]:
        """Return tallies for many targets of one kind in a single grouped query.

        Targets without any vote record get zero counts. Existence of the
        targets is not checked; callers pass ids they just read.
        """
        target_type = parse_target_type(target_type)
        ids = list(dict.fromkeys(target_ids))
        if not ids:
            return {}
        rows = self.db.execute(
            select(VoteRecord.target_id, *self._tally_columns(actor_id))
            .where(
                VoteRecord.target_type == target_type.value,
                VoteRecord.target_id.in_(ids),
            )
            .group_by(VoteRecord.target_id)
        ).all()
        found = {
            row[0]: self._aggregate_from_row(target_type, row[0], tuple(row[1:]), actor_id)
            for row in rows
        }
        return {
            target_id: found.get(target_id) or VoteAggregate(target_type, target_id, 0, 0)
            for target_id in ids
        }

    def get_aggregate(
        self,
        target_type: TargetType | str,
        target_id: str,
        actor_id: bytes | None = None,
    ) -> VoteAggregate:
        """Return the current tallies for a target.

        Raises:
            NotFoundError: If the target does not exist.
        """
        target_type = parse_target_type(target_type)
        require_target(self.db, target_type, target_id)
        return self._tally(target_type, target_id, actor_id)

    def _load_record(
        self, target_type: TargetType, target_id: str, actor_id: bytes
    ) -> VoteRecord | None:
        stmt = (
            select(VoteRecord)
            .where(
                and_(
                    VoteRecord.target_type == target_type.value,
                    VoteRecord.target_id == target_id,
                    VoteRecord.actor_id == actor_id,
                )
            )
            .with_for_update()
        )
        return self.db.execute(stmt).scalars().first()

    def apply_vote(
        self,
        target_type: TargetType | str,
        target_id: str,
        actor_id: bytes,
        requested_state: VoteState | str,
    ) -> VoteAggregate:
        """Cast a vote and return the updated aggregate.

        The record transition and the tally read are committed as one unit;
        on any failure the session is rolled back and nothing is written.

        Raises:
            ValidationError: If ``requested_state`` is not upvote or downvote.
            NotFoundError: If the target does not exist.
        """
        requested = parse_requested_state(requested_state)
        target_type = parse_target_type(target_type)
        key = (target_type.value, target_id, actor_id)

        with self.locks.hold(key):
            for attempt in range(self.insert_retries + 1):
                try:
                    require_target(self.db, target_type, target_id)
                    record = self._load_record(target_type, target_id, actor_id)
                    existing = VoteState(record.state) if record else VoteState.NONE
                    new_state = next_vote_state(existing, requested)
                    if record is None:
                        record = VoteRecord(
                            target_type=target_type.value,
                            target_id=target_id,
                            actor_id=actor_id,
                            state=new_state.value,
                        )
                        self.db.add(record)
                    else:
                        record.state = new_state.value
                    self.db.flush()
                    aggregate = self._tally(target_type, target_id, actor_id)
                    self.db.commit()
                except IntegrityError:
                    # Another process inserted the same key first; re-read and apply on top.
                    self.db.rollback()
                    if attempt == self.insert_retries:
                        raise
                    logger.info(
                        "Vote insert race on %s %s, retry %d of %d",
                        target_type.value,
                        target_id,
                        attempt + 1,
                        self.insert_retries,
                    )
                    continue
                except Exception:
                    self.db.rollback()
                    raise
                logger.debug(
                    "Vote by %s on %s %s: %s -> %s",
                    actor_tag(actor_id),
                    target_type.value,
                    target_id,
                    existing.value,
                    new_state.value,
                )
                return aggregate
        raise AssertionError("unreachable")  # pragma: no cover

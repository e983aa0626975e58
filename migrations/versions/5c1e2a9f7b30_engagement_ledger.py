"""engagement ledger

Revision ID: 5c1e2a9f7b30
Revises:
Create Date: 2026-10-19 09:12:41.306512

"""
from __future__ import annotations

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "5c1e2a9f7b30"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create posts, comments and the vote and flag ledgers."""
    op.create_table(
        "post",
        sa.Column("seq", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("title", sa.String(length=100), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("seq"),
        sa.UniqueConstraint("id"),
    )
    op.create_table(
        "comment",
        sa.Column("seq", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("post_id", sa.String(length=36), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["post_id"], ["post.id"]),
        sa.PrimaryKeyConstraint("seq"),
        sa.UniqueConstraint("id"),
    )
    op.create_index("ix_comment_post_id_seq", "comment", ["post_id", "seq"])
    op.create_table(
        "vote_record",
        sa.Column("target_type", sa.String(length=16), nullable=False),
        sa.Column("target_id", sa.String(length=36), nullable=False),
        sa.Column("actor_id", sa.LargeBinary(length=32), nullable=False),
        sa.Column("state", sa.String(length=16), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint(
            "target_type IN ('post', 'comment')", name="ck_vote_record_target_type"
        ),
        sa.CheckConstraint(
            "state IN ('none', 'upvote', 'downvote')", name="ck_vote_record_state"
        ),
        sa.PrimaryKeyConstraint("target_type", "target_id", "actor_id"),
    )
    op.create_index("ix_vote_record_target", "vote_record", ["target_type", "target_id"])
    op.create_table(
        "flag_record",
        sa.Column("target_type", sa.String(length=16), nullable=False),
        sa.Column("target_id", sa.String(length=36), nullable=False),
        sa.Column("actor_id", sa.LargeBinary(length=32), nullable=False),
        sa.Column("reason", sa.String(length=32), nullable=False),
        sa.Column("details", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint(
            "target_type IN ('post', 'comment')", name="ck_flag_record_target_type"
        ),
        sa.PrimaryKeyConstraint("target_type", "target_id", "actor_id"),
    )
    op.create_index("ix_flag_record_target", "flag_record", ["target_type", "target_id"])


def downgrade() -> None:
    """Drop the engagement ledger tables."""
    op.drop_index("ix_flag_record_target", table_name="flag_record")
    op.drop_table("flag_record")
    op.drop_index("ix_vote_record_target", table_name="vote_record")
    op.drop_table("vote_record")
    op.drop_index("ix_comment_post_id_seq", table_name="comment")
    op.drop_table("comment")
    op.drop_table("post")

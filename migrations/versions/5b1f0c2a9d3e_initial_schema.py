"""initial schema

Revision ID: 5b1f0c2a9d3e
Revises:
Create Date: 2026-10-19 09:12:40.118204

"""
from __future__ import annotations

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "5b1f0c2a9d3e"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create users, conversations, participants, comments, votes and subscriptions."""
    op.create_table(
        "users",
        sa.Column("uid", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("username", sa.String(length=255), nullable=True),
        sa.Column("hname", sa.String(length=255), nullable=True),
        sa.Column("email", sa.String(length=255), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("uid"),
        sa.UniqueConstraint("username"),
        sa.UniqueConstraint("email"),
    )
    op.create_table(
        "conversations",
        sa.Column("zid", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("topic", sa.String(length=1000), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("owner", sa.Integer(), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("is_public", sa.Boolean(), nullable=False),
        sa.Column("allowed_emails", sa.JSON(), nullable=False),
        sa.Column("like_count", sa.Integer(), nullable=False),
        sa.Column("dislike_count", sa.Integer(), nullable=False),
        sa.Column("neutral_count", sa.Integer(), nullable=False),
        sa.Column("comments_count", sa.Integer(), nullable=False),
        sa.Column("participant_count", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("modified_at", sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(["owner"], ["users.uid"]),
        sa.PrimaryKeyConstraint("zid"),
    )
    op.create_table(
        "participants",
        sa.Column("pid", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("uid", sa.Integer(), nullable=False),
        sa.Column("zid", sa.Integer(), nullable=False),
        sa.Column("vote_count", sa.Integer(), nullable=False),
        sa.Column("last_interaction", sa.BigInteger(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(["uid"], ["users.uid"]),
        sa.ForeignKeyConstraint(["zid"], ["conversations.zid"]),
        sa.PrimaryKeyConstraint("pid"),
        sa.UniqueConstraint("uid", "zid", name="uq_participants_uid_zid"),
    )
    op.create_index("ix_participants_zid", "participants", ["zid"])
    op.create_table(
        "comments",
        sa.Column("tid", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("zid", sa.Integer(), nullable=False),
        sa.Column("pid", sa.Integer(), nullable=False),
        sa.Column("uid", sa.Integer(), nullable=False),
        sa.Column("txt", sa.Text(), nullable=False),
        sa.Column("is_seed", sa.Boolean(), nullable=False),
        sa.Column("active", sa.Boolean(), nullable=False),
        sa.Column("flag_status", sa.Text(), nullable=False),
        sa.Column("flag_reason", sa.Text(), nullable=False),
        sa.Column("like_count", sa.Integer(), nullable=False),
        sa.Column("dislike_count", sa.Integer(), nullable=False),
        sa.Column("neutral_count", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("modified_at", sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(["pid"], ["participants.pid"]),
        sa.ForeignKeyConstraint(["uid"], ["users.uid"]),
        sa.ForeignKeyConstraint(["zid"], ["conversations.zid"]),
        sa.PrimaryKeyConstraint("tid"),
    )
    op.create_index("ix_comments_zid", "comments", ["zid"])
    op.create_table(
        "votes",
        sa.Column("zid", sa.Integer(), nullable=False),
        sa.Column("tid", sa.Integer(), nullable=False),
        sa.Column("uid", sa.Integer(), nullable=False),
        sa.Column("pid", sa.Integer(), nullable=False),
        sa.Column("vote", sa.SmallInteger(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint("vote IN (-1, 0, 1)", name="ck_votes_vote"),
        sa.ForeignKeyConstraint(["pid"], ["participants.pid"]),
        sa.ForeignKeyConstraint(["tid"], ["comments.tid"]),
        sa.ForeignKeyConstraint(["uid"], ["users.uid"]),
        sa.ForeignKeyConstraint(["zid"], ["conversations.zid"]),
        sa.PrimaryKeyConstraint("zid", "tid", "uid"),
    )
    op.create_index("ix_votes_tid", "votes", ["tid"])
    op.create_index("ix_votes_zid_pid", "votes", ["zid", "pid"])
    op.create_table(
        "subscriptions",
        sa.Column("uid", sa.Integer(), nullable=False),
        sa.Column("zid", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(["uid"], ["users.uid"]),
        sa.ForeignKeyConstraint(["zid"], ["conversations.zid"]),
        sa.PrimaryKeyConstraint("uid", "zid"),
    )


def downgrade() -> None:
    """Drop every table created by this revision."""
    op.drop_table("subscriptions")
    op.drop_index("ix_votes_zid_pid", table_name="votes")
    op.drop_index("ix_votes_tid", table_name="votes")
    op.drop_table("votes")
    op.drop_index("ix_comments_zid", table_name="comments")
    op.drop_table("comments")
    op.drop_index("ix_participants_zid", table_name="participants")
    op.drop_table("participants")
    op.drop_table("conversations")
    op.drop_table("users")

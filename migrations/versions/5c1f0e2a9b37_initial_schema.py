"""initial schema

Revision ID: 5c1f0e2a9b37
Revises:
Create Date: 2026-10-18 09:12:44.318204

"""
from __future__ import annotations

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "5c1f0e2a9b37"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

user_role = sa.Enum("standard", "admin", name="user_role")


def upgrade() -> None:
    """Create accounts, posts and the per-user collections."""
    op.create_table(
        "user_account",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("login_email", sa.String(length=320), nullable=False),
        sa.Column("credential_hash", sa.Text(), nullable=True),
        sa.Column("external_identity_id", sa.String(length=255), nullable=True),
        sa.Column("display_handle", sa.String(length=100), nullable=False),
        sa.Column("is_verified", sa.Boolean(), nullable=False),
        sa.Column("verification_token", sa.String(length=64), nullable=True),
        sa.Column("verification_expiry", sa.DateTime(timezone=True), nullable=True),
        sa.Column("role", user_role, nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("login_email"),
        sa.UniqueConstraint("external_identity_id"),
        sa.UniqueConstraint("display_handle"),
    )
    op.create_index(
        "ix_user_account_verification_token",
        "user_account",
        ["verification_token"],
    )

    op.create_table(
        "post",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("title", sa.Text(), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("markdown_source", sa.Text(), nullable=True),
        sa.Column("sanitized_html", sa.Text(), nullable=False),
        sa.Column("author_handle", sa.String(length=100), nullable=False),
        sa.Column("author_email", sa.String(length=320), nullable=False),
        sa.Column("author_id", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("like_count", sa.Integer(), nullable=False),
        sa.CheckConstraint("like_count >= 0", name="ck_post_like_count_non_negative"),
        sa.ForeignKeyConstraint(["author_id"], ["user_account.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_post_author_id", "post", ["author_id"])

    op.create_table(
        "user_post",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("post_id", sa.Integer(), nullable=False),
        sa.Column("position", sa.Integer(), nullable=False),
        sa.Column("title", sa.Text(), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("sanitized_html", sa.Text(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("like_count", sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(["user_id"], ["user_account.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("user_id", "post_id", name="uq_user_post_post_id"),
    )
    op.create_index("ix_user_post_user_id", "user_post", ["user_id"])

    op.create_table(
        "user_liked_post",
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("post_id", sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(["user_id"], ["user_account.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("user_id", "post_id"),
    )
    op.create_index("ix_user_liked_post_post_id", "user_liked_post", ["post_id"])


def downgrade() -> None:
    """Drop every Bloggy table."""
    op.drop_index("ix_user_liked_post_post_id", table_name="user_liked_post")
    op.drop_table("user_liked_post")
    op.drop_index("ix_user_post_user_id", table_name="user_post")
    op.drop_table("user_post")
    op.drop_index("ix_post_author_id", table_name="post")
    op.drop_table("post")
    op.drop_index("ix_user_account_verification_token", table_name="user_account")
    op.drop_table("user_account")
    user_role.drop(op.get_bind(), checkfirst=True)

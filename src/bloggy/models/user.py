# src/bloggy/models/user.py
"""SQLAlchemy models for accounts and their per-user collections."""

from __future__ import annotations

import enum
from datetime import datetime

from sqlalchemy import (
    Boolean,
    DateTime,
    Enum,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from bloggy.db.session import Base
from bloggy.db.time import utcnow


class UserRole(str, enum.Enum):
    """Account roles. Admins may delete any post."""

    STANDARD = "standard"
    ADMIN = "admin"


class User(Base):
    """A registered account, local or federated through Google."""

    __tablename__ = "user_account"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    login_email: Mapped[str] = mapped_column(String(320), unique=True, nullable=False)
    # Absent for accounts that only sign in through the identity provider.
    credential_hash: Mapped[str | None] = mapped_column(Text, nullable=True)
    external_identity_id: Mapped[str | None] = mapped_column(
        String(255),
        unique=True,
        nullable=True,
    )
    display_handle: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)

    is_verified: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    # Present only while the account is unverified.
    verification_token: Mapped[str | None] = mapped_column(
        String(64),
        nullable=True,
        index=True,
    )
    verification_expiry: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    role: Mapped[UserRole] = mapped_column(
        Enum(
            UserRole,
            name="user_role",
            values_callable=lambda roles: [role.value for role in roles],
        ),
        default=UserRole.STANDARD,
        nullable=False,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        nullable=False,
    )

    posts: Mapped[list[UserPost]] = relationship(
        "UserPost",
        back_populates="user",
        order_by="UserPost.position",
        cascade="all, delete-orphan",
    )
    liked_posts: Mapped[list[UserLikedPost]] = relationship(
        "UserLikedPost",
        back_populates="user",
        cascade="all, delete-orphan",
    )


class UserPost(Base):
    """Snapshot of a post kept in its author's ``posts`` sequence.

    This is a denormalized copy of the authoritative ``post`` row, written by
    the submission pipeline and pulled by the delete path.
    """

    __tablename__ = "user_post"
    __table_args__ = (
        UniqueConstraint("user_id", "post_id", name="uq_user_post_post_id"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("user_account.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    # Not a foreign key: the mirror must survive a failed authoritative delete.
    post_id: Mapped[int] = mapped_column(Integer, nullable=False)
    position: Mapped[int] = mapped_column(Integer, nullable=False)

    title: Mapped[str] = mapped_column(Text, nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    sanitized_html: Mapped[str] = mapped_column(Text, nullable=False, default="")
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    like_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    user: Mapped[User] = relationship("User", back_populates="posts")


class UserLikedPost(Base):
    """Membership of a post in a user's liked set."""

    __tablename__ = "user_liked_post"

    # Composite primary key prevents duplicate likes from the same user.
    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("user_account.id", ondelete="CASCADE"),
        primary_key=True,
    )
    post_id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)

    user: Mapped[User] = relationship("User", back_populates="liked_posts")

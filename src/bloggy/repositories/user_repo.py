"""Data access helpers for accounts, their post mirrors and liked sets."""
from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime

from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from bloggy.core.errors import NotFoundError
from bloggy.models import Post, User, UserLikedPost, UserPost

__all__ = ["UserRepository"]


class UserRepository:
    """Store for user records and the collections embedded in them."""

    def __init__(self, session: Session) -> None:
        """Initialize the repository with a SQLAlchemy session."""
        self.session = session

    def _commit(self) -> None:
        try:
            self.session.commit()
        except SQLAlchemyError:
            self.session.rollback()
            raise

    # Accounts

    def get_by_id(self, user_id: int) -> User | None:
        """Return a user by primary key."""
        return self.session.get(User, user_id)

    def require(self, user_id: int) -> User:
        """Return a user or raise :class:`NotFoundError`."""
        user = self.get_by_id(user_id)
        if user is None:
            raise NotFoundError("User not found.")
        return user

    def get_by_email(self, email: str) -> User | None:
        """Return the user registered with ``email``."""
        return self.session.scalars(
            select(User).where(func.lower(User.login_email) == email.lower())
        ).first()

    def get_by_handle(self, handle: str) -> User | None:
        """Return the user with display handle ``handle``."""
        return self.session.scalars(select(User).where(User.display_handle == handle)).first()

    def get_by_external_id(self, external_id: str) -> User | None:
        """Return the user linked to an identity provider account."""
        return self.session.scalars(
            select(User).where(User.external_identity_id == external_id)
        ).first()

    def get_by_verification_token(self, token: str, *, now: datetime) -> User | None:
        """Return the unverified user holding ``token`` if it has not expired."""
        return self.session.scalars(
            select(User).where(
                User.verification_token == token,
                User.verification_expiry.is_not(None),
                User.verification_expiry > now,
            )
        ).first()

    def create(self, user: User) -> User:
        """Persist a new user.

        Raises:
            IntegrityError: If a unique column collides with an existing row.
        """
        self.session.add(user)
        self._commit()
        self.session.refresh(user)
        return user

    def save(self, user: User) -> User:
        """Persist in-place modifications of ``user``."""
        self.session.add(user)
        self._commit()
        self.session.refresh(user)
        return user

    # Mirrored posts

    def list_post_snapshots(self, user_id: int) -> list[UserPost]:
        """Return the user's mirrored posts in insertion order."""
        return list(
            self.session.scalars(
                select(UserPost).where(UserPost.user_id == user_id).order_by(UserPost.position)
            )
        )

    def _snapshot(self, user_id: int, post: Post, position: int) -> UserPost:
        return UserPost(
            user_id=user_id,
            post_id=post.id,
            position=position,
            title=post.title,
            content=post.content,
            sanitized_html=post.sanitized_html or "",
            created_at=post.created_at,
            like_count=post.like_count,
        )

    def append_post_snapshot(self, user_id: int, post: Post) -> UserPost:
        """Append a copy of ``post`` to the end of the user's ``posts`` sequence."""
        last = self.session.scalar(
            select(func.max(UserPost.position)).where(UserPost.user_id == user_id)
        )
        snapshot = self._snapshot(user_id, post, 0 if last is None else last + 1)
        self.session.add(snapshot)
        self._commit()
        return snapshot

    def remove_post_snapshot(self, user_id: int, post_id: int) -> bool:
        """Pull the snapshot of ``post_id`` from the user's sequence."""
        result = self.session.execute(
            delete(UserPost).where(UserPost.user_id == user_id, UserPost.post_id == post_id)
        )
        self._commit()
        return bool(result.rowcount)

    def replace_post_snapshots(self, user_id: int, posts: Iterable[Post]) -> list[UserPost]:
        """Rebuild the user's sequence from authoritative posts, oldest first."""
        self.session.execute(delete(UserPost).where(UserPost.user_id == user_id))
        ordered = sorted(posts, key=lambda post: (post.created_at, post.id))
        snapshots = [self._snapshot(user_id, post, index) for index, post in enumerate(ordered)]
        self.session.add_all(snapshots)
        self._commit()
        return snapshots

    # Liked posts

    def liked_post_ids(self, user_id: int) -> set[int]:
        """Return the set of post ids liked by the user."""
        return set(
            self.session.scalars(
                select(UserLikedPost.post_id).where(UserLikedPost.user_id == user_id)
            )
        )

    def has_liked(self, user_id: int, post_id: int) -> bool:
        """Return True if ``post_id`` is in the user's liked set."""
        return self.session.get(UserLikedPost, (user_id, post_id)) is not None

    def add_liked_post(self, user_id: int, post_id: int) -> bool:
        """Add ``post_id`` to the liked set.

        Returns:
            True if the membership was added, False if it already existed.
        """
        if self.has_liked(user_id, post_id):
            return False
        self.session.add(UserLikedPost(user_id=user_id, post_id=post_id))
        try:
            self._commit()
        except IntegrityError:
            # A concurrent request inserted the same membership first.
            return False
        return True

    def remove_liked_post(self, user_id: int, post_id: int) -> bool:
        """Remove ``post_id`` from the liked set and report whether it was present."""
        result = self.session.execute(
            delete(UserLikedPost).where(
                UserLikedPost.user_id == user_id,
                UserLikedPost.post_id == post_id,
            )
        )
        self._commit()
        return bool(result.rowcount)

    def count_likes_for_post(self, post_id: int) -> int:
        """Count users whose liked set contains ``post_id``."""
        count = self.session.scalar(
            select(func.count()).select_from(UserLikedPost).where(UserLikedPost.post_id == post_id)
        )
        return int(count or 0)

    def remove_post_from_all_likes(self, post_id: int) -> int:
        """Drop ``post_id`` from every liked set and return the number removed."""
        result = self.session.execute(delete(UserLikedPost).where(UserLikedPost.post_id == post_id))
        self._commit()
        return int(result.rowcount or 0)

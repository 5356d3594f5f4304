"""Data access helpers for working with posts."""
from __future__ import annotations

from datetime import datetime

from sqlalchemy import delete, func, or_, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from bloggy.core.errors import NotFoundError
from bloggy.models.post import Post

__all__ = ["PostRepository"]


class PostRepository:
    """Authoritative store for post records.

    Every mutating method commits its own unit of work; callers that touch
    both this store and :class:`~bloggy.repositories.user_repo.UserRepository`
    own the cross-store consistency.
    """

    def __init__(self, session: Session) -> None:
        """Initialize the repository with a SQLAlchemy session."""
        self.session = session

    def _commit(self) -> None:
        try:
            self.session.commit()
        except SQLAlchemyError:
            self.session.rollback()
            raise

    def get_by_id(self, post_id: int) -> Post | None:
        """Return a post by identifier."""
        return self.session.get(Post, post_id)

    def require(self, post_id: int) -> Post:
        """Return a post or raise :class:`NotFoundError`."""
        post = self.get_by_id(post_id)
        if post is None:
            raise NotFoundError("Post not found.")
        return post

    def create(
        self,
        *,
        title: str,
        content: str,
        markdown_source: str | None,
        author_id: int,
        author_handle: str,
        author_email: str,
        created_at: datetime,
    ) -> Post:
        """Insert a new post with a zero like count and return it."""
        post = Post(
            title=title,
            content=content,
            markdown_source=markdown_source,
            author_id=author_id,
            author_handle=author_handle,
            author_email=author_email,
            created_at=created_at,
            like_count=0,
        )
        self.session.add(post)
        self._commit()
        self.session.refresh(post)
        return post

    def find(
        self,
        *,
        author_id: int | None = None,
        text: str | None = None,
        limit: int | None = None,
    ) -> list[Post]:
        """Return posts matching the given filters, newest first.

        Args:
            author_id: Only posts written by this user.
            text: Case-insensitive substring matched against title or content.
            limit: Maximum number of rows.
        """
        stmt = select(Post)
        if author_id is not None:
            stmt = stmt.where(Post.author_id == author_id)
        if text:
            needle = text.lower()
            stmt = stmt.where(
                or_(
                    func.lower(Post.title).contains(needle, autoescape=True),
                    func.lower(Post.content).contains(needle, autoescape=True),
                )
            )
        stmt = stmt.order_by(Post.created_at.desc(), Post.id.desc())
        if limit is not None:
            stmt = stmt.limit(limit)
        return list(self.session.scalars(stmt))

    def list_recent(self, limit: int | None = None) -> list[Post]:
        """Return posts sorted by recency."""
        return self.find(limit=limit)

    def like_count(self, post_id: int) -> int:
        """Read the current like counter straight from the database."""
        count = self.session.scalar(select(Post.like_count).where(Post.id == post_id))
        if count is None:
            raise NotFoundError("Post not found.")
        return int(count)

    def adjust_likes(self, post_id: int, delta: int) -> int:
        """Atomically add ``delta`` to the like counter and return the new value.

        The adjustment runs as a single ``UPDATE`` so concurrent likers cannot
        lose updates. A decrement never takes the counter below zero.
        """
        stmt = update(Post).where(Post.id == post_id)
        if delta < 0:
            stmt = stmt.where(Post.like_count >= -delta)
        stmt = stmt.values(like_count=Post.like_count + delta)
        self.session.execute(stmt)
        self._commit()
        return self.like_count(post_id)

    def set_like_count(self, post_id: int, value: int) -> None:
        """Overwrite the like counter, used by reconciliation."""
        self.session.execute(
            update(Post).where(Post.id == post_id).values(like_count=max(0, value))
        )
        self._commit()

    def delete(self, post_id: int) -> bool:
        """Delete a post and report whether a row was removed."""
        result = self.session.execute(delete(Post).where(Post.id == post_id))
        self._commit()
        return bool(result.rowcount)

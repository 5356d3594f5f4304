# src/bloggy/models/post.py
"""SQLAlchemy model for posts."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Integer, String, Text, event
from sqlalchemy.orm import Mapped, mapped_column

from bloggy.db.session import Base
from bloggy.db.time import utcnow
from bloggy.services.sanitizer import render_markdown


class Post(Base):
    """Authoritative copy of an authored post.

    ``sanitized_html`` is derived from ``markdown_source`` whenever the latter
    is assigned. It is exposed read-only; assigning it raises AttributeError.
    """

    __tablename__ = "post"
    __table_args__ = (
        CheckConstraint("like_count >= 0", name="ck_post_like_count_non_negative"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    markdown_source: Mapped[str | None] = mapped_column(Text, nullable=True)
    _sanitized_html: Mapped[str] = mapped_column("sanitized_html", Text, nullable=False, default="")

    # Author snapshot taken from the stored user record at submission time.
    author_handle: Mapped[str] = mapped_column(String(100), nullable=False)
    author_email: Mapped[str] = mapped_column(String(320), nullable=False)
    author_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("user_account.id"),
        nullable=False,
        index=True,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        nullable=False,
    )
    like_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    @property
    def sanitized_html(self) -> str:
        """Sanitized HTML rendered from ``markdown_source``."""
        return self._sanitized_html or ""


@event.listens_for(Post.markdown_source, "set")
def _rerender_markdown(target: Post, value: str | None, oldvalue: object, initiator: object) -> None:
    target._sanitized_html = render_markdown(value)

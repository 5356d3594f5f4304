"""Ownership and role checks for post mutations."""
from __future__ import annotations

from bloggy.core.errors import ForbiddenError
from bloggy.models import Post, User, UserRole


def is_admin(user: User) -> bool:
    """Return True if ``user`` holds the admin capability."""
    return user.role is UserRole.ADMIN


def can_delete(acting_user: User, post: Post) -> bool:
    """Return True if ``acting_user`` may delete ``post``.

    Authors may delete their own posts and admins may delete any post. The
    caller is responsible for rejecting anonymous requests beforehand.
    """
    return acting_user.id == post.author_id or is_admin(acting_user)


def ensure_can_delete(acting_user: User, post: Post) -> None:
    """Raise :class:`ForbiddenError` unless ``acting_user`` may delete ``post``."""
    if not can_delete(acting_user, post):
        raise ForbiddenError("You are not authorized to delete this post.")

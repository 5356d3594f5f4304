# src/bloggy/models/__init__.py
"""SQLAlchemy models for the Bloggy application."""

from .post import Post
from .user import User, UserLikedPost, UserPost, UserRole

__all__ = [
    "Post",
    "User", "UserLikedPost", "UserPost", "UserRole",
]

"""Persistence layer: one repository per store."""

from .post_repo import PostRepository
from .user_repo import UserRepository

__all__ = ["PostRepository", "UserRepository"]

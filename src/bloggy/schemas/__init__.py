# src/bloggy/schemas/__init__.py
"""
Pydantic schemas for API request/response models.

These schemas define the structure of API data for serialization and validation.
"""

from .common import Message, MessageResponse
from .like import LikeRequest, LikeResponse
from .post import (
    FeedResponse,
    PostCreate,
    PostDetailResponse,
    PostResponse,
    TrendingArticle,
    UserPostResponse,
)
from .user import (
    ContactRequest,
    GoogleAuthorizationResponse,
    LoginRequest,
    RegisterRequest,
    RegisterResponse,
    TokenResponse,
    UserResponse,
)

__all__ = [
    "Message", "MessageResponse",
    "LikeRequest", "LikeResponse",
    "FeedResponse", "PostCreate", "PostDetailResponse", "PostResponse",
    "TrendingArticle", "UserPostResponse",
    "ContactRequest", "GoogleAuthorizationResponse", "LoginRequest",
    "RegisterRequest", "RegisterResponse", "TokenResponse", "UserResponse",
]

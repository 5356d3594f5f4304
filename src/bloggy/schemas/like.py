# src/bloggy/schemas/like.py
"""Like-related Pydantic schemas."""

from pydantic import BaseModel, Field


class LikeRequest(BaseModel):
    """Schema for liking or unliking a post."""

    post_id: int
    liked: bool = Field(..., description="True to like the post, False to unlike it")


class LikeResponse(BaseModel):
    """Like state of a post after a toggle."""

    post_id: int
    liked: bool
    like_count: int

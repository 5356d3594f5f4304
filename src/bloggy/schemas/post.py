# src/bloggy/schemas/post.py
"""Post-related Pydantic schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class PostCreate(BaseModel):
    """Schema for composing a new post.

    Author fields are deliberately absent: they come from the stored account.
    Blank titles and content are rejected by the submission pipeline.
    """

    title: str = Field(..., max_length=200, description="Post title")
    content: str = Field(..., max_length=20_000, description="Plain text body")
    markdown: str | None = Field(None, max_length=50_000, description="Markdown body")


class PostResponse(BaseModel):
    """Schema for post information returned by the API."""

    id: int
    title: str
    content: str
    markdown_source: str | None
    sanitized_html: str
    author_handle: str
    author_email: str
    author_id: int
    created_at: datetime
    like_count: int

    model_config = ConfigDict(from_attributes=True)


class PostDetailResponse(BaseModel):
    """A single post plus viewer-specific flags."""

    post: PostResponse
    is_author: bool
    liked: bool


class UserPostResponse(BaseModel):
    """Entry of a user's mirrored ``posts`` sequence."""

    post_id: int
    title: str
    content: str
    sanitized_html: str
    created_at: datetime
    like_count: int

    model_config = ConfigDict(from_attributes=True)


class TrendingArticle(BaseModel):
    """External article promoted next to the feed."""

    title: str
    url: str
    description: str | None = None
    author: str | None = None


class FeedResponse(BaseModel):
    """Home page or search results."""

    page_title: str
    posts: list[PostResponse]
    liked_post_ids: list[int] | None = Field(
        None,
        description="Posts liked by the caller; null for anonymous requests",
    )
    trending_articles: list[TrendingArticle] = Field(default_factory=list)

# src/bloggy/api/v1/endpoints/posts.py
"""Post-related endpoints for the Bloggy API."""

from fastapi import APIRouter, Query, status

from bloggy.core.settings import settings
from bloggy.models import Post
from bloggy.schemas.post import FeedResponse, PostCreate, PostDetailResponse, PostResponse
from bloggy.services import post_service

from ..dependencies import (
    CurrentUserDep,
    OptionalUserDep,
    PostRepoDep,
    TrendingFeedDep,
    UserRepoDep,
    VerifiedUserDep,
)

router = APIRouter(prefix="/posts", tags=["posts"])


@router.get("/", response_model=FeedResponse)
async def list_posts(
    posts: PostRepoDep,
    users: UserRepoDep,
    trending: TrendingFeedDep,
    current_user: OptionalUserDep,
    q: str | None = Query(None, max_length=200, description="Search titles and content"),
    limit: int = Query(settings.feed_page_size, ge=1, le=100),
) -> FeedResponse:
    """Return the newest posts, or search results when ``q`` is given.

    Args:
        posts: Post store
        users: User store, used for the caller's liked set
        trending: External trending feed
        current_user: Signed-in user, if any
        q: Optional case-insensitive search text
        limit: Maximum number of posts to return (max 100)

    Returns:
        Posts newest first, the caller's liked post ids and trending articles
    """
    query = (q or "").strip()
    if query:
        found = post_service.search_posts(posts, query, limit)
        page_title = f'Search Results for "{query}"'
    else:
        found = post_service.list_recent_posts(posts, limit)
        page_title = "Recent Posts"

    liked_ids: list[int] | None = None
    if current_user is not None:
        liked_ids = sorted(users.liked_post_ids(current_user.id))

    return FeedResponse(
        page_title=page_title,
        posts=[PostResponse.model_validate(post) for post in found],
        liked_post_ids=liked_ids,
        trending_articles=await trending.fetch(),
    )


@router.get("/{post_id}", response_model=PostDetailResponse)
async def get_post(
    post_id: int,
    posts: PostRepoDep,
    users: UserRepoDep,
    current_user: OptionalUserDep,
) -> PostDetailResponse:
    """Get a specific post by ID.

    Raises:
        NotFoundError: If the post does not exist
    """
    post = post_service.get_post(posts, post_id)
    is_author = current_user is not None and current_user.id == post.author_id
    liked = current_user is not None and users.has_liked(current_user.id, post.id)
    return PostDetailResponse(
        post=PostResponse.model_validate(post),
        is_author=is_author,
        liked=liked,
    )


@router.post("/", response_model=PostResponse, status_code=status.HTTP_201_CREATED)
async def create_post(
    post_data: PostCreate,
    current_user: VerifiedUserDep,
    posts: PostRepoDep,
    users: UserRepoDep,
) -> Post:
    """Publish a new post authored by the signed-in, verified user."""
    return post_service.submit_post(
        users,
        posts,
        acting_user_id=current_user.id,
        title=post_data.title,
        content=post_data.content,
        markdown_source=post_data.markdown,
    )


@router.delete("/{post_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_post(
    post_id: int,
    current_user: CurrentUserDep,
    posts: PostRepoDep,
    users: UserRepoDep,
) -> None:
    """Delete a post. Allowed for its author and for admins."""
    post_service.delete_post(users, posts, acting_user=current_user, post_id=post_id)

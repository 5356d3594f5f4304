# src/bloggy/api/v1/endpoints/likes.py
"""Like-related endpoints for the Bloggy API."""

from fastapi import APIRouter

from bloggy.schemas.like import LikeRequest, LikeResponse
from bloggy.services.like_service import set_liked

from ..dependencies import CurrentUserDep, PostRepoDep, UserRepoDep

router = APIRouter(prefix="/likes", tags=["likes"])


@router.post("/", response_model=LikeResponse)
async def toggle_like(
    like_data: LikeRequest,
    current_user: CurrentUserDep,
    posts: PostRepoDep,
    users: UserRepoDep,
) -> LikeResponse:
    """Like or unlike a post. Repeating the same request changes nothing."""
    like_count = set_liked(
        users,
        posts,
        acting_user_id=current_user.id,
        post_id=like_data.post_id,
        liked=like_data.liked,
    )
    return LikeResponse(post_id=like_data.post_id, liked=like_data.liked, like_count=like_count)

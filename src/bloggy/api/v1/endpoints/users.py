"""Profile endpoints: a user's own and others' post lists."""

from __future__ import annotations

from fastapi import APIRouter

from bloggy.models import UserPost
from bloggy.schemas.post import UserPostResponse
from bloggy.services import post_service

from ..dependencies import CurrentUserDep, UserRepoDep

router = APIRouter(prefix="/users", tags=["users"])


@router.get("/me/posts", response_model=list[UserPostResponse])
async def my_posts(current_user: CurrentUserDep, users: UserRepoDep) -> list[UserPost]:
    """Return the signed-in user's posts."""
    return post_service.list_user_posts(users, current_user.id)


@router.get("/{user_id}/posts", response_model=list[UserPostResponse])
async def user_posts(user_id: int, users: UserRepoDep) -> list[UserPost]:
    """Return another user's posts.

    Raises:
        NotFoundError: If the user does not exist
    """
    return post_service.list_user_posts(users, user_id)

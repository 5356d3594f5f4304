"""Keep a user's liked set and a post's like counter in lockstep."""
from __future__ import annotations

import logging

from sqlalchemy.exc import SQLAlchemyError

from bloggy.core.errors import PartialWriteError
from bloggy.repositories import PostRepository, UserRepository

logger = logging.getLogger(__name__)


def set_liked(
    users: UserRepository,
    posts: PostRepository,
    *,
    acting_user_id: int,
    post_id: int,
    liked: bool,
) -> int:
    """Like or unlike a post on behalf of a user.

    Membership in the user's liked set is the de-duplication mechanism: the
    counter only moves when the membership actually changes, so repeating a
    like (or an unlike) is a no-op.

    Args:
        users: User store holding the liked set.
        posts: Post store holding the counter.
        acting_user_id: Identifier of the signed-in user.
        post_id: Post being liked or unliked.
        liked: Desired state.

    Returns:
        The post's like count after the operation.

    Raises:
        NotFoundError: If the post does not exist.
        PartialWriteError: If the liked set changed but the counter update failed.
    """
    posts.require(post_id)

    if liked:
        changed = users.add_liked_post(acting_user_id, post_id)
        delta = 1
    else:
        changed = users.remove_liked_post(acting_user_id, post_id)
        delta = -1

    if not changed:
        return posts.like_count(post_id)

    try:
        return posts.adjust_likes(post_id, delta)
    except SQLAlchemyError as exc:
        logger.error(
            "Like counter update failed after liked-set change "
            "(user_id=%s post_id=%s delta=%+d); run reconcile_like_count",
            acting_user_id,
            post_id,
            delta,
            exc_info=exc,
        )
        raise PartialWriteError(
            f"Like state for post {post_id} was only partially updated."
        ) from exc


def reconcile_like_count(users: UserRepository, posts: PostRepository, post_id: int) -> int:
    """Recompute a post's counter from the users whose liked set contains it.

    Returns:
        The reconciled like count.
    """
    posts.require(post_id)
    actual = users.count_likes_for_post(post_id)
    stored = posts.like_count(post_id)
    if actual != stored:
        logger.warning(
            "Reconciling like count for post_id=%s: stored=%s actual=%s",
            post_id,
            stored,
            actual,
        )
        posts.set_like_count(post_id, actual)
    return actual


def reconcile_all_like_counts(users: UserRepository, posts: PostRepository) -> dict[int, int]:
    """Reconcile every post and return the ids whose counter changed with their new value."""
    changed: dict[int, int] = {}
    for post in posts.list_recent():
        stored = post.like_count
        actual = reconcile_like_count(users, posts, post.id)
        if actual != stored:
            changed[post.id] = actual
    return changed

"""Service-level helpers for composing, reading and deleting posts."""
from __future__ import annotations

import logging

from sqlalchemy.exc import SQLAlchemyError

from bloggy.core.errors import PartialWriteError, UnverifiedError, ValidationFailedError
from bloggy.db.time import utcnow
from bloggy.models import Post, User, UserPost
from bloggy.repositories import PostRepository, UserRepository
from bloggy.services.access import ensure_can_delete

logger = logging.getLogger(__name__)


def submit_post(
    users: UserRepository,
    posts: PostRepository,
    *,
    acting_user_id: int,
    title: str,
    content: str,
    markdown_source: str | None = None,
) -> Post:
    """Create a post and mirror it into its author's ``posts`` sequence.

    The author snapshot is read from the stored user record, never from the
    request, so clients cannot post under someone else's name.

    Args:
        users: User store.
        posts: Post store.
        acting_user_id: Identifier of the signed-in author.
        title: Post title.
        content: Plain text shown in listings.
        markdown_source: Optional markdown body; rendered and sanitized on save.

    Returns:
        The persisted post.

    Raises:
        ValidationFailedError: If the title or content is blank.
        NotFoundError: If the author no longer exists.
        UnverifiedError: If the author has not confirmed their email.
        PartialWriteError: If the post was stored but could not be mirrored.
    """
    title = (title or "").strip()
    content = (content or "").strip()
    if not title or not content:
        raise ValidationFailedError("A post needs both a title and some content.")

    author = users.require(acting_user_id)
    if not author.is_verified:
        raise UnverifiedError("Your account is not verified. Please check your email.")

    post = posts.create(
        title=title,
        content=content,
        markdown_source=markdown_source or None,
        author_id=author.id,
        author_handle=author.display_handle,
        author_email=author.login_email,
        created_at=utcnow(),
    )

    try:
        users.append_post_snapshot(author.id, post)
    except SQLAlchemyError as exc:
        logger.error(
            "Post persisted but not mirrored to its author (post_id=%s user_id=%s); "
            "run reconcile_user_posts",
            post.id,
            author.id,
            exc_info=exc,
        )
        raise PartialWriteError(f"Post {post.id} was saved but not added to your profile.") from exc

    logger.info("User %s published post %s", author.id, post.id)
    return post


def delete_post(
    users: UserRepository,
    posts: PostRepository,
    *,
    acting_user: User,
    post_id: int,
) -> None:
    """Delete a post from the post store and from its author's mirror.

    Both removals are attempted even when one of them fails. Stale likes of
    the post are cleared as well.

    Raises:
        NotFoundError: If the post does not exist.
        ForbiddenError: If ``acting_user`` is neither the author nor an admin.
        PartialWriteError: If any of the removals failed.
    """
    post = posts.require(post_id)
    ensure_can_delete(acting_user, post)
    author_id = post.author_id

    steps = (
        ("post store", lambda: posts.delete(post_id)),
        ("author mirror", lambda: users.remove_post_snapshot(author_id, post_id)),
        ("liked sets", lambda: users.remove_post_from_all_likes(post_id)),
    )
    failed: list[str] = []
    for name, step in steps:
        try:
            step()
        except SQLAlchemyError as exc:
            failed.append(name)
            logger.error(
                "Failed to remove post_id=%s (author_id=%s) from %s",
                post_id,
                author_id,
                name,
                exc_info=exc,
            )

    if failed:
        raise PartialWriteError(
            f"Post {post_id} was only partially deleted (failed: {', '.join(failed)})."
        )

    logger.info("User %s deleted post %s (author %s)", acting_user.id, post_id, author_id)


def get_post(posts: PostRepository, post_id: int) -> Post:
    """Return a post or raise :class:`~bloggy.core.errors.NotFoundError`."""
    return posts.require(post_id)


def list_recent_posts(posts: PostRepository, limit: int | None = None) -> list[Post]:
    """Return the newest posts first."""
    return posts.list_recent(limit)


def search_posts(posts: PostRepository, query: str, limit: int | None = None) -> list[Post]:
    """Case-insensitive search over titles and content, newest first."""
    query = (query or "").strip()
    if not query:
        return posts.list_recent(limit)
    return posts.find(text=query, limit=limit)


def list_user_posts(users: UserRepository, user_id: int) -> list[UserPost]:
    """Return a user's mirrored ``posts`` sequence.

    Raises:
        NotFoundError: If the user does not exist.
    """
    users.require(user_id)
    return users.list_post_snapshots(user_id)


def reconcile_user_posts(users: UserRepository, posts: PostRepository, user_id: int) -> list[UserPost]:
    """Rebuild a user's mirror from the authoritative post store."""
    users.require(user_id)
    authored = posts.find(author_id=user_id)
    mirrored = {snapshot.post_id for snapshot in users.list_post_snapshots(user_id)}
    expected = {post.id for post in authored}
    if mirrored != expected:
        logger.warning(
            "Rebuilding post mirror for user_id=%s: missing=%s stale=%s",
            user_id,
            sorted(expected - mirrored),
            sorted(mirrored - expected),
        )
    return users.replace_post_snapshots(user_id, authored)

"""Shared API dependencies for authentication and common functionality."""

from typing import Annotated

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from bloggy.core.errors import UnauthenticatedError, UnverifiedError
from bloggy.core.security import decode_access_token
from bloggy.db.session import get_db
from bloggy.models import User
from bloggy.repositories import PostRepository, UserRepository
from bloggy.services.identity import GoogleIdentityProvider, get_identity_provider
from bloggy.services.notifications import Mailer, get_mailer
from bloggy.services.trending import TrendingFeed, get_trending_feed

# HTTP Bearer scheme; missing credentials are reported through UnauthenticatedError.
bearer_scheme = HTTPBearer(auto_error=False)

# Type alias for database session dependency
SessionDep = Annotated[Session, Depends(get_db)]
BearerDep = Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)]


def get_user_repository(db: SessionDep) -> UserRepository:
    """Return the user store bound to the request session."""
    return UserRepository(db)


def get_post_repository(db: SessionDep) -> PostRepository:
    """Return the post store bound to the request session."""
    return PostRepository(db)


def get_mailer_dep() -> Mailer:
    """Return the shared mailer."""
    return get_mailer()


def get_identity_provider_dep() -> GoogleIdentityProvider:
    """Return the shared Google identity provider."""
    return get_identity_provider()


def get_trending_feed_dep() -> TrendingFeed:
    """Return the shared trending articles feed."""
    return get_trending_feed()


UserRepoDep = Annotated[UserRepository, Depends(get_user_repository)]
PostRepoDep = Annotated[PostRepository, Depends(get_post_repository)]
MailerDep = Annotated[Mailer, Depends(get_mailer_dep)]
IdentityProviderDep = Annotated[GoogleIdentityProvider, Depends(get_identity_provider_dep)]
TrendingFeedDep = Annotated[TrendingFeed, Depends(get_trending_feed_dep)]


def get_optional_user(credentials: BearerDep, users: UserRepoDep) -> User | None:
    """Return the signed-in user, or None for anonymous requests.

    A token that is present but invalid is still rejected.
    """
    if credentials is None:
        return None
    user_id = decode_access_token(credentials.credentials)
    user = users.get_by_id(user_id)
    if user is None:
        raise UnauthenticatedError("Please sign in to continue.")
    return user


def get_current_user(user: Annotated[User | None, Depends(get_optional_user)]) -> User:
    """Get the current authenticated user from the session token.

    Raises:
        UnauthenticatedError: If the request carries no valid token.
    """
    if user is None:
        raise UnauthenticatedError("Please sign in to continue.")
    return user


def get_verified_user(user: Annotated[User, Depends(get_current_user)]) -> User:
    """Get the current user, requiring a confirmed account.

    Raises:
        UnverifiedError: If the account has not been verified.
    """
    if not user.is_verified:
        raise UnverifiedError("Your account is not verified. Please check your email.")
    return user


OptionalUserDep = Annotated[User | None, Depends(get_optional_user)]
CurrentUserDep = Annotated[User, Depends(get_current_user)]
VerifiedUserDep = Annotated[User, Depends(get_verified_user)]

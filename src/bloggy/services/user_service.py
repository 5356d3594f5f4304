"""Account lifecycle: registration, verification, sign-in and roles."""
from __future__ import annotations

import asyncio
import logging
import re

from sqlalchemy.exc import IntegrityError

from bloggy.core import security
from bloggy.core.errors import (
    DependencyFailedError,
    NotFoundError,
    UnauthenticatedError,
    UnverifiedError,
    ValidationFailedError,
)
from bloggy.core.settings import settings
from bloggy.db.time import minutes_from_now, utcnow
from bloggy.models import User, UserRole
from bloggy.repositories import UserRepository
from bloggy.services.identity import IdentityProfile
from bloggy.services.notifications import Mailer, verification_email

__all__ = [
    "DUPLICATE_EMAIL",
    "DUPLICATE_HANDLE",
    "register_user",
    "verify_email",
    "authenticate",
    "find_or_create_federated_user",
    "set_role",
]

logger = logging.getLogger(__name__)

DUPLICATE_EMAIL = "An account with this email already exists."
DUPLICATE_HANDLE = "This username is already taken. Please choose another one."
INVALID_CREDENTIALS = "Invalid email or password."
NOT_VERIFIED = "Your account is not verified. Please check your email."
INVALID_TOKEN = "Verification token is invalid or has expired."
VERIFICATION_EMAIL_FAILED = "Could not send verification email. Please contact support."
PROVIDER_EMAIL_UNVERIFIED = "Your Google email address is not verified."
ALREADY_LINKED = "This email is already linked to a different Google account."

_HANDLE_UNSAFE = re.compile(r"[^\w.-]+")


def _ensure_unique(users: UserRepository, email: str, handle: str) -> None:
    if users.get_by_email(email) is not None:
        raise ValidationFailedError(DUPLICATE_EMAIL)
    if users.get_by_handle(handle) is not None:
        raise ValidationFailedError(DUPLICATE_HANDLE)


async def register_user(
    users: UserRepository,
    mailer: Mailer,
    *,
    email: str,
    handle: str,
    password: str,
    verify_url_base: str,
) -> User:
    """Create an unverified local account and email its verification link.

    Args:
        users: User store.
        mailer: Mail sender for the verification link.
        email: Login email address (must be unused).
        handle: Public display handle (must be unused).
        password: Plain-text password; only its bcrypt hash is stored.
        verify_url_base: URL prefix the token is appended to.

    Returns:
        The created user.

    Raises:
        ValidationFailedError: If the email or handle is already in use.
        DependencyFailedError: If the verification email could not be sent.
    """
    email = email.strip().lower()
    handle = handle.strip()
    if not email or not handle or not password:
        raise ValidationFailedError("Email, username and password are required.")
    _ensure_unique(users, email, handle)

    # bcrypt is CPU-bound; keep it off the event loop.
    credential_hash = await asyncio.to_thread(security.hash_password, password)
    token = security.generate_verification_token()
    user = User(
        login_email=email,
        display_handle=handle,
        credential_hash=credential_hash,
        is_verified=False,
        verification_token=token,
        verification_expiry=minutes_from_now(settings.verification_token_ttl_minutes),
        role=UserRole.STANDARD,
    )
    try:
        users.create(user)
    except IntegrityError as exc:
        # Lost a race with a concurrent registration; report which key collided.
        _ensure_unique(users, email, handle)
        raise ValidationFailedError("Could not register user. Please try again.") from exc

    subject, body = verification_email(
        handle,
        f"{verify_url_base.rstrip('/')}/{token}",
        settings.verification_token_ttl_minutes,
    )
    if not await mailer.send(email, subject, body):
        logger.error("Verification email could not be sent for user_id=%s", user.id)
        raise DependencyFailedError(VERIFICATION_EMAIL_FAILED)

    logger.info("Registered user %s, verification pending", user.id)
    return user


def verify_email(users: UserRepository, token: str) -> User:
    """Confirm an account from its emailed token.

    Raises:
        NotFoundError: If no unverified account holds an unexpired ``token``.
    """
    user = users.get_by_verification_token(token, now=utcnow())
    if user is None:
        raise NotFoundError(INVALID_TOKEN)

    user.is_verified = True
    user.verification_token = None
    user.verification_expiry = None
    users.save(user)
    logger.info("User %s verified their email", user.id)
    return user


def authenticate(users: UserRepository, email: str, password: str) -> User:
    """Check local credentials.

    Raises:
        UnauthenticatedError: For unknown emails, Google-only accounts or bad passwords.
        UnverifiedError: If the credentials match an unverified account.
    """
    user = users.get_by_email(email.strip())
    if user is None or not security.verify_password(password, user.credential_hash):
        raise UnauthenticatedError(INVALID_CREDENTIALS)
    if not user.is_verified:
        raise UnverifiedError(NOT_VERIFIED)
    return user


def _available_handle(users: UserRepository, wanted: str) -> str:
    base = _HANDLE_UNSAFE.sub("", wanted.replace(" ", "")) or "user"
    base = base[:90]
    candidate = base
    suffix = 1
    while users.get_by_handle(candidate) is not None:
        suffix += 1
        candidate = f"{base}{suffix}"
    return candidate


def find_or_create_federated_user(users: UserRepository, profile: IdentityProfile) -> User:
    """Return the account for an identity-provider profile, creating it if needed.

    Federated accounts are always verified. An existing local account with the
    same email is linked to the external identity instead of duplicated.

    Raises:
        UnverifiedError: If the provider has not confirmed the profile's email;
            such a profile can neither claim an existing account nor create one.
        ValidationFailedError: If the matching account is linked to another identity.
    """
    user = users.get_by_external_id(profile.external_id)
    if user is not None:
        return user

    if not profile.email_verified:
        logger.warning(
            "Refusing Google sign-in for external_id=%s: email not verified by provider",
            profile.external_id,
        )
        raise UnverifiedError(PROVIDER_EMAIL_UNVERIFIED)

    user = users.get_by_email(profile.email)
    if user is not None:
        if user.external_identity_id is not None:
            logger.warning(
                "User %s is already linked to another Google identity; refusing %s",
                user.id,
                profile.external_id,
            )
            raise ValidationFailedError(ALREADY_LINKED)
        user.external_identity_id = profile.external_id
        user.is_verified = True
        user.verification_token = None
        user.verification_expiry = None
        logger.info("Linked Google identity to existing user %s", user.id)
        return users.save(user)

    user = User(
        login_email=profile.email.lower(),
        display_handle=_available_handle(users, profile.display_name),
        external_identity_id=profile.external_id,
        credential_hash=None,
        is_verified=True,
        role=UserRole.STANDARD,
    )
    users.create(user)
    logger.info("Created user %s from Google sign-in", user.id)
    return user


def set_role(users: UserRepository, email: str, role: UserRole) -> User:
    """Assign ``role`` to the account registered with ``email``.

    Raises:
        NotFoundError: If no such account exists.
    """
    user = users.get_by_email(email)
    if user is None:
        raise NotFoundError("User not found.")
    user.role = role
    users.save(user)
    logger.info("User %s role set to %s", user.id, role.value)
    return user

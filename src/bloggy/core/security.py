"""Credential hashing and signed token helpers."""
from __future__ import annotations

import secrets

from jose import JWTError, jwt
from passlib.context import CryptContext

from bloggy.core.errors import UnauthenticatedError, ValidationFailedError
from bloggy.core.settings import settings
from bloggy.db.time import minutes_from_now

VERIFICATION_TOKEN_BYTES = 20
OAUTH_STATE_PURPOSE = "oauth-state"

pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.bcrypt_rounds,
)


def hash_password(password: str) -> str:
    """Return a bcrypt hash of ``password``."""
    return pwd_context.hash(password)


def verify_password(password: str, credential_hash: str | None) -> bool:
    """Check ``password`` against a stored hash.

    Accounts created through Google have no hash and never match.
    """
    if not credential_hash:
        return False
    return pwd_context.verify(password, credential_hash)


def generate_verification_token() -> str:
    """Return a random hex token for email verification links."""
    return secrets.token_hex(VERIFICATION_TOKEN_BYTES)


def create_access_token(subject: int | str, extra_claims: dict[str, str] | None = None) -> str:
    """Create the signed session token for a user.

    Args:
        subject: User identifier stored in the ``sub`` claim.
        extra_claims: Optional additional claims.

    Returns:
        Encoded JWT valid for ``settings.access_token_expire_minutes``.
    """
    to_encode: dict[str, object] = {"sub": str(subject)}
    if extra_claims:
        to_encode.update(extra_claims)
    to_encode["exp"] = minutes_from_now(settings.access_token_expire_minutes)
    encoded_jwt: str = jwt.encode(
        to_encode,
        settings.secret_key,
        algorithm=settings.jwt_algorithm,
    )
    return encoded_jwt


def decode_access_token(token: str) -> int:
    """Return the user id carried by a session token.

    Raises:
        UnauthenticatedError: If the token is invalid, expired or malformed.
    """
    try:
        payload = jwt.decode(token, settings.secret_key, algorithms=[settings.jwt_algorithm])
    except JWTError as err:
        raise UnauthenticatedError("Please sign in to continue.") from err

    subject = payload.get("sub")
    if subject is None or payload.get("purpose") is not None:
        raise UnauthenticatedError("Please sign in to continue.")
    try:
        return int(subject)
    except (TypeError, ValueError) as err:
        raise UnauthenticatedError("Please sign in to continue.") from err


def create_oauth_state() -> str:
    """Return a short-lived signed value used as the OAuth ``state`` parameter."""
    payload = {
        "purpose": OAUTH_STATE_PURPOSE,
        "nonce": secrets.token_urlsafe(16),
        "exp": minutes_from_now(settings.oauth_state_ttl_minutes),
    }
    state: str = jwt.encode(payload, settings.secret_key, algorithm=settings.jwt_algorithm)
    return state


def verify_oauth_state(state: str) -> None:
    """Validate a state value produced by :func:`create_oauth_state`."""
    try:
        payload = jwt.decode(state, settings.secret_key, algorithms=[settings.jwt_algorithm])
    except JWTError as err:
        raise ValidationFailedError("Sign-in request expired. Please try again.") from err
    if payload.get("purpose") != OAUTH_STATE_PURPOSE:
        raise ValidationFailedError("Sign-in request expired. Please try again.")

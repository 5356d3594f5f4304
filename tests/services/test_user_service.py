"""Tests for registration, verification, sign-in and roles."""

import asyncio
from datetime import timedelta

import pytest

from bloggy.core import security
from bloggy.core.errors import (
    DependencyFailedError,
    NotFoundError,
    UnauthenticatedError,
    UnverifiedError,
    ValidationFailedError,
)
from bloggy.core.security import verify_password
from bloggy.db.time import utcnow
from bloggy.models import UserRole
from bloggy.services import post_service, user_service
from bloggy.services.identity import IdentityProfile

VERIFY_BASE = "http://test/api/v1/auth/verify"


async def _register(users, mailer, email="carol@example.com", handle="carol"):
    return await user_service.register_user(
        users,
        mailer,
        email=email,
        handle=handle,
        password="s3cret-pass",
        verify_url_base=VERIFY_BASE,
    )


@pytest.mark.asyncio
async def test_register_creates_unverified_user_and_emails_link(users, mailer) -> None:
    """Registration stores a hashed password and mails the verification link."""
    user = await _register(users, mailer, email="Carol@Example.com")

    assert user.login_email == "carol@example.com"
    assert user.is_verified is False
    assert user.role is UserRole.STANDARD
    assert user.credential_hash != "s3cret-pass"
    assert verify_password("s3cret-pass", user.credential_hash)
    assert user.verification_token
    assert user.verification_expiry is not None

    [sent] = mailer.sent
    assert sent.to == "carol@example.com"
    assert sent.subject == "Verify Your Email for BLOGGY"
    assert f"{VERIFY_BASE}/{user.verification_token}" in sent.body
    assert "one hour" in sent.body


@pytest.mark.asyncio
async def test_register_duplicate_email(users, mailer, author) -> None:
    """An email already in use is reported as such."""
    with pytest.raises(ValidationFailedError) as exc_info:
        await _register(users, mailer, email=author.login_email.upper(), handle="fresh")
    assert exc_info.value.message == user_service.DUPLICATE_EMAIL
    assert mailer.sent == []


@pytest.mark.asyncio
async def test_register_duplicate_handle(users, mailer, author) -> None:
    """A taken handle gets its own message."""
    with pytest.raises(ValidationFailedError) as exc_info:
        await _register(users, mailer, email="fresh@example.com", handle=author.display_handle)
    assert exc_info.value.message == user_service.DUPLICATE_HANDLE


@pytest.mark.asyncio
async def test_register_mail_failure_is_dependency_error(users, mailer) -> None:
    """When the verification email bounces the caller learns about it."""
    mailer.fail_for.add("carol@example.com")

    with pytest.raises(DependencyFailedError) as exc_info:
        await _register(users, mailer)

    assert exc_info.value.message == user_service.VERIFICATION_EMAIL_FAILED
    assert users.get_by_email("carol@example.com") is not None


@pytest.mark.asyncio
async def test_verify_email_confirms_account(users, mailer) -> None:
    """A valid token verifies the account and is consumed."""
    user = await _register(users, mailer)
    token = user.verification_token

    verified = user_service.verify_email(users, token)

    assert verified.id == user.id
    assert verified.is_verified is True
    assert verified.verification_token is None
    assert verified.verification_expiry is None
    with pytest.raises(NotFoundError):
        user_service.verify_email(users, token)


@pytest.mark.asyncio
async def test_verify_email_rejects_expired_token(users, mailer) -> None:
    """Tokens past their expiry do not verify anything."""
    user = await _register(users, mailer)
    user.verification_expiry = utcnow() - timedelta(minutes=1)
    users.save(user)

    with pytest.raises(NotFoundError) as exc_info:
        user_service.verify_email(users, user.verification_token)

    assert exc_info.value.message == user_service.INVALID_TOKEN
    assert users.require(user.id).is_verified is False


def test_verify_email_unknown_token(users) -> None:
    """Unknown tokens are not found."""
    with pytest.raises(NotFoundError):
        user_service.verify_email(users, "deadbeef")


def test_authenticate_success(users, author, user_password) -> None:
    """Correct credentials return the account, with email matched case-insensitively."""
    user = user_service.authenticate(users, author.login_email.upper(), user_password)
    assert user.id == author.id


@pytest.mark.parametrize(
    ("email", "password"),
    [("alice@example.com", "wrong-password"), ("nobody@example.com", "correct-horse-battery")],
    ids=["bad-password", "unknown-email"],
)
def test_authenticate_rejects_bad_credentials(users, author, email, password) -> None:
    """Bad passwords and unknown emails share one message."""
    with pytest.raises(UnauthenticatedError) as exc_info:
        user_service.authenticate(users, email, password)
    assert exc_info.value.message == user_service.INVALID_CREDENTIALS


def test_authenticate_unverified(users, unverified_user, user_password) -> None:
    """Correct credentials on an unverified account are refused."""
    with pytest.raises(UnverifiedError):
        user_service.authenticate(users, unverified_user.login_email, user_password)


def test_federated_sign_in_creates_verified_user(users) -> None:
    """First Google sign-in creates a verified account without a password."""
    profile = IdentityProfile(
        external_id="g-1", display_name="Jane Doe", email="jane@example.com", email_verified=True
    )

    user = user_service.find_or_create_federated_user(users, profile)

    assert user.is_verified is True
    assert user.credential_hash is None
    assert user.external_identity_id == "g-1"
    assert user.display_handle == "JaneDoe"
    assert user_service.find_or_create_federated_user(users, profile).id == user.id
    with pytest.raises(UnauthenticatedError):
        user_service.authenticate(users, "jane@example.com", "anything")


def test_federated_sign_in_links_existing_email(users, unverified_user) -> None:
    """A Google profile matching a local account is linked, not duplicated."""
    profile = IdentityProfile(
        external_id="g-2",
        display_name="Someone",
        email=unverified_user.login_email,
        email_verified=True,
    )

    user = user_service.find_or_create_federated_user(users, profile)

    assert user.id == unverified_user.id
    assert user.is_verified is True
    assert user.external_identity_id == "g-2"


def test_federated_sign_in_picks_free_handle(users, make_user) -> None:
    """Handle collisions get a numeric suffix."""
    make_user(handle="JaneDoe")
    profile = IdentityProfile(
        external_id="g-3", display_name="Jane Doe", email="jd@example.com", email_verified=True
    )

    user = user_service.find_or_create_federated_user(users, profile)

    assert user.display_handle == "JaneDoe2"


def test_federated_sign_in_requires_confirmed_email(users, author) -> None:
    """An unconfirmed Google email neither claims a local account nor creates one."""
    claim = IdentityProfile(external_id="g-evil", display_name="Mallory", email=author.login_email)
    with pytest.raises(UnverifiedError) as exc_info:
        user_service.find_or_create_federated_user(users, claim)
    assert exc_info.value.message == user_service.PROVIDER_EMAIL_UNVERIFIED

    stored = users.get_by_id(author.id)
    assert stored.external_identity_id is None

    fresh = IdentityProfile(external_id="g-new", display_name="New", email="new@example.com")
    with pytest.raises(UnverifiedError):
        user_service.find_or_create_federated_user(users, fresh)
    assert users.get_by_email("new@example.com") is None


def test_federated_sign_in_keeps_existing_link(users, author) -> None:
    """An account already tied to one Google identity is not relinked to another."""
    first = IdentityProfile(
        external_id="g-first", display_name="Alice", email=author.login_email, email_verified=True
    )
    user_service.find_or_create_federated_user(users, first)

    second = IdentityProfile(
        external_id="g-second", display_name="Alice", email=author.login_email, email_verified=True
    )
    with pytest.raises(ValidationFailedError) as exc_info:
        user_service.find_or_create_federated_user(users, second)
    assert exc_info.value.message == user_service.ALREADY_LINKED
    assert users.get_by_id(author.id).external_identity_id == "g-first"
    assert user_service.find_or_create_federated_user(users, first).id == author.id


@pytest.mark.asyncio
async def test_register_hashes_off_the_event_loop(users, mailer, monkeypatch) -> None:
    """Password hashing runs in a worker thread, not on the event loop."""
    real_hash = security.hash_password
    seen = []

    def _hash(password: str) -> str:
        try:
            asyncio.get_running_loop()
        except RuntimeError:
            seen.append("thread")
        else:
            seen.append("loop")
        return real_hash(password)

    monkeypatch.setattr(security, "hash_password", _hash)

    user = await _register(users, mailer)

    assert seen == ["thread"]
    assert verify_password("s3cret-pass", user.credential_hash)


def test_set_role(users, author) -> None:
    """Roles are assigned by email."""
    assert user_service.set_role(users, author.login_email, UserRole.ADMIN).role is UserRole.ADMIN
    with pytest.raises(NotFoundError):
        user_service.set_role(users, "ghost@example.com", UserRole.ADMIN)


@pytest.mark.asyncio
async def test_register_verify_then_publish(users, posts, mailer) -> None:
    """A new account can only publish after verifying its email."""
    user = await _register(users, mailer)

    with pytest.raises(UnverifiedError):
        post_service.submit_post(users, posts, acting_user_id=user.id, title="Hi", content="Body")

    user_service.verify_email(users, user.verification_token)
    post = post_service.submit_post(
        users, posts, acting_user_id=user.id, title="Hi", content="Body"
    )

    assert post.author_id == user.id
    assert [s.post_id for s in users.list_post_snapshots(user.id)] == [post.id]

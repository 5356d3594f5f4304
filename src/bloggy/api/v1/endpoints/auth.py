# src/bloggy/api/v1/endpoints/auth.py
"""Authentication endpoints for the Bloggy API."""

from __future__ import annotations

from fastapi import APIRouter, Query, Request, status

from bloggy.core.security import create_access_token, create_oauth_state, verify_oauth_state
from bloggy.core.settings import settings
from bloggy.models import User
from bloggy.schemas.common import Message
from bloggy.schemas.user import (
    GoogleAuthorizationResponse,
    LoginRequest,
    RegisterRequest,
    RegisterResponse,
    TokenResponse,
    UserResponse,
)
from bloggy.services import user_service

from ..dependencies import CurrentUserDep, IdentityProviderDep, MailerDep, UserRepoDep

router = APIRouter(prefix="/auth", tags=["authentication"])


def _token_response(user: User) -> TokenResponse:
    return TokenResponse(
        access_token=create_access_token(user.id),
        token_type="bearer",
        expires_in=settings.access_token_expire_minutes * 60,
        user=UserResponse.model_validate(user),
    )


@router.post(
    "/register",
    summary="Register a local account",
    status_code=status.HTTP_201_CREATED,
    response_model=RegisterResponse,
)
async def register(
    payload: RegisterRequest,
    request: Request,
    users: UserRepoDep,
    mailer: MailerDep,
) -> RegisterResponse:
    """Create an unverified account and email its verification link.

    The link is built from ``PUBLIC_BASE_URL``, never from the request's Host header.
    """
    sample_path = request.app.url_path_for("verify_email", token="token")
    verify_url_base = settings.public_base_url.rstrip("/") + sample_path.rsplit("/", 1)[0]
    user = await user_service.register_user(
        users,
        mailer,
        email=payload.email,
        handle=payload.handle,
        password=payload.password,
        verify_url_base=verify_url_base,
    )
    return RegisterResponse(
        user_id=user.id,
        message=Message(
            type="info",
            text="Check your inbox: we sent you a link to verify your account.",
        ),
    )


@router.get("/verify/{token}", name="verify_email", response_model=TokenResponse)
async def verify(token: str, users: UserRepoDep) -> TokenResponse:
    """Confirm an account and sign it in."""
    user = user_service.verify_email(users, token)
    return _token_response(user)


@router.post("/login", summary="Sign in with email and password", response_model=TokenResponse)
def login(payload: LoginRequest, users: UserRepoDep) -> TokenResponse:
    """Exchange local credentials for a session token.

    Declared sync so the bcrypt check runs in the threadpool.
    """
    user = user_service.authenticate(users, payload.email, payload.password)
    return _token_response(user)


@router.get("/google", response_model=GoogleAuthorizationResponse)
async def google_authorize(identity: IdentityProviderDep) -> GoogleAuthorizationResponse:
    """Return the Google consent URL with a signed state value."""
    state = create_oauth_state()
    return GoogleAuthorizationResponse(
        authorization_url=identity.authorization_url(state),
        state=state,
    )


@router.get("/google/callback", response_model=TokenResponse)
async def google_callback(
    users: UserRepoDep,
    identity: IdentityProviderDep,
    code: str = Query(..., description="Authorization code issued by Google"),
    state: str = Query(..., description="State value returned by /auth/google"),
) -> TokenResponse:
    """Finish Google sign-in, creating the account on first use."""
    verify_oauth_state(state)
    profile = await identity.exchange_code(code)
    user = user_service.find_or_create_federated_user(users, profile)
    return _token_response(user)


@router.get("/me", response_model=UserResponse)
async def me(current_user: CurrentUserDep) -> User:
    """Return the signed-in account."""
    return current_user

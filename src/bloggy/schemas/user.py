"""User-related Pydantic schemas."""

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from bloggy.models import UserRole

from .common import Message


class RegisterRequest(BaseModel):
    """Schema for local account registration."""

    email: EmailStr = Field(..., description="Login email address")
    handle: str = Field(..., min_length=1, max_length=100, description="Public username")
    password: str = Field(..., min_length=8, max_length=128)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        """Store login emails in lower case."""
        return v.lower()


class RegisterResponse(BaseModel):
    """Registration response; the account still needs verification."""

    user_id: int
    message: Message


class LoginRequest(BaseModel):
    """Schema for local sign-in."""

    email: str
    password: str


class UserResponse(BaseModel):
    """Public view of an account."""

    id: int
    display_handle: str
    login_email: str
    is_verified: bool
    role: UserRole

    model_config = ConfigDict(from_attributes=True)


class TokenResponse(BaseModel):
    """Session token returned after sign-in or verification."""

    access_token: str = Field(..., description="JWT access token")
    token_type: str = Field("bearer", description="Token type (typically 'bearer')")
    expires_in: int = Field(..., description="Session lifetime in seconds")
    user: UserResponse


class GoogleAuthorizationResponse(BaseModel):
    """Where to send the browser to start Google sign-in."""

    authorization_url: str
    state: str


class ContactRequest(BaseModel):
    """Contact-form submission."""

    name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr = Field(..., description="Reply address")
    message: str = Field(..., min_length=1, max_length=5000)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        """Lower-case the reply address."""
        return v.lower()

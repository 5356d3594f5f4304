"""Google sign-in client.

Only the pieces Bloggy needs are implemented: building the consent URL and
turning an authorization code into a verified profile.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import lru_cache
from urllib.parse import urlencode

import httpx

from bloggy.core.errors import DependencyFailedError
from bloggy.core.settings import Settings, settings

logger = logging.getLogger(__name__)

GOOGLE_AUTHORIZE_URL = "https://accounts.google.com/o/oauth2/v2/auth"
GOOGLE_TOKEN_URL = "https://oauth2.googleapis.com/token"
GOOGLE_USERINFO_URL = "https://www.googleapis.com/oauth2/v3/userinfo"
SIGN_IN_FAILED = "Google sign-in failed. Please try again."


@dataclass(frozen=True)
class IdentityProfile:
    """Profile fields supplied by the identity provider."""

    external_id: str
    display_name: str
    email: str
    # Whether Google itself confirmed ownership of ``email``.
    email_verified: bool = False


class GoogleIdentityProvider:
    """OAuth 2.0 authorization-code client for Google accounts."""

    def __init__(
        self,
        *,
        client_id: str | None,
        client_secret: str | None,
        redirect_uri: str,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.client_id = client_id
        self.client_secret = client_secret
        self.redirect_uri = redirect_uri
        self.timeout = timeout
        self._transport = transport

    @classmethod
    def from_settings(cls, config: Settings) -> GoogleIdentityProvider:
        """Build a provider from application settings."""
        return cls(
            client_id=config.google_client_id,
            client_secret=config.google_client_secret,
            redirect_uri=config.google_redirect_uri,
            timeout=config.http_timeout_seconds,
        )

    @property
    def enabled(self) -> bool:
        """Return True when client credentials are configured."""
        return bool(self.client_id and self.client_secret)

    def _require_enabled(self) -> None:
        if not self.enabled:
            raise DependencyFailedError("Google sign-in is not available.")

    def authorization_url(self, state: str) -> str:
        """Return the consent screen URL for the ``profile`` and ``email`` scopes."""
        self._require_enabled()
        query = urlencode(
            {
                "client_id": self.client_id,
                "redirect_uri": self.redirect_uri,
                "response_type": "code",
                "scope": "openid profile email",
                "state": state,
            }
        )
        return f"{GOOGLE_AUTHORIZE_URL}?{query}"

    async def exchange_code(self, code: str) -> IdentityProfile:
        """Exchange an authorization code for the signed-in user's profile.

        Raises:
            DependencyFailedError: If Google is unreachable or returns unusable data.
        """
        self._require_enabled()
        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            try:
                token_response = await client.post(
                    GOOGLE_TOKEN_URL,
                    data={
                        "code": code,
                        "client_id": self.client_id,
                        "client_secret": self.client_secret,
                        "redirect_uri": self.redirect_uri,
                        "grant_type": "authorization_code",
                    },
                )
                token_response.raise_for_status()
                access_token = token_response.json()["access_token"]

                userinfo_response = await client.get(
                    GOOGLE_USERINFO_URL,
                    headers={"Authorization": f"Bearer {access_token}"},
                )
                userinfo_response.raise_for_status()
                payload = userinfo_response.json()
            except (httpx.HTTPError, KeyError, ValueError) as exc:
                logger.warning("Google code exchange failed: %s", exc)
                raise DependencyFailedError(SIGN_IN_FAILED) from exc

        return _profile_from_userinfo(payload)


def _profile_from_userinfo(payload: object) -> IdentityProfile:
    if not isinstance(payload, dict) or not payload.get("sub") or not payload.get("email"):
        logger.warning("Google userinfo response missing subject or email")
        raise DependencyFailedError(SIGN_IN_FAILED)

    email = str(payload["email"])
    display_name = str(payload.get("name") or email.split("@", 1)[0])
    return IdentityProfile(
        external_id=str(payload["sub"]),
        display_name=display_name,
        email=email,
        email_verified=payload.get("email_verified") in (True, "true"),
    )


@lru_cache(maxsize=1)
def get_identity_provider() -> GoogleIdentityProvider:
    """Return the process-wide Google provider built from settings."""
    return GoogleIdentityProvider.from_settings(settings)

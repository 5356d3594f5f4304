"""System endpoints for the Bloggy API."""

from __future__ import annotations

from fastapi import APIRouter

from bloggy.core.settings import settings

router = APIRouter(prefix="/system", tags=["system"])


@router.get("/config")
async def get_public_config() -> dict[str, object]:
    """Return a sanitized snapshot of public runtime configuration.

    Excludes secrets and connection strings.
    """
    return {
        "app": {
            "name": settings.app_name,
            "version": settings.app_version,
        },
        "session": {
            "jwt_algorithm": settings.jwt_algorithm,
            "access_token_expire_minutes": settings.access_token_expire_minutes,
            "verification_token_ttl_minutes": settings.verification_token_ttl_minutes,
        },
        "features": {
            "google_sign_in": settings.google_enabled,
            "email": settings.mail_configured,
            "trending_articles": settings.trending_enabled,
        },
    }

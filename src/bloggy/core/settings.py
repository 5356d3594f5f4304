"""Application settings and configuration.

This module defines all configuration options for the Bloggy application.
Settings are loaded from environment variables with sensible defaults.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Settings can be overridden via environment variables or .env files.
    Collaborators (mailer, identity provider, trending feed) are built from an
    instance of this class rather than from ambient module state.
    """

    # Application metadata
    app_name: str = Field(default="Bloggy", alias="APP_NAME")
    app_version: str = Field(default="0.1.0", alias="APP_VERSION")
    debug: bool = Field(default=False, alias="DEBUG")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    public_base_url: str = Field(default="http://localhost:8000", alias="PUBLIC_BASE_URL")

    # Security and authentication
    secret_key: str = Field(alias="SECRET_KEY")
    jwt_algorithm: str = Field(default="HS256", alias="JWT_ALGORITHM")
    # Sessions last one week.
    access_token_expire_minutes: int = Field(
        default=60 * 24 * 7,
        alias="ACCESS_TOKEN_EXPIRE_MINUTES",
    )
    verification_token_ttl_minutes: int = Field(
        default=60,
        alias="VERIFICATION_TOKEN_TTL_MINUTES",
    )
    oauth_state_ttl_minutes: int = Field(default=10, alias="OAUTH_STATE_TTL_MINUTES")
    bcrypt_rounds: int = Field(default=12, ge=4, le=31, alias="BCRYPT_ROUNDS")

    # Database configuration
    database_url: str = Field(default="sqlite:///./bloggy.db", alias="DATABASE_URL")
    sql_debug: bool = Field(default=False, alias="SQL_DEBUG")
    auto_create_tables: bool = Field(default=True, alias="AUTO_CREATE_TABLES")

    # Outbound email
    smtp_host: str | None = Field(default=None, alias="SMTP_HOST")
    smtp_port: int = Field(default=587, alias="SMTP_PORT")
    smtp_username: str | None = Field(default=None, alias="SMTP_USERNAME")
    smtp_password: str | None = Field(default=None, alias="SMTP_PASSWORD")
    smtp_use_tls: bool = Field(default=True, alias="SMTP_USE_TLS")
    smtp_timeout_seconds: float = Field(default=30.0, alias="SMTP_TIMEOUT_SECONDS")
    mail_sender_name: str = Field(default="BLOGGY", alias="MAIL_SENDER_NAME")
    admin_email: str | None = Field(default=None, alias="ADMIN_EMAIL")

    # Google sign-in
    google_client_id: str | None = Field(default=None, alias="GOOGLE_CLIENT_ID")
    google_client_secret: str | None = Field(default=None, alias="GOOGLE_CLIENT_SECRET")
    google_redirect_uri: str = Field(
        default="http://localhost:8000/api/v1/auth/google/callback",
        alias="GOOGLE_REDIRECT_URI",
    )

    # Trending articles shown next to the home feed
    trending_enabled: bool = Field(default=True, alias="TRENDING_ENABLED")
    trending_api_url: str = Field(
        default="https://dev.to/api/articles",
        alias="TRENDING_API_URL",
    )
    trending_tag: str = Field(default="technology", alias="TRENDING_TAG")
    http_timeout_seconds: float = Field(default=10.0, alias="HTTP_TIMEOUT_SECONDS")

    # Feed paging
    feed_page_size: int = Field(default=50, alias="FEED_PAGE_SIZE")

    # CORS configuration for web frontend access
    cors_origins: list[str] = Field(default=["*"], alias="CORS_ORIGINS")
    cors_allow_credentials: bool = Field(default=True, alias="CORS_ALLOW_CREDENTIALS")
    cors_allow_methods: list[str] = Field(
        default=["GET", "POST", "DELETE", "OPTIONS"],
        alias="CORS_ALLOW_METHODS",
    )
    cors_allow_headers: list[str] = Field(default=["*"], alias="CORS_ALLOW_HEADERS")

    model_config = SettingsConfigDict(
        env_file=".env",
        validate_assignment=True,
        extra="ignore",
    )

    @property
    def mail_configured(self) -> bool:
        """Return True when SMTP credentials are present."""
        return bool(self.smtp_host and self.smtp_username and self.smtp_password)

    @property
    def google_enabled(self) -> bool:
        """Return True when Google sign-in credentials are configured."""
        return bool(self.google_client_id and self.google_client_secret)


settings = Settings()  # type: ignore[call-arg]

"""Application settings and configuration.

This module defines all configuration options for the Vayam deliberation service.
Settings are loaded from environment variables with sensible defaults.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Settings can be overridden via environment variables or .env files.
    """

    # Application metadata
    app_name: str = Field(default="Vayam", alias="APP_NAME")
    app_version: str = Field(default="0.1.0", alias="APP_VERSION")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    # Security and authentication (identity is issued by an external provider)
    secret_key: str = Field(alias="SECRET_KEY")
    jwt_algorithm: str = Field(default="HS256", alias="JWT_ALGORITHM")
    access_token_expire_minutes: int = Field(
        default=60 * 24 * 30,
        alias="ACCESS_TOKEN_EXPIRE_MINUTES",
    )
    debug: bool = Field(default=False, alias="DEBUG")

    # Database configuration
    database_url: str = Field(default="sqlite:///./vayam.db", alias="DATABASE_URL")
    test_database_url: str | None = Field(default=None, alias="TEST_DATABASE_URL")
    use_testing_database: bool = Field(default=False, alias="USE_TEST_DATABASE")
    sql_debug: bool = Field(default=False, alias="SQL_DEBUG")

    # Comment authoring rules
    min_viewed_before_authoring: int = Field(default=5, alias="MIN_VIEWED_BEFORE_AUTHORING")
    comment_max_words: int = Field(default=80, alias="COMMENT_MAX_WORDS")
    comment_max_chars: int = Field(default=10_000, alias="COMMENT_MAX_CHARS")
    seed_comment_max_chars: int = Field(default=500, alias="SEED_COMMENT_MAX_CHARS")
    # Off by default: the viewing gate lives in the voting session engine.
    authoring_gate_server_side: bool = Field(
        default=False,
        alias="AUTHORING_GATE_SERVER_SIDE",
    )

    # Moderation notifications (delivered by an external email relay)
    admin_email: str = Field(default="admin@vayam.ai", alias="ADMIN_EMAIL")
    notifications_enabled: bool = Field(default=False, alias="NOTIFICATIONS_ENABLED")
    notification_relay_url: str | None = Field(default=None, alias="NOTIFICATION_RELAY_URL")
    notification_timeout_seconds: float = Field(
        default=10.0,
        alias="NOTIFICATION_TIMEOUT_SECONDS",
    )

    # Links in invitation messages point at the web frontend
    public_base_url: str = Field(default="http://localhost:3000", alias="PUBLIC_BASE_URL")

    # Voting session client
    api_base_url: str = Field(default="http://localhost:8000", alias="API_BASE_URL")
    api_timeout_seconds: float = Field(default=10.0, alias="API_TIMEOUT_SECONDS")

    # CORS configuration for web frontend access
    cors_origins: list[str] = Field(
        default=["*"],
        alias="CORS_ORIGINS",
    )
    cors_allow_credentials: bool = Field(default=True, alias="CORS_ALLOW_CREDENTIALS")
    cors_allow_methods: list[str] = Field(
        default=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        alias="CORS_ALLOW_METHODS",
    )
    cors_allow_headers: list[str] = Field(
        default=["*"],
        alias="CORS_ALLOW_HEADERS",
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        validate_assignment=True,
        extra="ignore",
    )

    @property
    def database_url_sync(self) -> str:
        """Return a sync-compatible database URL for tooling.

        Converts asyncpg URLs to psycopg for synchronous database operations
        like Alembic migrations.
        """
        url = self.effective_database_url
        if url.startswith("postgresql+asyncpg"):
            return url.replace("postgresql+asyncpg", "postgresql+psycopg", 1)
        return url

    @property
    def effective_database_url(self) -> str:
        """Return the database URL respecting testing overrides."""
        if self.use_testing_database and self.test_database_url:
            return self.test_database_url
        return self.database_url

    @property
    def notifications_active(self) -> bool:
        """Return True when notifications should be handed to the relay."""
        return self.notifications_enabled and bool(self.notification_relay_url)


settings = Settings()  # type: ignore[call-arg]

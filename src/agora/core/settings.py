"""Application settings and configuration.

This module defines all configuration options for the Agora forum service.
Settings are loaded from environment variables with sensible defaults.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Settings can be overridden via environment variables or .env files.
    """

    # Application metadata
    app_name: str = Field(default="Agora Forum", alias="APP_NAME")
    app_version: str = Field(default="0.1.0", alias="APP_VERSION")
    debug: bool = Field(default=False, alias="DEBUG")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    # Database configuration
    database_url: str = Field(default="sqlite:///./forum.db", alias="DATABASE_URL")
    test_database_url: str | None = Field(default=None, alias="TEST_DATABASE_URL")
    use_testing_database: bool = Field(default=False, alias="USE_TEST_DATABASE")
    sql_debug: bool = Field(default=False, alias="SQL_DEBUG")
    # Upper bound on how long a statement waits for a store lock.
    db_timeout_seconds: float = Field(default=5.0, alias="DB_TIMEOUT_SECONDS")

    # Session handling. The TTL drives the cookie max-age, session validity
    # and the purge cutoff alike.
    session_cookie_name: str = Field(default="session_id", alias="SESSION_COOKIE_NAME")
    session_cookie_secure: bool = Field(default=False, alias="SESSION_COOKIE_SECURE")
    session_ttl_hours: int = Field(default=24, ge=1, alias="SESSION_TTL_HOURS")
    session_purge_enabled: bool = Field(default=True, alias="SESSION_PURGE_ENABLED")
    session_purge_interval_seconds: float = Field(
        default=3600.0,
        alias="SESSION_PURGE_INTERVAL_SECONDS",
    )

    # Credential policy
    bcrypt_rounds: int = Field(default=12, ge=4, le=31, alias="BCRYPT_ROUNDS")
    password_min_length: int = Field(default=8, ge=1, alias="PASSWORD_MIN_LENGTH")

    # Uploaded images (avatars and post pictures)
    upload_dir: str = Field(default="static", alias="UPLOAD_DIR")
    upload_max_bytes: int = Field(default=10 * 1024 * 1024, alias="UPLOAD_MAX_BYTES")
    default_avatar_url: str = Field(
        default="/static/profiles/default.png",
        alias="DEFAULT_AVATAR_URL",
    )

    # Pagination
    default_page_size: int = Field(default=10, ge=1, alias="DEFAULT_PAGE_SIZE")
    max_page_size: int = Field(default=100, ge=1, alias="MAX_PAGE_SIZE")

    # CORS configuration for the browser client
    cors_origins: list[str] = Field(
        default=["http://localhost:8000"],
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
    def effective_database_url(self) -> str:
        """Return the database URL respecting testing overrides.

        Returns:
            The active database URL (test database if in testing mode, otherwise production)
        """
        if self.use_testing_database and self.test_database_url:
            return self.test_database_url
        return self.database_url

    @property
    def session_ttl_seconds(self) -> int:
        """Return the session lifetime in seconds for cookie max-age."""
        return self.session_ttl_hours * 3600


settings = Settings()

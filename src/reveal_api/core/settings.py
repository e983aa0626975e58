"""Application settings and configuration.

This module defines all configuration options for the Reveal API.
Settings are loaded from environment variables with sensible defaults.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Settings can be overridden via environment variables or .env files.
    """

    # Application metadata
    app_name: str = Field(default="Reveal API", alias="APP_NAME")
    app_version: str = Field(default="0.1.0", alias="APP_VERSION")
    debug: bool = Field(default=False, alias="DEBUG")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    # Database configuration
    database_url: str = Field(default="sqlite:///./reveal.db", alias="DATABASE_URL")
    test_database_url: str | None = Field(default=None, alias="TEST_DATABASE_URL")
    use_testing_database: bool = Field(default=False, alias="USE_TEST_DATABASE")
    sql_debug: bool = Field(default=False, alias="SQL_DEBUG")

    # Anonymous actor derivation
    actor_salt: str = Field(
        default="default_salt_change_in_production",
        alias="ACTOR_SALT",
    )
    # 0 disables rotation; otherwise the effective salt changes every period.
    actor_salt_rotation_seconds: int = Field(
        default=0,
        ge=0,
        alias="ACTOR_SALT_ROTATION_SECONDS",
    )
    trust_forwarded_for: bool = Field(default=False, alias="TRUST_FORWARDED_FOR")
    # Number of reverse proxies in front of the app that append to X-Forwarded-For.
    trusted_proxy_count: int = Field(default=1, ge=1, alias="TRUSTED_PROXY_COUNT")

    # Rate limiting (sliding window per actor and action class)
    rate_limit_backend: str = Field(default="memory", alias="RATE_LIMIT_BACKEND")
    redis_url: str = Field(default="redis://localhost:6379", alias="REDIS_URL")
    rate_limit_post_actions: int = Field(default=5, ge=1, alias="RATE_LIMIT_POST_ACTIONS")
    rate_limit_post_window_seconds: int = Field(
        default=600, ge=1, alias="RATE_LIMIT_POST_WINDOW_SECONDS"
    )
    rate_limit_comment_actions: int = Field(
        default=10, ge=1, alias="RATE_LIMIT_COMMENT_ACTIONS"
    )
    rate_limit_comment_window_seconds: int = Field(
        default=300, ge=1, alias="RATE_LIMIT_COMMENT_WINDOW_SECONDS"
    )
    rate_limit_vote_actions: int = Field(default=30, ge=1, alias="RATE_LIMIT_VOTE_ACTIONS")
    rate_limit_vote_window_seconds: int = Field(
        default=120, ge=1, alias="RATE_LIMIT_VOTE_WINDOW_SECONDS"
    )
    rate_limit_flag_actions: int = Field(default=10, ge=1, alias="RATE_LIMIT_FLAG_ACTIONS")
    rate_limit_flag_window_seconds: int = Field(
        default=600, ge=1, alias="RATE_LIMIT_FLAG_WINDOW_SECONDS"
    )

    # Ledger concurrency
    ledger_lock_stripes: int = Field(default=256, ge=1, alias="LEDGER_LOCK_STRIPES")
    ledger_insert_retries: int = Field(default=3, ge=0, alias="LEDGER_INSERT_RETRIES")

    # CORS configuration for web frontend access
    cors_origins: list[str] = Field(
        default=["*"],
        alias="CORS_ORIGINS",
    )
    cors_allow_credentials: bool = Field(default=True, alias="CORS_ALLOW_CREDENTIALS")
    cors_allow_methods: list[str] = Field(
        default=["GET", "POST", "OPTIONS"],
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
        """Database URL with any async driver suffix removed, for Alembic."""
        url = self.effective_database_url
        scheme, sep, rest = url.partition("://")
        for async_driver in ("+aiosqlite", "+asyncpg", "+psycopg_async"):
            if scheme.endswith(async_driver):
                scheme = scheme[: -len(async_driver)]
        return f"{scheme}{sep}{rest}"

    @property
    def effective_database_url(self) -> str:
        """Return the database URL respecting testing overrides."""
        if self.use_testing_database and self.test_database_url:
            return self.test_database_url
        return self.database_url

    @property
    def rate_limit_budgets(self) -> dict[str, tuple[int, int]]:
        """Return ``{action_class: (max_actions, window_seconds)}``."""
        return {
            "post-create": (
                self.rate_limit_post_actions,
                self.rate_limit_post_window_seconds,
            ),
            "comment-create": (
                self.rate_limit_comment_actions,
                self.rate_limit_comment_window_seconds,
            ),
            "vote": (self.rate_limit_vote_actions, self.rate_limit_vote_window_seconds),
            "flag": (self.rate_limit_flag_actions, self.rate_limit_flag_window_seconds),
        }


settings = Settings()

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # PostgreSQL
    postgres_host: str = "localhost"
    postgres_port: int = 5432
    postgres_user: str = "vis_user"
    postgres_password: str = "changeme"
    postgres_db: str = "ai_visibility"

    @property
    def postgres_url(self) -> str:
        return (
            f"postgresql+asyncpg://{self.postgres_user}:{self.postgres_password}"
            f"@{self.postgres_host}:{self.postgres_port}/{self.postgres_db}"
        )

    @property
    def postgres_url_sync(self) -> str:
        """For Alembic migrations (sync driver)."""
        return (
            f"postgresql+psycopg2://{self.postgres_user}:{self.postgres_password}"
            f"@{self.postgres_host}:{self.postgres_port}/{self.postgres_db}"
        )

    # Auth
    jwt_secret_key: str = "change-this-to-a-random-string"
    jwt_access_token_expire_minutes: int = 30
    jwt_algorithm: str = "HS256"

    # Encryption for account-level provider credentials
    fernet_key: str = ""

    # Server-wide provider API keys (used when the account has none of its own)
    openai_api_key: str = ""
    anthropic_api_key: str = ""
    perplexity_api_key: str = ""
    google_api_key: str = ""
    xai_api_key: str = ""

    # Provider models
    openai_model: str = "gpt-4.1-mini"
    anthropic_model: str = "claude-sonnet-4-5"
    perplexity_model: str = "sonar"
    gemini_model: str = "gemini-2.5-flash"
    grok_model: str = "grok-3-mini"
    provider_timeout_seconds: float = 60.0

    # Sentiment enrichment (OpenAI judge)
    sentiment_model: str = "gpt-4.1-mini"
    sentiment_timeout_seconds: float = 30.0

    # App
    app_env: str = "development"
    app_debug: bool = True
    app_host: str = "0.0.0.0"
    app_port: int = 8000

    # CORS
    allowed_origins: str = "*"  # comma-separated, e.g. "https://app.example.com,https://admin.example.com"

    # Rate limit for POST /visibility/check (slowapi syntax)
    check_rate_limit: str = "5/minute"

    # Logging
    log_level: str = "INFO"
    log_json: bool = False  # set True in production for structured JSON logs

    # Sentry
    sentry_dsn: str = ""  # leave empty to disable


settings = Settings()


def validate_settings_for_production() -> None:
    """Validate critical settings. Called on startup in non-test environments."""
    errors: list[str] = []

    if settings.jwt_secret_key in ("change-this-to-a-random-string", ""):
        errors.append("JWT_SECRET_KEY must be set to a secure random value")

    if len(settings.jwt_secret_key) < 32:
        errors.append("JWT_SECRET_KEY must be at least 32 characters")

    if not settings.fernet_key:
        errors.append(
            'FERNET_KEY must be set (generate with: python -c "from cryptography.fernet import Fernet; print(Fernet.generate_key().decode())")'
        )

    if settings.app_env == "production":
        if settings.allowed_origins == "*":
            errors.append("ALLOWED_ORIGINS must not be '*' in production")
        if settings.app_debug:
            errors.append("APP_DEBUG must be false in production")

    if errors:
        raise SystemExit("Configuration errors:\n  - " + "\n  - ".join(errors))

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Database configuration
    DATABASE_URL: str | None = None

    # Session cookie issued by the identity provider
    SESSION_COOKIE_NAME: str = "better-auth.session_token"
    SECURE_SESSION_COOKIE_NAME: str = "__Secure-better-auth.session_token"

    # Organization context sources
    ORGANIZATION_HEADER: str = "X-Organization-Id"
    ORGANIZATION_FIELD: str = "organizationId"  # query parameter and body field

    # Application URLs
    FRONTEND_URL: str | None = None
    CORS_ORIGINS: list[str] = ["http://localhost:3000"]

    # Pagination
    DEFAULT_PAGE_SIZE: int = 10
    MAX_PAGE_SIZE: int = 100

    LOG_LEVEL: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )


settings = Settings()

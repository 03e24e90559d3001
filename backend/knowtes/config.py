"""pydantic-settings based application configuration."""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Knowtes application settings.

    All values are loaded from environment variables.
    A .env file in the working directory is also supported.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # --- Database ---
    DATABASE_URL: str = "postgresql+asyncpg://knowtes:knowtes@db:5432/knowtes"

    # --- JWT ---
    JWT_SECRET: str = "change-this-secret-key"
    JWT_ALGORITHM: str = "HS256"
    JWT_ACCESS_TOKEN_EXPIRE_MINUTES: int = 30
    JWT_REFRESH_TOKEN_EXPIRE_DAYS: int = 7

    # --- Completion API (OpenRouter or any OpenAI-compatible endpoint) ---
    OPENROUTER_API_KEY: str = ""
    OPENROUTER_BASE_URL: str = "https://openrouter.ai/api/v1"
    OPENROUTER_DEFAULT_MODEL: str = "openai/gpt-4o-mini"
    OPENROUTER_TIMEOUT_MS: int = 30000
    OPENROUTER_REFERER: str = "https://knowtes.app"
    OPENROUTER_APP_TITLE: str = "Knowtes"

    # --- Summaries ---
    SUMMARY_MODEL: str = ""  # empty = OPENROUTER_DEFAULT_MODEL
    SUMMARY_MAX_TOKENS: int = 1000
    SUMMARY_TEMPERATURE: float = 0.7

    # --- HTTP ---
    CORS_ORIGINS: list[str] = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ]
    LOG_LEVEL: str = "INFO"

    @property
    def async_database_url(self) -> str:
        """Ensure the database URL uses the asyncpg driver."""
        url = self.DATABASE_URL
        if url.startswith("postgresql://"):
            url = url.replace("postgresql://", "postgresql+asyncpg://", 1)
        return url

    @property
    def summary_model(self) -> str:
        return self.SUMMARY_MODEL or self.OPENROUTER_DEFAULT_MODEL


@lru_cache
def get_settings() -> Settings:
    """Return cached application settings singleton."""
    return Settings()

"""Application configuration loaded from environment variables and .env file."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings.

    Values are loaded from environment variables first,
    then from a .env file in the project root as fallback.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    DATABASE_URL: str = "sqlite:///./kappa_tracker.db"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"
    HOST: str = "127.0.0.1"
    PORT: int = 8000

    # Task / hideout catalog (tarkov.dev GraphQL)
    CATALOG_ENDPOINT: str = "https://api.tarkov.dev/graphql"
    CATALOG_CACHE_DIR: str = "./ref-cache"
    CATALOG_CACHE_TTL_HOURS: int = 24
    CATALOG_TIMEOUT_SECONDS: float = 30.0

    TEAM_MEMBER_LIMIT: int = 5


settings = Settings()

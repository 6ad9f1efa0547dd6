from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.
    Runtime endpoints (ports, hosts, input file) come from the command line.
    """

    model_config = SettingsConfigDict(
        extra="ignore",
        env_ignore_empty=True,
    )

    # Database Configuration
    DATABASE_URL: str = "sqlite:///./messages.db"

    # Logging Configuration
    LOG_LEVEL: str = "INFO"

    # Prometheus exposition port for the server, 0 disables it
    METRICS_PORT: int = 0

    # Name the keeper object is bound under in the naming service
    BINDING_NAME: str = "//MessageKeeper"


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.
    Uses lru_cache to avoid re-reading the environment on every call.
    """
    return Settings()


# Global settings instance
settings = get_settings()

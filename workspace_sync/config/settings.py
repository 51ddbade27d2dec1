from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class ClientSettings(BaseSettings):
    """
    Client settings loaded from environment variables.

    Every field can be overridden with a ``WORKSPACE_SYNC_`` prefixed
    environment variable, or from a ``.env`` file in the working directory.
    """

    model_config = SettingsConfigDict(
        env_prefix="WORKSPACE_SYNC_", env_file=".env", extra="ignore"
    )

    # Remote store
    API_BASE_URL: str = "http://localhost:8080/api/v1"
    API_TOKEN: str = ""  # Sent as a bearer token when set
    REQUEST_TIMEOUT: float = 30.0  # Seconds, enforced by the transport

    # Session
    WORKSPACE_NAME: str = ""  # Empty means "last active workspace"
    THEME_APPLY_DELAY: float = 0.0
    AUTO_SAVE_DELAY: float = 1.0

    # Development and debugging
    LOG_LEVEL: str = "INFO"
    DEBUG: bool = False


@lru_cache
def get_settings() -> ClientSettings:
    return ClientSettings()

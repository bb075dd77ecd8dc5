from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict
from packages.isim_core.errors import ConfigurationError

class ISIMConfig(BaseSettings):
    """
    Application wide settings.
    Values are read from environment variables and the .env file.
    """
    PROJECT_NAME: str = "ISIM Interview Simulator"
    VERSION: str = "0.1.0"

    # Local durable storage (replaces the browser's local storage)
    DATA_DIR: str = "data"
    STORAGE_NAMESPACE: str = "persist:root"

    # Language model. Without a key the local fallbacks are used.
    OPENAI_API_KEY: Optional[str] = None
    OPENAI_MODEL: str = "gpt-4-turbo-preview"
    LLM_TIMEOUT_SEC: float = 30.0

    # Timer sampling interval (display refresh only)
    TIMER_TICK_MS: int = 100

    LOG_DIR: str = "logs"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    @classmethod
    def load(cls) -> "ISIMConfig":
        """
        Load settings, wrapping any failure in ConfigurationError.
        """
        try:
            return cls()
        except Exception as e:
            raise ConfigurationError(f"Failed to load configuration: {str(e)}") from e

from typing import Optional
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ConfigManagerSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="CONFIG_MANAGER_",
        env_file=".env",
        extra="ignore",
    )

    # Cache settings
    CACHE_ENABLED: bool = True

    # File watcher settings
    RELOAD_DELAY: float = Field(0.1, ge=0, description="Seconds to wait after a change notification before reloading")
    WATCH_DEBOUNCE_MS: int = Field(200, ge=0)
    WATCH_STEP_MS: int = Field(50, gt=0)
    WATCHER_STOP_TIMEOUT: float = Field(5.0, gt=0, description="Bounded wait for a watcher thread on close")

    # Default provider settings
    ENV_PREFIX: Optional[str] = None
    SYSTEM_PROPERTIES_PRIORITY: int = 200
    ENVIRONMENT_PRIORITY: int = 300
    PROPERTIES_FILE: Optional[str] = None
    PROPERTIES_PRIORITY: int = 100
    YAML_FILE: Optional[str] = None
    YAML_PRIORITY: int = 150

    # API settings
    API_HOST: str = "localhost"
    API_PORT: int = 8000

    @property
    def API_URL(self) -> str:
        return f"http://{self.API_HOST}:{self.API_PORT}"


# Global settings instance
settings = ConfigManagerSettings()

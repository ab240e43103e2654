from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, HTTPException

from shared.common_utils import logger
from .config_manager import ConfigManager, create_default_config_manager
from .schemas import (
    ConfigKeysResponse,
    ConfigManagerStats,
    ConfigPropertiesResponse,
    ConfigValueResponse,
    RefreshResponse,
)
from ..config.env_settings import settings


def create_app(manager: ConfigManager, close_on_shutdown: bool = False) -> FastAPI:
    """Read-only HTTP view over a ConfigManager."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        if close_on_shutdown:
            manager.close()

    app = FastAPI(title="Config Manager Service", lifespan=lifespan)

    @app.get("/api/v1/config/{key}")
    def get_config_value(key: str) -> ConfigValueResponse:
        value = manager.get_string(key)
        if value is None:
            raise HTTPException(status_code=404, detail=f"Configuration key {key} not found")
        return ConfigValueResponse(key=key, value=value, source=manager.get_config_source(key))

    @app.get("/api/v1/config")
    def get_config_properties(prefix: str = "") -> ConfigPropertiesResponse:
        return ConfigPropertiesResponse(prefix=prefix, properties=manager.get_properties(prefix))

    @app.get("/api/v1/keys")
    def get_config_keys(prefix: Optional[str] = None) -> ConfigKeysResponse:
        return ConfigKeysResponse(prefix=prefix, keys=manager.get_keys(prefix))

    @app.get("/api/v1/stats")
    def get_stats() -> ConfigManagerStats:
        return manager.get_stats()

    @app.post("/api/v1/refresh")
    def refresh_all() -> RefreshResponse:
        manager.refresh_all()
        return RefreshResponse(success=True, message="All providers refreshed")

    @app.post("/api/v1/refresh/{provider_name}")
    def refresh_provider(provider_name: str) -> RefreshResponse:
        if manager.get_provider(provider_name) is None:
            raise HTTPException(status_code=404, detail=f"Provider {provider_name} not found")
        manager.refresh(provider_name)
        logger.info(f"Provider {provider_name} refreshed via API")
        return RefreshResponse(success=True, message=f"Provider {provider_name} refreshed")

    return app


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        create_app(create_default_config_manager(), close_on_shutdown=True),
        host=settings.API_HOST,
        port=settings.API_PORT,
    )

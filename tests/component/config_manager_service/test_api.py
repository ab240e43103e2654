import pytest
from fastapi.testclient import TestClient

from services.config_manager_service import ConfigManager, MemoryConfigProvider
from services.config_manager_service.src.api import create_app
from services.config_manager_service.src.providers.base import ReadOnlyConfigProvider
from services.config_manager_service.src.schemas import ConfigSourceType


class FailingRefreshProvider(ReadOnlyConfigProvider):
    @property
    def source_type(self):
        return ConfigSourceType.CUSTOM

    def _get(self, key):
        return None

    def _entries(self):
        return {}

    def refresh(self):
        raise RuntimeError("refresh failed")


# Test fixtures
@pytest.fixture
def memory_provider():
    return MemoryConfigProvider(
        "memory", priority=10, properties={"app.name": "configmesh", "app.timeout": "30", "db.url": "x"}
    )


@pytest.fixture
def client(memory_provider):
    manager = ConfigManager(cache_enabled=True)
    manager.register_provider(memory_provider)
    manager.register_provider(FailingRefreshProvider("failing", priority=20))
    with TestClient(create_app(manager, close_on_shutdown=True)) as test_client:
        yield test_client
    assert manager.is_closed()


# Test cases
def test_get_config_value(client):
    """Test reading a single resolved value with its source."""
    response = client.get("/api/v1/config/app.timeout")
    assert response.status_code == 200
    assert response.json() == {"key": "app.timeout", "value": "30", "source": "memory"}


def test_get_missing_config_value(client):
    """Test that an unknown key is a 404."""
    response = client.get("/api/v1/config/app.missing")
    assert response.status_code == 404
    assert "app.missing" in response.json()["detail"]


def test_get_config_properties(client):
    """Test the merged view filtered by prefix."""
    response = client.get("/api/v1/config", params={"prefix": "app."})
    assert response.status_code == 200
    assert response.json() == {
        "prefix": "app.",
        "properties": {"app.name": "configmesh", "app.timeout": "30"},
    }


def test_get_config_keys(client):
    """Test listing known keys."""
    response = client.get("/api/v1/keys")
    assert response.status_code == 200
    assert sorted(response.json()["keys"]) == ["app.name", "app.timeout", "db.url"]


def test_get_stats(client):
    """Test the statistics endpoint."""
    client.get("/api/v1/config/app.timeout")
    client.get("/api/v1/config/app.timeout")

    response = client.get("/api/v1/stats")
    assert response.status_code == 200
    stats = response.json()
    assert stats["provider_count"] == 2
    assert stats["provider_config_counts"] == {"memory": 3, "failing": 0}
    assert stats["cache_hit_count"] >= 1


def test_refresh_all_tolerates_failures(client):
    """Test that refreshing everything succeeds even if one provider fails."""
    response = client.post("/api/v1/refresh")
    assert response.status_code == 200
    assert response.json()["success"] is True


def test_refresh_provider(client, memory_provider):
    """Test refreshing one provider and seeing a changed value."""
    assert client.get("/api/v1/config/app.timeout").json()["value"] == "30"
    memory_provider.set_property("app.timeout", "45")

    response = client.post("/api/v1/refresh/memory")
    assert response.status_code == 200
    assert client.get("/api/v1/config/app.timeout").json()["value"] == "45"


def test_refresh_unknown_provider(client):
    """Test that refreshing an unknown provider is a 404."""
    response = client.post("/api/v1/refresh/unknown")
    assert response.status_code == 404

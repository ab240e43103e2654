import pytest

from services.config_manager_service import ClosedManagerError
from services.config_manager_service.src import config_loader
from services.config_manager_service.src.config_loader import (
    get_config,
    get_config_manager,
    initialize_config,
    shutdown_config,
)


# Test fixtures
@pytest.fixture(autouse=True)
def reset_process_manager():
    shutdown_config()
    yield
    shutdown_config()


# Test cases
def test_initialize_config(properties_file, yaml_file):
    """Test building the process-wide manager from files."""
    manager = initialize_config(properties_file=properties_file, yaml_file=yaml_file)

    assert get_config_manager() is manager
    assert get_config("app.name") == "configmesh"
    assert get_config("server.port") == "8080"
    assert get_config("app.missing", "fallback") == "fallback"


def test_initialize_config_replaces_previous(properties_file):
    """Test that re-initializing closes the previous manager."""
    first = initialize_config(properties_file=properties_file)
    second = initialize_config(properties_file=properties_file)

    assert first is not second
    assert first.is_closed()
    with pytest.raises(ClosedManagerError):
        first.get_string("app.name")
    assert second.get_string("app.name") == "configmesh"


def test_get_config_manager_creates_default():
    """Test lazy creation of a default manager."""
    manager = get_config_manager()
    names = [p.name for p in manager.get_providers()]
    assert "system-properties" in names
    assert "environment" in names
    assert get_config_manager() is manager
    assert get_config("python.version") is not None


def test_shutdown_config(properties_file):
    """Test that shutdown closes the process-wide manager."""
    manager = initialize_config(properties_file=properties_file)
    shutdown_config()

    assert manager.is_closed()
    assert config_loader._config_manager is None
    assert get_config_manager() is not manager

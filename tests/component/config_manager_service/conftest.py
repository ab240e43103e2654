import time
import pytest
import yaml
from pathlib import Path
from typing import Callable, List, Optional

from services.config_manager_service import (
    ConfigChangeEvent,
    ConfigChangeListener,
    ConfigManager,
)


class RecordingListener(ConfigChangeListener):
    """Listener that records every event it receives."""

    def __init__(self, keys: Optional[List[str]] = None, requery: Optional[ConfigManager] = None):
        self.events: List[ConfigChangeEvent] = []
        self.observed: List[Optional[str]] = []
        self._keys = keys
        self._requery = requery

    def on_config_change(self, event: ConfigChangeEvent) -> None:
        self.events.append(event)
        if self._requery is not None:
            self.observed.append(self._requery.get_string(event.key))

    def is_interested_in(self, key: str) -> bool:
        return self._keys is None or key in self._keys


class FailingListener(ConfigChangeListener):
    """Listener that always raises."""

    def __init__(self):
        self.calls = 0

    def on_config_change(self, event: ConfigChangeEvent) -> None:
        self.calls += 1
        raise RuntimeError("listener failure")


@pytest.fixture
def recording_listener_factory():
    return RecordingListener


@pytest.fixture
def failing_listener():
    return FailingListener()


@pytest.fixture
def temp_config_dir(tmp_path):
    """Create a temporary directory for test configuration files."""
    return tmp_path


@pytest.fixture
def properties_file(temp_config_dir) -> Path:
    """Create a test properties file."""
    path = temp_config_dir / "application.properties"
    path.write_text(
        "# application settings\n"
        "app.name=configmesh\n"
        "app.timeout=30\n"
        "app.debug=true\n"
        "app.ratio=0.75\n"
        "! legacy comment\n"
        "db.url = jdbc:postgresql://localhost/test\n",
        encoding="utf-8",
    )
    return path


@pytest.fixture
def yaml_file(temp_config_dir) -> Path:
    """Create a test YAML document."""
    path = temp_config_dir / "application.yaml"
    content = {
        "app": {
            "name": "configmesh-yaml",
            "timeout": 90,
            "features": ["a", "b"],
        },
        "server": {"port": 8080, "ssl": {"enabled": False}},
    }
    with open(path, "w") as f:
        yaml.dump(content, f)
    return path


@pytest.fixture
def config_manager():
    """Create a ConfigManager instance for testing."""
    manager = ConfigManager(cache_enabled=True)
    yield manager
    manager.close()


@pytest.fixture
def wait_for():
    """Poll ``predicate`` until it holds, optionally running ``poke`` between polls."""

    def _wait_for(predicate: Callable[[], bool], timeout: float = 10.0, poke: Optional[Callable[[], None]] = None) -> bool:
        deadline = time.monotonic() + timeout
        next_poke = time.monotonic() + 1.0
        while time.monotonic() < deadline:
            if predicate():
                return True
            if poke is not None and time.monotonic() >= next_poke:
                poke()
                next_poke = time.monotonic() + 1.0
            time.sleep(0.05)
        return predicate()

    return _wait_for

import threading
from typing import Dict, Mapping, Optional

from shared.common_utils import ReadWriteLock
from .base import ConfigProvider
from ..schemas import ConfigSourceType, diff_properties


class MemoryConfigProvider(ConfigProvider):
    """Mutable in-memory provider.

    Every mutation is diffed against the previous state and the resulting
    events are delivered to listeners, the same way a reloaded properties
    file is. Custom backends can follow this shape: swap a snapshot, then
    notify.
    """

    def __init__(
        self,
        name: str,
        priority: int = 50,
        properties: Optional[Mapping[str, str]] = None,
        source_type: ConfigSourceType = ConfigSourceType.MEMORY,
    ):
        super().__init__(name, priority)
        self._source_type = source_type
        self._lock = ReadWriteLock()
        self._write_lock = threading.RLock()
        self._properties: Dict[str, str] = {str(k): str(v) for k, v in (properties or {}).items()}

    @property
    def source_type(self) -> ConfigSourceType:
        return self._source_type

    def _get(self, key: str) -> Optional[str]:
        with self._lock.read_locked():
            return self._properties.get(key.strip())

    def _entries(self) -> Dict[str, str]:
        with self._lock.read_locked():
            return dict(self._properties)

    def _apply(self, new_properties: Dict[str, str]) -> None:
        with self._write_lock:
            with self._lock.write_locked():
                old_properties = self._properties
                self._properties = new_properties
            self._notify(diff_properties(old_properties, new_properties, self.name))

    def set_property(self, key: str, value: str) -> None:
        if key is None or not key.strip():
            raise ValueError("Property key cannot be empty")
        with self._write_lock:
            updated = self._entries()
            updated[key.strip()] = str(value)
            self._apply(updated)

    def remove_property(self, key: str) -> bool:
        with self._write_lock:
            updated = self._entries()
            if updated.pop(key.strip(), None) is None:
                return False
            self._apply(updated)
            return True

    def update(self, properties: Mapping[str, str]) -> None:
        """Merge ``properties`` into the current state."""
        with self._write_lock:
            updated = self._entries()
            updated.update({str(k): str(v) for k, v in properties.items()})
            self._apply(updated)

    def replace(self, properties: Mapping[str, str]) -> None:
        """Replace the whole state; keys missing from ``properties`` are deleted."""
        self._apply({str(k): str(v) for k, v in properties.items()})

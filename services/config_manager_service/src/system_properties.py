"""
Process-wide in-memory property store.

Holds string properties that live for the lifetime of the process, seeded
with a few runtime facts. ``SystemPropertiesConfigProvider`` reads from it
by default; tests inject their own mapping instead of touching this one.
"""
import os
import platform
import threading
from pathlib import Path
from typing import Dict, Optional

_lock = threading.Lock()
_properties: Dict[str, str] = {}


def _seed() -> None:
    _properties.update({
        "python.version": platform.python_version(),
        "python.implementation": platform.python_implementation(),
        "os.name": platform.system(),
        "os.version": platform.release(),
        "user.dir": os.getcwd(),
        "user.home": str(Path.home()),
        "file.separator": os.sep,
        "path.separator": os.pathsep,
        "line.separator": os.linesep,
    })


def get_property(key: str, default: Optional[str] = None) -> Optional[str]:
    with _lock:
        return _properties.get(key, default)


def set_property(key: str, value: str) -> Optional[str]:
    """Set a property and return its previous value."""
    if not key:
        raise ValueError("Property key cannot be empty")
    with _lock:
        previous = _properties.get(key)
        _properties[key] = str(value)
        return previous


def clear_property(key: str) -> Optional[str]:
    with _lock:
        return _properties.pop(key, None)


def get_properties() -> Dict[str, str]:
    """Snapshot of every property."""
    with _lock:
        return dict(_properties)


class _StoreView:
    """Live read-only mapping view over the process store."""

    def get(self, key: str, default: Optional[str] = None) -> Optional[str]:
        return get_property(key, default)

    def __contains__(self, key: str) -> bool:
        return get_property(key) is not None

    def __getitem__(self, key: str) -> str:
        value = get_property(key)
        if value is None:
            raise KeyError(key)
        return value

    def __iter__(self):
        return iter(get_properties())

    def __len__(self) -> int:
        with _lock:
            return len(_properties)

    def items(self):
        return get_properties().items()


store = _StoreView()

_seed()

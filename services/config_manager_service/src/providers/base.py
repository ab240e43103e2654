"""Configuration provider contract.

A provider is a named, prioritized, read-only source of string key/value
pairs. Concrete providers implement ``_get`` (point lookup) and ``_entries``
(snapshot of every key they expose); everything else, including typed access
and listener bookkeeping, is shared here.
"""
import sys
import threading
from abc import ABC, abstractmethod
from typing import Dict, List, Optional, Set, Type, TypeVar

from shared.common_utils import logger
from ..converters import convert_string, parse_boolean, parse_double, parse_integer, parse_long
from ..listeners import ConfigChangeListener, ListenerLike, as_listener, dispatch
from ..schemas import ConfigChangeEvent, ConfigSourceType

T = TypeVar("T")

DEFAULT_PRIORITY = sys.maxsize


def is_blank(key: Optional[str]) -> bool:
    return key is None or not key.strip()


class ConfigProvider(ABC):
    """Base class for every configuration source.

    Lower ``priority`` values are resolved first by a ConfigManager. Names must
    be unique within a manager. ``supports``/``contains_key`` always agree with
    what ``get_string`` returns.
    """

    def __init__(self, name: str, priority: int = DEFAULT_PRIORITY):
        if is_blank(name):
            raise ValueError("Provider name cannot be empty")
        self._name = name
        self._priority = priority
        self._listeners: List[ConfigChangeListener] = []
        self._listeners_lock = threading.Lock()

    @property
    def name(self) -> str:
        return self._name

    @property
    def priority(self) -> int:
        return self._priority

    @property
    @abstractmethod
    def source_type(self) -> ConfigSourceType:
        pass

    @abstractmethod
    def _get(self, key: str) -> Optional[str]:
        """Look up a single non-blank key."""
        pass

    @abstractmethod
    def _entries(self) -> Dict[str, str]:
        """Snapshot of every key/value pair this provider exposes."""
        pass

    def supports(self, key: str) -> bool:
        return not is_blank(key)

    def get_string(self, key: str, default: Optional[str] = None) -> Optional[str]:
        if is_blank(key):
            return default
        value = self._get(key)
        return default if value is None else value

    def get_integer(self, key: str, default: Optional[int] = None) -> Optional[int]:
        value = self.get_string(key)
        return default if value is None else parse_integer(key, value)

    def get_long(self, key: str, default: Optional[int] = None) -> Optional[int]:
        value = self.get_string(key)
        return default if value is None else parse_long(key, value)

    def get_double(self, key: str, default: Optional[float] = None) -> Optional[float]:
        value = self.get_string(key)
        return default if value is None else parse_double(key, value)

    def get_boolean(self, key: str, default: Optional[bool] = None) -> Optional[bool]:
        value = self.get_string(key)
        return default if value is None else parse_boolean(key, value)

    def get_object(self, key: str, type_: Type[T], default: Optional[T] = None) -> Optional[T]:
        value = self.get_string(key)
        return default if value is None else convert_string(key, value, type_)

    def get_properties(self, prefix: str = "") -> Dict[str, str]:
        prefix = (prefix or "").strip()
        return {key: value for key, value in self._entries().items() if key.startswith(prefix)}

    def get_keys(self, prefix: Optional[str] = None) -> Set[str]:
        if prefix is None:
            return set(self._entries())
        return set(self.get_properties(prefix))

    def contains_key(self, key: str) -> bool:
        return not is_blank(key) and self._get(key) is not None

    def refresh(self) -> None:
        """Reload the backing source. Sources that cannot change do nothing."""
        pass

    def add_listener(self, listener: ListenerLike) -> None:
        listener = as_listener(listener)
        with self._listeners_lock:
            if listener not in self._listeners:
                self._listeners.append(listener)

    def remove_listener(self, listener: ListenerLike) -> None:
        listener = as_listener(listener)
        with self._listeners_lock:
            if listener in self._listeners:
                self._listeners.remove(listener)

    def _notify(self, events: List[ConfigChangeEvent]) -> None:
        if not events:
            return
        with self._listeners_lock:
            listeners = list(self._listeners)
        for event in events:
            logger.debug(f"Provider {self._name}: {event.change_type.value} '{event.key}'")
            dispatch(event, listeners)

    def is_available(self) -> bool:
        return True

    def close(self) -> None:
        with self._listeners_lock:
            self._listeners.clear()

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}(name={self._name!r}, priority={self._priority}, "
            f"source_type={self.source_type.value!r})"
        )


class ReadOnlyConfigProvider(ConfigProvider):
    """Provider over a store that cannot change in a way it can observe.

    Refreshing and listener registration are no-ops.
    """

    def add_listener(self, listener: ListenerLike) -> None:
        pass

    def remove_listener(self, listener: ListenerLike) -> None:
        pass

    def supports(self, key: str) -> bool:
        return self.contains_key(key)

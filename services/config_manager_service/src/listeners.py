from abc import ABC, abstractmethod
from typing import Callable, Iterable, Optional, Union

from shared.common_utils import logger
from .schemas import ConfigChangeEvent


class ConfigChangeListener(ABC):
    """Receives change events from providers or from a ConfigManager."""

    @abstractmethod
    def on_config_change(self, event: ConfigChangeEvent) -> None:
        pass

    @property
    def name(self) -> str:
        return self.__class__.__name__

    def is_interested_in(self, key: str) -> bool:
        return True


class CallbackListener(ConfigChangeListener):
    """Adapts a plain callable to the listener contract.

    Two adapters wrapping the same callable compare equal, so a callable can
    be removed with the same object it was added with.
    """

    def __init__(
        self,
        callback: Callable[[ConfigChangeEvent], None],
        key_filter: Optional[Callable[[str], bool]] = None,
    ):
        self._callback = callback
        self._key_filter = key_filter

    def on_config_change(self, event: ConfigChangeEvent) -> None:
        self._callback(event)

    @property
    def name(self) -> str:
        return getattr(self._callback, "__qualname__", repr(self._callback))

    def is_interested_in(self, key: str) -> bool:
        return self._key_filter is None or self._key_filter(key)

    def __eq__(self, other):
        if isinstance(other, CallbackListener):
            return self._callback == other._callback and self._key_filter == other._key_filter
        return NotImplemented

    def __hash__(self):
        return hash((self._callback, self._key_filter))


ListenerLike = Union[ConfigChangeListener, Callable[[ConfigChangeEvent], None]]


def as_listener(listener: ListenerLike) -> ConfigChangeListener:
    if isinstance(listener, ConfigChangeListener):
        return listener
    if callable(listener):
        return CallbackListener(listener)
    raise TypeError(f"Expected a ConfigChangeListener or a callable, got {type(listener).__name__}")


def dispatch(
    event: ConfigChangeEvent,
    listeners: Iterable[ConfigChangeListener],
    check_interest: bool = True,
) -> None:
    """Deliver an event to each listener; a failing listener is logged and skipped."""
    for listener in listeners:
        if check_interest and not listener.is_interested_in(event.key):
            continue
        try:
            listener.on_config_change(event)
        except Exception as e:
            logger.error(f"Config change listener {listener.name} failed on '{event.key}': {str(e)}")

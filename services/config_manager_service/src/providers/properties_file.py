import threading
from pathlib import Path
from typing import Dict, Optional, Union

from watchfiles import Change, watch

from shared.common_utils import logger, ReadWriteLock
from .base import ConfigProvider
from .. import properties_format
from ..exceptions import ConfigError, ConfigSourceError, ProviderUnavailableError
from ..schemas import ConfigSourceType, diff_properties
from ...config.env_settings import settings


class PropertiesConfigProvider(ConfigProvider):
    """Flat ``key=value`` file provider with live reload.

    A daemon thread watches the file's directory for modifications of the
    file. After a notification it waits ``reload_delay`` seconds, re-reads the
    file, swaps the held map and notifies listeners of every added, modified
    or deleted key. A failed background reload is logged and keeps the
    previous map.
    """

    def __init__(
        self,
        name: str,
        file_path: Union[str, Path],
        priority: int = 100,
        watch: bool = True,
        reload_delay: Optional[float] = None,
        watch_debounce_ms: Optional[int] = None,
        watch_step_ms: Optional[int] = None,
        stop_timeout: Optional[float] = None,
    ):
        super().__init__(name, priority)
        self._path = Path(file_path)
        self._reload_delay = settings.RELOAD_DELAY if reload_delay is None else reload_delay
        self._watch_debounce_ms = settings.WATCH_DEBOUNCE_MS if watch_debounce_ms is None else watch_debounce_ms
        self._watch_step_ms = settings.WATCH_STEP_MS if watch_step_ms is None else watch_step_ms
        self._stop_timeout = settings.WATCHER_STOP_TIMEOUT if stop_timeout is None else stop_timeout

        self._lock = ReadWriteLock()
        self._reload_lock = threading.RLock()
        self._properties: Dict[str, str] = {}
        self._stop_event = threading.Event()
        self._watch_thread: Optional[threading.Thread] = None
        self._closed = False

        try:
            self._properties = self._read()
            logger.info(f"Loaded {len(self._properties)} properties from {self._path}")
        except ConfigError as e:
            logger.warning(f"Provider {name} starts empty: {str(e)}")

        if watch:
            self._start_watcher()

    @property
    def source_type(self) -> ConfigSourceType:
        return ConfigSourceType.PROPERTIES

    @property
    def file_path(self) -> Path:
        return self._path

    @property
    def watching(self) -> bool:
        return self._watch_thread is not None and self._watch_thread.is_alive()

    def _read(self) -> Dict[str, str]:
        if not self._path.exists():
            raise ProviderUnavailableError(f"Properties file not found: {self._path}")
        try:
            return properties_format.load(self._path)
        except (OSError, UnicodeDecodeError) as e:
            raise ConfigSourceError(f"Failed to load properties file {self._path}: {e}") from e

    def _get(self, key: str) -> Optional[str]:
        with self._lock.read_locked():
            return self._properties.get(key.strip())

    def _entries(self) -> Dict[str, str]:
        with self._lock.read_locked():
            return dict(self._properties)

    def refresh(self) -> None:
        """Re-read the file and notify listeners of the differences.

        Raises ProviderUnavailableError or ConfigSourceError without touching
        the held properties when the file cannot be read.
        """
        with self._reload_lock:
            new_properties = self._read()
            with self._lock.write_locked():
                old_properties = self._properties
                self._properties = new_properties

            events = diff_properties(old_properties, new_properties, self.name)
            if events:
                logger.info(f"Reloaded {self._path}: {len(events)} change(s)")
            self._notify(events)

    def is_available(self) -> bool:
        return self._path.exists()

    def _start_watcher(self) -> None:
        if not self._path.exists():
            logger.warning(f"Not watching {self._path}: file does not exist")
            return
        self._watch_thread = threading.Thread(
            target=self._watch_loop,
            name=f"PropertiesConfigWatcher-{self.name}",
            daemon=True,
        )
        self._watch_thread.start()
        logger.info(f"Watching {self._path} for changes")

    def _watch_filter(self, change: Change, path: str) -> bool:
        return change in (Change.modified, Change.added) and Path(path).name == self._path.name

    def _watch_loop(self) -> None:
        directory = self._path.resolve().parent
        try:
            for changes in watch(
                directory,
                watch_filter=self._watch_filter,
                debounce=self._watch_debounce_ms,
                step=self._watch_step_ms,
                stop_event=self._stop_event,
                recursive=False,
            ):
                logger.debug(f"Properties file changed: {changes}")
                # Give the writer a moment to finish before reading.
                if self._stop_event.wait(self._reload_delay):
                    break
                try:
                    self.refresh()
                except ConfigError as e:
                    logger.error(f"Background reload of {self._path} failed: {str(e)}")
                except Exception as e:
                    logger.error(f"Unexpected error reloading {self._path}: {str(e)}")
        except Exception as e:
            logger.error(f"File watcher for {self._path} stopped: {str(e)}")
        finally:
            logger.info(f"Stopped watching {self._path}")

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._stop_event.set()
        if self._watch_thread is not None and self._watch_thread is not threading.current_thread():
            self._watch_thread.join(timeout=self._stop_timeout)
            if self._watch_thread.is_alive():
                logger.warning(
                    f"Watcher for {self._path} did not stop within {self._stop_timeout}s; abandoning daemon thread"
                )
            self._watch_thread = None
        super().close()

    def __repr__(self) -> str:
        return (
            f"PropertiesConfigProvider(name={self.name!r}, file_path='{self._path}', "
            f"priority={self.priority}, available={self.is_available()})"
        )

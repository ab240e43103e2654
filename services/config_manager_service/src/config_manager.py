import threading
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Set, Type, TypeVar, Union

from shared.common_utils import logger, ReadWriteLock
from .converters import parse_boolean, parse_double, parse_integer, parse_long
from .exceptions import ClosedManagerError, DuplicateProviderError
from .listeners import ConfigChangeListener, ListenerLike, as_listener, dispatch
from .providers import (
    ConfigProvider,
    EnvironmentConfigProvider,
    PropertiesConfigProvider,
    SystemPropertiesConfigProvider,
    YamlConfigProvider,
)
from .providers.base import is_blank
from .schemas import ConfigChangeEvent, ConfigManagerStats
from ..config.env_settings import settings

T = TypeVar("T")


class ConfigManager:
    """Resolves configuration keys across prioritized providers.

    Providers are kept sorted by ascending priority; providers with equal
    priority keep their registration order. Resolved strings are cached
    together with the name of the provider that supplied them, and a change
    event from a provider drops that key from the cache before any listener
    sees the event.

    A closed manager is unusable: every call except ``close``, ``is_closed``
    and ``remove_listener`` raises ClosedManagerError.
    """

    def __init__(
        self,
        providers: Optional[Iterable[ConfigProvider]] = None,
        cache_enabled: Optional[bool] = None,
    ):
        self._providers: List[ConfigProvider] = []
        self._provider_map: Dict[str, ConfigProvider] = {}
        self._global_listeners: List[ConfigChangeListener] = []
        self._key_listeners: Dict[str, List[ConfigChangeListener]] = {}
        self._config_cache: Dict[str, str] = {}
        self._source_cache: Dict[str, str] = {}
        self._lock = ReadWriteLock()
        self._stats_lock = threading.Lock()
        self._total_query_count = 0
        self._hit_count = 0
        self._cache_hit_count = 0
        self._closed = False
        self._cache_enabled = settings.CACHE_ENABLED if cache_enabled is None else cache_enabled

        for provider in providers or []:
            self.register_provider(provider)

    # ------------------------------------------------------------------
    # Provider registry
    # ------------------------------------------------------------------

    def register_provider(self, provider: ConfigProvider) -> None:
        self._check_not_closed()
        if provider is None:
            raise ValueError("ConfigProvider cannot be None")

        with self._lock.write_locked():
            if provider.name in self._provider_map:
                raise DuplicateProviderError(provider.name)
            self._providers.append(provider)
            self._provider_map[provider.name] = provider
            self._providers.sort(key=lambda p: p.priority)
            self._clear_cache()
            provider.add_listener(self._handle_provider_change)

        logger.info(
            f"Registered provider {provider.name} ({provider.source_type.value}, priority {provider.priority})"
        )
        if not provider.is_available():
            logger.warning(f"Provider {provider.name} is not available and will be skipped until it is")

    def unregister_provider(self, provider_name: str) -> bool:
        self._check_not_closed()
        if is_blank(provider_name):
            return False

        with self._lock.write_locked():
            provider = self._provider_map.pop(provider_name, None)
            if provider is None:
                return False
            self._providers.remove(provider)
            self._clear_cache()

        provider.remove_listener(self._handle_provider_change)
        self._close_provider(provider)
        logger.info(f"Unregistered provider {provider_name}")
        return True

    def get_provider(self, provider_name: str) -> Optional[ConfigProvider]:
        self._check_not_closed()
        with self._lock.read_locked():
            return self._provider_map.get(provider_name)

    def get_providers(self) -> List[ConfigProvider]:
        self._check_not_closed()
        with self._lock.read_locked():
            return list(self._providers)

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def get_string(self, key: str, default: Optional[str] = None) -> Optional[str]:
        self._check_not_closed()
        if is_blank(key):
            self._record_query(False)
            return default

        with self._lock.read_locked():
            if self._cache_enabled:
                cached = self._config_cache.get(key)
                if cached is not None:
                    if self._is_source_available(key):
                        self._record_query(True, from_cache=True)
                        return cached
                    # The supplying source went away; resolve again.
                    self._config_cache.pop(key, None)
                    self._source_cache.pop(key, None)

            for provider in self._providers:
                if not provider.is_available() or not provider.supports(key):
                    continue
                value = provider.get_string(key)
                if value is not None:
                    if self._cache_enabled:
                        self._config_cache[key] = value
                        self._source_cache[key] = provider.name
                    self._record_query(True)
                    return value

        self._record_query(False)
        return default

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
        """Resolve ``key`` and convert it to ``type_``. Never cached."""
        self._check_not_closed()
        if is_blank(key) or type_ is None:
            return default

        with self._lock.read_locked():
            for provider in self._providers:
                if not provider.is_available() or not provider.supports(key):
                    continue
                value = provider.get_object(key, type_)
                if value is not None:
                    return value
        return default

    def get_properties(self, prefix: str = "") -> Dict[str, str]:
        """Merge matching entries of all providers; higher priority wins."""
        self._check_not_closed()
        result: Dict[str, str] = {}
        with self._lock.read_locked():
            for provider in reversed(self._providers):
                if provider.is_available():
                    result.update(provider.get_properties(prefix))
        return result

    def get_keys(self, prefix: Optional[str] = None) -> Set[str]:
        self._check_not_closed()
        result: Set[str] = set()
        with self._lock.read_locked():
            for provider in self._providers:
                if provider.is_available():
                    result.update(provider.get_keys(prefix))
        return result

    def contains_key(self, key: str) -> bool:
        return self.get_string(key) is not None

    def get_config_source(self, key: str) -> Optional[str]:
        """Name of the provider that supplies ``key``, or None."""
        self._check_not_closed()
        if is_blank(key):
            return None

        with self._lock.read_locked():
            if self._cache_enabled:
                source = self._source_cache.get(key)
                if source is not None and self._is_source_available(key):
                    return source
            for provider in self._providers:
                if provider.is_available() and provider.supports(key) and provider.contains_key(key):
                    return provider.name
        return None

    # ------------------------------------------------------------------
    # Refresh
    # ------------------------------------------------------------------

    def refresh_all(self) -> None:
        """Refresh every provider; a failing provider is logged and skipped."""
        self._check_not_closed()
        for provider in self.get_providers():
            try:
                provider.refresh()
            except Exception as e:
                logger.error(f"Error refreshing provider {provider.name}: {str(e)}")
        self._invalidate_cache()

    def refresh(self, provider_name: str) -> bool:
        """Refresh one provider. Returns False if no such provider is registered."""
        provider = self.get_provider(provider_name)
        if provider is None:
            return False
        try:
            provider.refresh()
        except Exception as e:
            logger.error(f"Error refreshing provider {provider_name}: {str(e)}")
            raise
        finally:
            self._invalidate_cache()
        return True

    # ------------------------------------------------------------------
    # Listeners
    # ------------------------------------------------------------------

    def add_listener(
        self, key_or_listener: Union[str, ListenerLike], listener: Optional[ListenerLike] = None
    ) -> None:
        """``add_listener(listener)`` subscribes to every key,
        ``add_listener(key, listener)`` to a single key."""
        self._check_not_closed()
        with self._lock.write_locked():
            if listener is None:
                global_listener = as_listener(key_or_listener)
                if global_listener not in self._global_listeners:
                    self._global_listeners.append(global_listener)
            elif not is_blank(key_or_listener):
                self._key_listeners.setdefault(key_or_listener, []).append(as_listener(listener))

    def remove_listener(
        self, key_or_listener: Union[str, ListenerLike], listener: Optional[ListenerLike] = None
    ) -> None:
        with self._lock.write_locked():
            if listener is None:
                global_listener = as_listener(key_or_listener)
                if global_listener in self._global_listeners:
                    self._global_listeners.remove(global_listener)
                return

            listeners = self._key_listeners.get(key_or_listener)
            if listeners is None:
                return
            key_listener = as_listener(listener)
            if key_listener in listeners:
                listeners.remove(key_listener)
            if not listeners:
                del self._key_listeners[key_or_listener]

    def _handle_provider_change(self, event: ConfigChangeEvent) -> None:
        if self._closed:
            return

        with self._lock.write_locked():
            self._config_cache.pop(event.key, None)
            self._source_cache.pop(event.key, None)
            global_listeners = list(self._global_listeners)
            key_listeners = list(self._key_listeners.get(event.key, ()))

        logger.debug(f"Dispatching {event.change_type.value} of '{event.key}' from {event.source}")
        dispatch(event, global_listeners)
        dispatch(event, key_listeners, check_interest=False)

    # ------------------------------------------------------------------
    # Cache and statistics
    # ------------------------------------------------------------------

    @property
    def cache_enabled(self) -> bool:
        return self._cache_enabled

    def set_cache_enabled(self, cache_enabled: bool) -> None:
        self._check_not_closed()
        with self._lock.write_locked():
            self._cache_enabled = cache_enabled
            if not cache_enabled:
                self._clear_cache()

    @property
    def cache_size(self) -> int:
        return len(self._config_cache)

    def _clear_cache(self) -> None:
        # Caller holds the write lock.
        self._config_cache.clear()
        self._source_cache.clear()

    def _is_source_available(self, key: str) -> bool:
        # Caller holds the lock.
        provider = self._provider_map.get(self._source_cache.get(key))
        return provider is not None and provider.is_available()

    def _invalidate_cache(self) -> None:
        with self._lock.write_locked():
            self._clear_cache()
        logger.debug("Configuration cache cleared")

    def _record_query(self, hit: bool, from_cache: bool = False) -> None:
        with self._stats_lock:
            self._total_query_count += 1
            if hit:
                self._hit_count += 1
            if from_cache:
                self._cache_hit_count += 1

    def get_stats(self) -> ConfigManagerStats:
        self._check_not_closed()
        counts: Dict[str, int] = {}
        statuses: Dict[str, bool] = {}
        with self._lock.read_locked():
            for provider in self._providers:
                counts[provider.name] = len(provider.get_keys())
                statuses[provider.name] = provider.is_available()

        with self._stats_lock:
            return ConfigManagerStats(
                provider_count=len(counts),
                total_config_count=sum(counts.values()),
                provider_config_counts=counts,
                provider_statuses=statuses,
                total_query_count=self._total_query_count,
                hit_count=self._hit_count,
                cache_hit_count=self._cache_hit_count,
            )

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True

        with self._lock.write_locked():
            providers = list(self._providers)
            self._providers.clear()
            self._provider_map.clear()
            self._clear_cache()
            self._global_listeners.clear()
            self._key_listeners.clear()

        # Closing joins watcher threads, which may be waiting on our lock.
        for provider in providers:
            self._close_provider(provider)
        logger.info(f"ConfigManager closed ({len(providers)} provider(s))")

    def is_closed(self) -> bool:
        return self._closed

    @staticmethod
    def _close_provider(provider: ConfigProvider) -> None:
        try:
            provider.close()
        except Exception as e:
            logger.error(f"Error closing provider {provider.name}: {str(e)}")

    def _check_not_closed(self) -> None:
        if self._closed:
            raise ClosedManagerError()

    def __enter__(self) -> "ConfigManager":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def __repr__(self) -> str:
        return (
            f"ConfigManager(provider_count={len(self._providers)}, cache_enabled={self._cache_enabled}, "
            f"cache_size={self.cache_size}, closed={self._closed})"
        )


def create_default_config_manager(
    properties_file: Optional[Union[str, Path]] = None,
    yaml_file: Optional[Union[str, Path]] = None,
    env_prefix: Optional[str] = None,
    dotenv_path: Optional[Union[str, Path]] = None,
    cache_enabled: Optional[bool] = None,
    watch: bool = True,
) -> ConfigManager:
    """Create a manager with the process-properties and environment providers
    registered explicitly, plus the optional file providers.

    Arguments left as None fall back to the CONFIG_MANAGER_* settings.
    """
    manager = ConfigManager(cache_enabled=cache_enabled)
    manager.register_provider(
        SystemPropertiesConfigProvider(priority=settings.SYSTEM_PROPERTIES_PRIORITY)
    )
    manager.register_provider(
        EnvironmentConfigProvider(
            priority=settings.ENVIRONMENT_PRIORITY,
            prefix=env_prefix or settings.ENV_PREFIX,
            dotenv_path=dotenv_path,
        )
    )

    properties_file = properties_file or settings.PROPERTIES_FILE
    if properties_file:
        manager.register_provider(
            PropertiesConfigProvider(
                "properties", properties_file, priority=settings.PROPERTIES_PRIORITY, watch=watch
            )
        )

    yaml_file = yaml_file or settings.YAML_FILE
    if yaml_file:
        manager.register_provider(YamlConfigProvider("yaml", yaml_file, priority=settings.YAML_PRIORITY))

    return manager

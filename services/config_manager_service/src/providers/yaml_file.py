import copy
import json
from pathlib import Path
from typing import Any, Dict, List, Optional, Type, TypeVar, Union

import yaml

from shared.common_utils import logger, ReadWriteLock
from .base import ConfigProvider
from ..converters import convert_value
from ..exceptions import ConfigError, ConfigSourceError, ProviderUnavailableError
from ..schemas import ConfigSourceType

T = TypeVar("T")

_MISSING = object()


def _normalize(node: Any) -> Any:
    if isinstance(node, dict):
        return {str(key): _normalize(value) for key, value in node.items()}
    if isinstance(node, list):
        return [_normalize(item) for item in node]
    return node


def render_value(value: Any) -> Optional[str]:
    """String form of a document node as exposed through the flat-key view."""
    if value is None:
        return None
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (dict, list)):
        return json.dumps(value, default=str)
    return str(value)


def flatten(tree: Dict[str, Any], prefix: str = "") -> Dict[str, str]:
    """Flatten nested mappings into dot-joined keys; ``None`` leaves are dropped
    and empty sections are kept as ``{}``."""
    result: Dict[str, str] = {}
    for key, value in tree.items():
        full_key = f"{prefix}.{key}" if prefix else key
        if isinstance(value, dict) and value:
            result.update(flatten(value, full_key))
        elif value is not None:
            result[full_key] = render_value(value)
    return result


def _walk(node: Any, parts: List[str]) -> Any:
    """Resolve ``parts`` below ``node``. Keys that contain dots are matched
    literally, longest segment first."""
    if not parts:
        return node
    if not isinstance(node, dict):
        return _MISSING
    for end in range(len(parts), 0, -1):
        segment = ".".join(parts[:end])
        if segment in node:
            found = _walk(node[segment], parts[end:])
            if found is not _MISSING:
                return found
    return _MISSING


class YamlConfigProvider(ConfigProvider):
    """Hierarchical document provider (YAML, or JSON by file suffix).

    The document is kept as a tree; point lookups walk the dotted path and
    enumeration flattens it to dotted keys. Keys that themselves contain dots
    are found by lookups too, and an empty section is listed as ``{}``, so
    every enumerated key resolves to the value it was listed with. Looking up
    a section returns the section as JSON text.

    There is no file watcher. ``refresh()`` reloads only when the file's
    modification time changed and replaces the tree outright. Unlike
    PropertiesConfigProvider this provider never emits change events:
    listeners can be registered but are not notified of reloads.
    """

    def __init__(self, name: str, file_path: Union[str, Path], priority: int = 150):
        super().__init__(name, priority)
        self._path = Path(file_path)
        self._lock = ReadWriteLock()
        self._tree: Dict[str, Any] = {}
        self._last_modified: Optional[int] = None

        try:
            self._load()
        except ConfigError as e:
            logger.warning(f"Provider {name} starts empty: {str(e)}")

    @property
    def source_type(self) -> ConfigSourceType:
        if self._path.suffix.lower() == ".json":
            return ConfigSourceType.JSON
        return ConfigSourceType.YAML

    @property
    def file_path(self) -> Path:
        return self._path

    def _load(self) -> bool:
        if not self._path.exists():
            raise ProviderUnavailableError(f"Configuration file not found: {self._path}")

        modified = self._path.stat().st_mtime_ns
        if modified == self._last_modified:
            return False

        try:
            with open(self._path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigSourceError(f"Could not parse configuration file {self._path}: {e}") from e
        except (OSError, UnicodeDecodeError) as e:
            raise ConfigSourceError(f"Could not read configuration file {self._path}: {e}") from e

        if data is not None and not isinstance(data, dict):
            logger.warning(f"Configuration file {self._path} is not a mapping. Using empty config.")
        tree = _normalize(data) if isinstance(data, dict) else {}

        with self._lock.write_locked():
            self._tree = tree
            self._last_modified = modified
        logger.info(f"Configuration loaded from {self._path}")
        return True

    def refresh(self) -> None:
        """Reload the document if its modification time changed."""
        self._load()

    def _node(self, key: str) -> Any:
        return _walk(self._tree, key.strip().split("."))

    def _get(self, key: str) -> Optional[str]:
        with self._lock.read_locked():
            node = self._node(key)
        if node is _MISSING:
            return None
        return render_value(node)

    def _entries(self) -> Dict[str, str]:
        with self._lock.read_locked():
            # A literal "a.b" key and a nested a -> b flatten to the same key;
            # report whichever one a lookup resolves.
            entries = flatten(self._tree)
            for key in entries:
                node = self._node(key)
                if node is not _MISSING and node is not None:
                    entries[key] = render_value(node)
            return entries

    def get_object(self, key: str, type_: Type[T], default: Optional[T] = None) -> Optional[T]:
        if key is None or not key.strip():
            return default
        with self._lock.read_locked():
            node = self._node(key)
            if node is _MISSING or node is None:
                return default
            node = copy.deepcopy(node)
        if type_ is str:
            return render_value(node)
        return convert_value(key, node, type_)

    def is_available(self) -> bool:
        return self._path.exists()

    def __repr__(self) -> str:
        return (
            f"YamlConfigProvider(name={self.name!r}, file_path='{self._path}', "
            f"priority={self.priority}, available={self.is_available()})"
        )

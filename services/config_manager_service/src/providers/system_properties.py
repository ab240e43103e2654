from typing import Dict, Mapping, Optional

from .base import ReadOnlyConfigProvider
from .. import system_properties
from ..schemas import ConfigSourceType


class SystemPropertiesConfigProvider(ReadOnlyConfigProvider):
    """Exposes the process property store (or an injected mapping).

    With a ``prefix``, lookups of ``key`` try ``prefix.key`` and ``prefix_key``
    before ``key`` itself, and enumeration only lists prefixed properties
    with the prefix stripped.
    """

    def __init__(
        self,
        name: str = "system-properties",
        priority: int = 200,
        prefix: Optional[str] = None,
        properties: Optional[Mapping[str, str]] = None,
    ):
        super().__init__(name, priority)
        self._prefix = prefix or None
        self._properties = properties if properties is not None else system_properties.store

    @property
    def source_type(self) -> ConfigSourceType:
        return ConfigSourceType.SYSTEM_PROPERTIES

    @property
    def prefix(self) -> Optional[str]:
        return self._prefix

    def _candidates(self, key: str):
        if self._prefix:
            yield f"{self._prefix}.{key}"
            yield f"{self._prefix}_{key}"
        yield key

    def _get(self, key: str) -> Optional[str]:
        for candidate in self._candidates(key):
            value = self._properties.get(candidate)
            if value is not None:
                return str(value)
        return None

    def _entries(self) -> Dict[str, str]:
        snapshot = {str(k): str(v) for k, v in list(self._properties.items())}
        if not self._prefix:
            return snapshot

        result: Dict[str, str] = {}
        dotted = f"{self._prefix}."
        underscored = f"{self._prefix}_"
        for key, value in snapshot.items():
            if key.startswith(dotted):
                result[key[len(dotted):]] = value
            elif key.startswith(underscored):
                result[key[len(underscored):].replace("_", ".")] = value
        return result

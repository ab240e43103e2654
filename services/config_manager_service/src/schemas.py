from datetime import datetime, UTC
from enum import Enum
from typing import Dict, List, Mapping, Optional, Set

from pydantic import BaseModel, ConfigDict, Field, model_validator


class ConfigSourceType(str, Enum):
    PROPERTIES = ("properties", "Properties file")
    YAML = ("yaml", "YAML file")
    JSON = ("json", "JSON file")
    SYSTEM_PROPERTIES = ("system-properties", "Process properties")
    ENVIRONMENT = ("environment", "Environment variables")
    NACOS = ("nacos", "Nacos config center")
    CONSUL = ("consul", "Consul config center")
    APOLLO = ("apollo", "Apollo config center")
    DATABASE = ("database", "Database")
    MEMORY = ("memory", "In-memory map")
    CUSTOM = ("custom", "Custom source")

    def __new__(cls, code: str, description: str):
        obj = str.__new__(cls, code)
        obj._value_ = code
        obj.description = description
        return obj

    @classmethod
    def from_code(cls, code: Optional[str]) -> Optional["ConfigSourceType"]:
        if code is None or not code.strip():
            return None
        normalized = code.strip().lower()
        for source_type in cls:
            if source_type.value == normalized:
                return source_type
        return None

    @property
    def is_file_type(self) -> bool:
        return self in (ConfigSourceType.PROPERTIES, ConfigSourceType.YAML, ConfigSourceType.JSON)

    @property
    def is_remote_type(self) -> bool:
        return self in (
            ConfigSourceType.NACOS,
            ConfigSourceType.CONSUL,
            ConfigSourceType.APOLLO,
            ConfigSourceType.DATABASE,
        )

    @property
    def is_system_type(self) -> bool:
        return self in (ConfigSourceType.SYSTEM_PROPERTIES, ConfigSourceType.ENVIRONMENT)


class ChangeType(str, Enum):
    ADDED = ("added", "Key added")
    MODIFIED = ("modified", "Value modified")
    DELETED = ("deleted", "Key deleted")

    def __new__(cls, code: str, description: str):
        obj = str.__new__(cls, code)
        obj._value_ = code
        obj.description = description
        return obj


class ConfigChangeEvent(BaseModel):
    """A single Added/Modified/Deleted transition of one key in one provider.

    Events are immutable. The change type must agree with which of the old
    and new values are present, and two events are equal when everything
    but the timestamp matches.
    """

    model_config = ConfigDict(frozen=True)

    key: str = Field(..., description="Configuration key")
    old_value: Optional[str] = Field(None, description="Value before the change")
    new_value: Optional[str] = Field(None, description="Value after the change")
    change_type: ChangeType = Field(..., description="Kind of transition")
    source: str = Field(..., description="Name of the provider that changed")
    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))

    @model_validator(mode="after")
    def _check_transition(self) -> "ConfigChangeEvent":
        if self.change_type is ChangeType.ADDED:
            if self.old_value is not None or self.new_value is None:
                raise ValueError("an added event needs a new value and no old value")
        elif self.change_type is ChangeType.DELETED:
            if self.new_value is not None or self.old_value is None:
                raise ValueError("a deleted event needs an old value and no new value")
        elif self.old_value is None or self.new_value is None or self.old_value == self.new_value:
            raise ValueError("a modified event needs two different values")
        return self

    @classmethod
    def added(cls, key: str, new_value: str, source: str) -> "ConfigChangeEvent":
        return cls(key=key, new_value=new_value, change_type=ChangeType.ADDED, source=source)

    @classmethod
    def modified(cls, key: str, old_value: str, new_value: str, source: str) -> "ConfigChangeEvent":
        return cls(
            key=key,
            old_value=old_value,
            new_value=new_value,
            change_type=ChangeType.MODIFIED,
            source=source,
        )

    @classmethod
    def deleted(cls, key: str, old_value: str, source: str) -> "ConfigChangeEvent":
        return cls(key=key, old_value=old_value, change_type=ChangeType.DELETED, source=source)

    @property
    def is_added(self) -> bool:
        return self.change_type is ChangeType.ADDED

    @property
    def is_modified(self) -> bool:
        return self.change_type is ChangeType.MODIFIED

    @property
    def is_deleted(self) -> bool:
        return self.change_type is ChangeType.DELETED

    @property
    def current_value(self) -> Optional[str]:
        """The new value, or the last known value for a deletion."""
        return self.old_value if self.is_deleted else self.new_value

    def has_value_changed(self) -> bool:
        return self.old_value != self.new_value

    def _identity(self):
        return (self.key, self.old_value, self.new_value, self.change_type, self.source)

    def __eq__(self, other):
        if not isinstance(other, ConfigChangeEvent):
            return NotImplemented
        return self._identity() == other._identity()

    def __hash__(self):
        return hash(self._identity())

    def __str__(self) -> str:
        return (
            f"ConfigChangeEvent{{key='{self.key}', changeType={self.change_type.description}, "
            f"oldValue='{self.old_value}', newValue='{self.new_value}', source='{self.source}', "
            f"timestamp={self.timestamp.isoformat()}}}"
        )


def diff_properties(
    old: Mapping[str, str], new: Mapping[str, str], source: str
) -> List[ConfigChangeEvent]:
    """
    Classifies every key of the union of two snapshots into change events.
    Keys whose value did not change produce no event. Events are ordered by key.
    """
    events: List[ConfigChangeEvent] = []
    for key in sorted(set(old) | set(new)):
        old_value = old.get(key)
        new_value = new.get(key)
        if old_value is None and new_value is not None:
            events.append(ConfigChangeEvent.added(key, new_value, source))
        elif old_value is not None and new_value is None:
            events.append(ConfigChangeEvent.deleted(key, old_value, source))
        elif old_value is not None and old_value != new_value:
            events.append(ConfigChangeEvent.modified(key, old_value, new_value, source))
    return events


class ConfigManagerStats(BaseModel):
    """Point-in-time snapshot of a manager, built by ``ConfigManager.get_stats``."""

    model_config = ConfigDict(frozen=True)

    provider_count: int = Field(0, description="Number of registered providers")
    total_config_count: int = Field(0, description="Sum of the providers' key counts")
    provider_config_counts: Dict[str, int] = Field(default_factory=dict)
    provider_statuses: Dict[str, bool] = Field(default_factory=dict)
    statistics_time: datetime = Field(default_factory=lambda: datetime.now(UTC))
    total_query_count: int = Field(0, description="Lookups served by the manager")
    hit_count: int = Field(0, description="Lookups that resolved a value")
    cache_hit_count: int = Field(0, description="Lookups answered from the cache")

    @property
    def hit_rate(self) -> float:
        if self.total_query_count == 0:
            return 0.0
        return self.hit_count / self.total_query_count

    @property
    def available_provider_count(self) -> int:
        return sum(1 for available in self.provider_statuses.values() if available)

    def __str__(self) -> str:
        return (
            f"ConfigManagerStats{{providerCount={self.provider_count}, "
            f"availableProviders={self.available_provider_count}, "
            f"totalConfigCount={self.total_config_count}, totalQueryCount={self.total_query_count}, "
            f"hitRate={self.hit_rate * 100:.2f}%, statisticsTime={self.statistics_time.isoformat()}}}"
        )


class ConfigValueResponse(BaseModel):
    key: str = Field(..., description="Configuration key")
    value: str = Field(..., description="Resolved value")
    source: Optional[str] = Field(None, description="Provider that supplied the value")


class ConfigPropertiesResponse(BaseModel):
    prefix: str = Field("", description="Key prefix the properties were filtered by")
    properties: Dict[str, str] = Field(default_factory=dict, description="Merged properties")


class ConfigKeysResponse(BaseModel):
    prefix: Optional[str] = Field(None, description="Key prefix the keys were filtered by")
    keys: Set[str] = Field(default_factory=set, description="Known configuration keys")


class RefreshResponse(BaseModel):
    success: bool = Field(..., description="Whether the refresh was successful")
    message: str = Field(..., description="Response message")

"""
Configuration Manager Service
Aggregates prioritized configuration providers into one cached view with
live change notifications.
"""

from .src import (
    ConfigManager,
    create_default_config_manager,
    ChangeType,
    ConfigChangeEvent,
    ConfigManagerStats,
    ConfigSourceType,
    ConfigError,
    ConfigFormatError,
    ClosedManagerError,
    DuplicateProviderError,
    ProviderUnavailableError,
    ConfigChangeListener,
    ConfigProvider,
    EnvironmentConfigProvider,
    MemoryConfigProvider,
    PropertiesConfigProvider,
    SystemPropertiesConfigProvider,
    YamlConfigProvider,
)

__version__ = "0.1.0"
__all__ = [
    "ConfigManager",
    "create_default_config_manager",
    "ChangeType",
    "ConfigChangeEvent",
    "ConfigManagerStats",
    "ConfigSourceType",
    "ConfigError",
    "ConfigFormatError",
    "ClosedManagerError",
    "DuplicateProviderError",
    "ProviderUnavailableError",
    "ConfigChangeListener",
    "ConfigProvider",
    "EnvironmentConfigProvider",
    "MemoryConfigProvider",
    "PropertiesConfigProvider",
    "SystemPropertiesConfigProvider",
    "YamlConfigProvider",
]

"""
Configuration Manager Service Source Package
Contains the core implementation of the multi-source configuration manager.
"""

from .config_manager import ConfigManager, create_default_config_manager
from .schemas import (
    ChangeType,
    ConfigChangeEvent,
    ConfigManagerStats,
    ConfigSourceType,
    diff_properties,
)
from .exceptions import (
    ClosedManagerError,
    ConfigError,
    ConfigFormatError,
    ConfigSourceError,
    DuplicateProviderError,
    ProviderUnavailableError,
)
from .listeners import CallbackListener, ConfigChangeListener
from .providers import (
    ConfigProvider,
    EnvironmentConfigProvider,
    MemoryConfigProvider,
    PropertiesConfigProvider,
    SystemPropertiesConfigProvider,
    YamlConfigProvider,
)
from .config_loader import (
    get_config,
    get_config_manager,
    initialize_config,
    shutdown_config,
)

__all__ = [
    # Main components
    "ConfigManager",
    "create_default_config_manager",

    # Schemas
    "ChangeType",
    "ConfigChangeEvent",
    "ConfigManagerStats",
    "ConfigSourceType",
    "diff_properties",

    # Errors
    "ClosedManagerError",
    "ConfigError",
    "ConfigFormatError",
    "ConfigSourceError",
    "DuplicateProviderError",
    "ProviderUnavailableError",

    # Listeners
    "CallbackListener",
    "ConfigChangeListener",

    # Providers
    "ConfigProvider",
    "EnvironmentConfigProvider",
    "MemoryConfigProvider",
    "PropertiesConfigProvider",
    "SystemPropertiesConfigProvider",
    "YamlConfigProvider",

    # Config Loader
    "get_config",
    "get_config_manager",
    "initialize_config",
    "shutdown_config",
]

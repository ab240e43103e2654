from .base import ConfigProvider, ReadOnlyConfigProvider, DEFAULT_PRIORITY
from .system_properties import SystemPropertiesConfigProvider
from .environment import EnvironmentConfigProvider
from .properties_file import PropertiesConfigProvider
from .yaml_file import YamlConfigProvider, flatten
from .memory import MemoryConfigProvider

__all__ = [
    "ConfigProvider",
    "ReadOnlyConfigProvider",
    "DEFAULT_PRIORITY",
    "SystemPropertiesConfigProvider",
    "EnvironmentConfigProvider",
    "PropertiesConfigProvider",
    "YamlConfigProvider",
    "MemoryConfigProvider",
    "flatten",
]

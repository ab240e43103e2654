class ConfigError(Exception):
    """Base class for every error raised by the configuration subsystem."""
    pass


class ConfigFormatError(ConfigError):
    """A configuration value could not be converted to the requested type."""

    def __init__(self, key: str, value, target: str, cause: Exception = None):
        self.key = key
        self.value = value
        self.target = target
        message = f"Invalid {target} value for key '{key}': {value!r}"
        if cause is not None:
            message = f"{message} ({cause})"
        super().__init__(message)


class ConfigSourceError(ConfigError):
    """A provider's backing source could not be read or parsed."""
    pass


class ProviderUnavailableError(ConfigError):
    """A provider's backing source is missing."""
    pass


class DuplicateProviderError(ConfigError):
    """A provider with the same name is already registered."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Provider with name '{name}' already exists")


class ClosedManagerError(ConfigError):
    """The manager has been closed and can no longer be used."""

    def __init__(self, message: str = "ConfigManager has been closed"):
        super().__init__(message)

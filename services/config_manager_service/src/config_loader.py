import threading
from pathlib import Path
from typing import Optional, Union

from shared.common_utils import logger
from .config_manager import ConfigManager, create_default_config_manager

# Global instance
_config_manager: Optional[ConfigManager] = None
_lock = threading.Lock()


def initialize_config(
    properties_file: Optional[Union[str, Path]] = None,
    yaml_file: Optional[Union[str, Path]] = None,
    env_prefix: Optional[str] = None,
    dotenv_path: Optional[Union[str, Path]] = None,
) -> ConfigManager:
    """Create the process-wide manager, closing any previous one."""
    global _config_manager

    with _lock:
        if _config_manager is not None:
            logger.info("Replacing the process-wide ConfigManager")
            _config_manager.close()
        _config_manager = create_default_config_manager(
            properties_file=properties_file,
            yaml_file=yaml_file,
            env_prefix=env_prefix,
            dotenv_path=dotenv_path,
        )
        return _config_manager


def get_config_manager() -> ConfigManager:
    """Get the process-wide manager, creating a default one on first use."""
    global _config_manager

    with _lock:
        if _config_manager is None or _config_manager.is_closed():
            _config_manager = create_default_config_manager()
        return _config_manager


def get_config(key: str, default: Optional[str] = None) -> Optional[str]:
    return get_config_manager().get_string(key, default)


def shutdown_config() -> None:
    """Close the process-wide manager."""
    global _config_manager

    with _lock:
        if _config_manager is not None:
            _config_manager.close()
            _config_manager = None

import os
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Union

from dotenv import dotenv_values

from shared.common_utils import logger
from .base import ReadOnlyConfigProvider
from ..schemas import ConfigSourceType


class EnvironmentConfigProvider(ReadOnlyConfigProvider):
    """Exposes environment variables under dotted configuration keys.

    A lookup of ``app.timeout`` with prefix ``myapp`` probes, in order:
    ``MYAPP_APP_TIMEOUT``, ``MYAPP_app_timeout``, ``myapp_app.timeout``,
    ``myapp.app.timeout``, ``APP_TIMEOUT``, ``app_timeout``, ``app.timeout``.
    Without a prefix only the last three are tried.

    ``environ`` defaults to ``os.environ``. Values from ``dotenv_path`` are
    used only for variables the environment does not define.
    """

    def __init__(
        self,
        name: str = "environment",
        priority: int = 300,
        prefix: Optional[str] = None,
        environ: Optional[Mapping[str, str]] = None,
        dotenv_path: Optional[Union[str, Path]] = None,
    ):
        super().__init__(name, priority)
        self._prefix = prefix or None
        self._environ = environ if environ is not None else os.environ
        self._dotenv: Dict[str, str] = {}
        if dotenv_path is not None:
            self._dotenv = self._read_dotenv(dotenv_path)

    @staticmethod
    def _read_dotenv(dotenv_path: Union[str, Path]) -> Dict[str, str]:
        if not Path(dotenv_path).exists():
            logger.warning(f"Dotenv file not found at {dotenv_path}. Using the environment only.")
            return {}
        values = dotenv_values(dotenv_path)
        return {key: value for key, value in values.items() if value is not None}

    @property
    def source_type(self) -> ConfigSourceType:
        return ConfigSourceType.ENVIRONMENT

    @property
    def prefix(self) -> Optional[str]:
        return self._prefix

    def env_keys(self, key: str) -> List[str]:
        """Environment variable names probed for a configuration key, in order."""
        upper_key = key.upper().replace(".", "_").replace("-", "_")
        lower_key = key.lower().replace(".", "_").replace("-", "_")
        candidates = [upper_key, lower_key, key]
        if self._prefix:
            prefix_upper = self._prefix.upper()
            if not prefix_upper.endswith("_"):
                prefix_upper += "_"
            candidates = [
                prefix_upper + upper_key,
                prefix_upper + lower_key,
                f"{self._prefix}_{key}",
                f"{self._prefix}.{key}",
            ] + candidates
        return candidates

    def _lookup(self, name: str) -> Optional[str]:
        value = self._environ.get(name)
        if value is None:
            value = self._dotenv.get(name)
        return value

    def _get(self, key: str) -> Optional[str]:
        for name in self.env_keys(key):
            value = self._lookup(name)
            if value is not None:
                return value
        return None

    @staticmethod
    def _to_config_key(env_key: str) -> str:
        return env_key.lower().replace("_", ".")

    def _entries(self) -> Dict[str, str]:
        variables = dict(self._dotenv)
        variables.update(dict(self._environ))

        result: Dict[str, str] = {}
        for env_key, value in variables.items():
            if self._prefix:
                if not env_key.upper().startswith(self._prefix.upper()):
                    continue
                stripped = env_key[len(self._prefix):]
                if stripped[:1] in ("_", "."):
                    stripped = stripped[1:]
                if stripped:
                    result[self._to_config_key(stripped)] = value
            else:
                result[self._to_config_key(env_key)] = value
        return result

from functools import lru_cache
from typing import Any, Type, TypeVar

from pydantic import TypeAdapter, ValidationError

from .exceptions import ConfigFormatError

T = TypeVar("T")

INT32_MIN, INT32_MAX = -(2 ** 31), 2 ** 31 - 1
INT64_MIN, INT64_MAX = -(2 ** 63), 2 ** 63 - 1

TRUE_VALUES = ("true", "yes", "1")
FALSE_VALUES = ("false", "no", "0")


def _parse_int(key: str, value: str, target: str, low: int, high: int) -> int:
    try:
        number = int(value.strip())
    except ValueError as e:
        raise ConfigFormatError(key, value, target, e) from e
    if number < low or number > high:
        raise ConfigFormatError(key, value, target, ValueError(f"out of range [{low}, {high}]"))
    return number


def parse_integer(key: str, value: str) -> int:
    """
    Parses a 32-bit signed integer.
    """
    return _parse_int(key, value, "integer", INT32_MIN, INT32_MAX)


def parse_long(key: str, value: str) -> int:
    """
    Parses a 64-bit signed integer.
    """
    return _parse_int(key, value, "long", INT64_MIN, INT64_MAX)


def parse_double(key: str, value: str) -> float:
    try:
        return float(value.strip())
    except ValueError as e:
        raise ConfigFormatError(key, value, "double", e) from e


def parse_boolean(key: str, value: str) -> bool:
    """
    Accepts true/yes/1 and false/no/0, case-insensitively. Anything else is an error.
    """
    normalized = value.strip().lower()
    if normalized in TRUE_VALUES:
        return True
    if normalized in FALSE_VALUES:
        return False
    raise ConfigFormatError(key, value, "boolean")


@lru_cache(maxsize=256)
def _adapter(type_: Any) -> TypeAdapter:
    return TypeAdapter(type_)


def _type_name(type_: Any) -> str:
    return getattr(type_, "__name__", None) or str(type_)


def looks_like_json(value: str) -> bool:
    stripped = value.strip()
    return stripped.startswith("{") or stripped.startswith("[")


def convert_string(key: str, value: str, type_: Type[T]) -> T:
    """
    Converts a string configuration value into ``type_``.
    JSON-looking values are decoded as JSON; other values are coerced.
    """
    if type_ is str:
        return value
    try:
        adapter = _adapter(type_)
        if looks_like_json(value):
            return adapter.validate_json(value)
        return adapter.validate_python(value.strip())
    except (ValidationError, TypeError) as e:
        raise ConfigFormatError(key, value, _type_name(type_), e) from e


def convert_value(key: str, value: Any, type_: Type[T]) -> T:
    """
    Converts an already structured value (mapping, list, scalar) into ``type_``.
    """
    if isinstance(value, str):
        return convert_string(key, value, type_)
    try:
        return _adapter(type_).validate_python(value)
    except (ValidationError, TypeError) as e:
        raise ConfigFormatError(key, value, _type_name(type_), e) from e

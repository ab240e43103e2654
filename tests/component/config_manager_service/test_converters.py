from typing import Dict, List

import pytest
from pydantic import BaseModel

from services.config_manager_service import ConfigFormatError
from services.config_manager_service.src.converters import (
    convert_string,
    convert_value,
    parse_boolean,
    parse_double,
    parse_integer,
    parse_long,
)


class PoolSettings(BaseModel):
    size: int
    name: str = "default"


def test_parse_integer():
    """Test 32-bit integer parsing with surrounding whitespace."""
    assert parse_integer("k", " 42 ") == 42
    assert parse_integer("k", "-2147483648") == -2147483648


def test_parse_integer_out_of_range():
    """Test that values beyond 32 bits are rejected as integers but accepted as longs."""
    with pytest.raises(ConfigFormatError) as exc_info:
        parse_integer("big", "2147483648")
    assert exc_info.value.key == "big"
    assert exc_info.value.target == "integer"
    assert parse_long("big", "2147483648") == 2147483648


def test_parse_long_out_of_range():
    """Test that values beyond 64 bits are rejected."""
    with pytest.raises(ConfigFormatError):
        parse_long("huge", str(2 ** 63))


def test_parse_integer_malformed():
    """Test that malformed numbers raise ConfigFormatError naming the key."""
    with pytest.raises(ConfigFormatError, match="app.timeout"):
        parse_integer("app.timeout", "thirty")


def test_parse_double():
    """Test floating point parsing."""
    assert parse_double("k", "0.75") == 0.75
    with pytest.raises(ConfigFormatError):
        parse_double("k", "three quarters")


@pytest.mark.parametrize("raw", ["true", "TRUE", "yes", "1", " Yes "])
def test_parse_boolean_true(raw):
    """Test the accepted spellings of true."""
    assert parse_boolean("k", raw) is True


@pytest.mark.parametrize("raw", ["false", "False", "no", "0"])
def test_parse_boolean_false(raw):
    """Test the accepted spellings of false."""
    assert parse_boolean("k", raw) is False


@pytest.mark.parametrize("raw", ["on", "off", "", "2", "truthy"])
def test_parse_boolean_rejects_other_values(raw):
    """Test that anything else is a format error rather than false."""
    with pytest.raises(ConfigFormatError):
        parse_boolean("k", raw)


def test_convert_string_scalars():
    """Test coercion of plain strings into scalar types."""
    assert convert_string("k", "12", int) == 12
    assert convert_string("k", " raw value ", str) == " raw value "


def test_convert_string_json_values():
    """Test that JSON-looking values are decoded."""
    assert convert_string("k", '["a", "b"]', List[str]) == ["a", "b"]
    assert convert_string("k", '{"x": 1}', Dict[str, int]) == {"x": 1}
    pool = convert_string("k", '{"size": 4}', PoolSettings)
    assert pool == PoolSettings(size=4)


def test_convert_string_invalid():
    """Test that conversion failures surface as ConfigFormatError."""
    with pytest.raises(ConfigFormatError):
        convert_string("k", "not-a-number", int)
    with pytest.raises(ConfigFormatError):
        convert_string("k", '{"size": "many"}', PoolSettings)


def test_convert_value_structured():
    """Test converting already structured document nodes."""
    assert convert_value("k", {"size": 2, "name": "p"}, PoolSettings) == PoolSettings(size=2, name="p")
    assert convert_value("k", [1, 2], List[int]) == [1, 2]
    with pytest.raises(ConfigFormatError):
        convert_value("k", {"name": "missing size"}, PoolSettings)

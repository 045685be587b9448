"""
Lenient type conversion used by the typed accessors and the binder.

Every ``to_<type>`` function raises ``TypeError`` or ``ValueError`` when the
value cannot be converted; callers decide whether to fall back to a zero
value or to report the failure.
"""

import re
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List

import pandas as pd

ZERO_TIME = datetime(1, 1, 1, tzinfo=timezone.utc)

_TRUE_STRINGS = {"1", "t", "true", "y", "yes", "on"}
_FALSE_STRINGS = {"0", "f", "false", "n", "no", "off"}
_TRAILING_ZERO_DECIMAL = re.compile(r"^([+-]?\d+)\.0*$")
_NUMBER = re.compile(r"^[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?$")

INT_RANGES = {
    "int32": (-2 ** 31, 2 ** 31 - 1),
    "int64": (-2 ** 63, 2 ** 63 - 1),
    "uint": (0, 2 ** 64 - 1),
    "uint8": (0, 2 ** 8 - 1),
    "uint16": (0, 2 ** 16 - 1),
    "uint32": (0, 2 ** 32 - 1),
    "uint64": (0, 2 ** 64 - 1),
}


def _type_error(value: Any, target: str) -> TypeError:
    return TypeError(f"unable to cast {value!r} of type {type(value).__name__} to {target}")


def to_string(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float, Decimal)):
        return str(value)
    if isinstance(value, (bytes, bytearray)):
        return bytes(value).decode("utf-8")
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, timedelta):
        return str(value)
    raise _type_error(value, "str")


def to_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if value is None:
        return False
    if isinstance(value, (int, float, Decimal)):
        return value != 0
    if isinstance(value, str):
        text = value.strip().lower()
        if text in _TRUE_STRINGS:
            return True
        if text in _FALSE_STRINGS:
            return False
        raise ValueError(f"unable to cast {value!r} to bool")
    raise _type_error(value, "bool")


def to_int(value: Any) -> int:
    """
    Convert to ``int``.

    Floats and decimals are truncated; strings accept decimal, ``0x``/``0o``/
    ``0b`` prefixed and ``"42.0"``-style forms. Strings are read as base 10
    first, so a leading zero does not mean octal: ``"010"`` is 10.
    """
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        return value
    if isinstance(value, (float, Decimal)):
        if value != value:
            raise ValueError("unable to cast NaN to int")
        return int(value)
    if value is None:
        return 0
    if isinstance(value, str):
        text = value.strip()
        match = _TRAILING_ZERO_DECIMAL.match(text)
        if match:
            text = match.group(1)
        try:
            return int(text, 10)
        except ValueError:
            pass
        try:
            return int(text, 0)
        except ValueError:
            raise ValueError(f"unable to cast {value!r} to int")
    raise _type_error(value, "int")


def to_ranged_int(value: Any, kind: str) -> int:
    """Convert to ``int`` and check it fits the named machine integer kind."""
    result = to_int(value)
    low, high = INT_RANGES[kind]
    if result < low or result > high:
        if result < 0 <= low:
            raise ValueError(f"unable to cast negative value {result} to {kind}")
        raise ValueError(f"value {result} out of range for {kind}")
    return result


def to_float(value: Any) -> float:
    if isinstance(value, bool):
        return float(value)
    if isinstance(value, (int, float, Decimal)):
        return float(value)
    if value is None:
        return 0.0
    if isinstance(value, str):
        try:
            return float(value.strip())
        except ValueError:
            raise ValueError(f"unable to cast {value!r} to float")
    raise _type_error(value, "float")


def to_decimal(value: Any) -> Decimal:
    if isinstance(value, Decimal):
        return value
    if isinstance(value, bool):
        return Decimal(int(value))
    if value is None:
        return Decimal(0)
    if isinstance(value, (int, float, str)):
        try:
            return Decimal(str(value).strip())
        except InvalidOperation:
            raise ValueError(f"unable to cast {value!r} to Decimal")
    raise _type_error(value, "Decimal")


def to_time(value: Any) -> datetime:
    """
    Convert to an aware ``datetime``.

    Numbers are Unix timestamps in seconds; strings go through
    ``pandas.to_datetime`` (ISO-8601 and the usual variants). Naive results
    are taken as UTC.
    """
    if isinstance(value, pd.Timestamp):
        result = value.to_pydatetime()
    elif isinstance(value, datetime):
        result = value
    elif isinstance(value, date):
        result = datetime(value.year, value.month, value.day)
    elif isinstance(value, bool):
        raise _type_error(value, "datetime")
    elif isinstance(value, (int, float)):
        return datetime.fromtimestamp(value, tz=timezone.utc)
    elif isinstance(value, str):
        try:
            stamp = pd.to_datetime(value.strip())
        except (ValueError, OverflowError) as e:
            raise ValueError(f"unable to cast {value!r} to datetime: {e}")
        if stamp is pd.NaT:
            raise ValueError(f"unable to cast {value!r} to datetime")
        result = stamp.to_pydatetime()
    else:
        raise _type_error(value, "datetime")

    if result.tzinfo is None:
        result = result.replace(tzinfo=timezone.utc)
    return result


def to_duration(value: Any) -> timedelta:
    """
    Convert to ``timedelta``.

    Numbers (and numeric strings) are seconds; other strings go through
    ``pandas.to_timedelta``, so ``"1h2m3s"``, ``"250ms"`` and
    ``"1 days 02:00:00"`` are all accepted.
    """
    if isinstance(value, pd.Timedelta):
        return value.to_pytimedelta()
    if isinstance(value, timedelta):
        return value
    if isinstance(value, bool):
        raise _type_error(value, "timedelta")
    if isinstance(value, (int, float, Decimal)):
        return timedelta(seconds=float(value))
    if isinstance(value, str):
        text = value.strip()
        if _NUMBER.match(text):
            return timedelta(seconds=float(text))
        try:
            delta = pd.to_timedelta(text)
        except (ValueError, OverflowError) as e:
            raise ValueError(f"unable to cast {value!r} to timedelta: {e}")
        if delta is pd.NaT:
            raise ValueError(f"unable to cast {value!r} to timedelta")
        return delta.to_pytimedelta()
    raise _type_error(value, "timedelta")


def to_int_list(value: Any) -> List[int]:
    """Convert a list or tuple to ``list[int]``; scalar strings are rejected."""
    if isinstance(value, (list, tuple)):
        return [to_int(item) for item in value]
    raise _type_error(value, "list[int]")


def to_string_list(value: Any) -> List[str]:
    """
    Convert to ``list[str]``.

    A scalar string is split on whitespace only: ``"a b"`` gives two items,
    ``"a,b"`` stays one.
    """
    if isinstance(value, (list, tuple)):
        return [to_string(item) for item in value]
    if isinstance(value, str):
        return value.split()
    raise _type_error(value, "list[str]")


def to_string_map(value: Any) -> Dict[str, Any]:
    if isinstance(value, dict):
        return {str(key): item for key, item in value.items()}
    raise _type_error(value, "dict[str, Any]")


def to_string_map_string(value: Any) -> Dict[str, str]:
    return {key: to_string(item) for key, item in to_string_map(value).items()}


def to_string_map_string_list(value: Any) -> Dict[str, List[str]]:
    result = {}
    for key, item in to_string_map(value).items():
        if isinstance(item, (list, tuple, str)):
            result[key] = to_string_list(item)
        else:
            result[key] = [to_string(item)]
    return result

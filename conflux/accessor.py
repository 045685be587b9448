"""
Path-addressable accessors over the committed aggregate.

Paths are dot separated (``"database.primary.host"``) and case-insensitive.
A path first matches a top-level key verbatim, which lets keys containing
dots be read, and otherwise walks the tree segment by segment.

Two families of typed getters wrap :meth:`AccessorMixin.get`:

- ``get_<type>`` never fails and returns the type's zero value when the path
  is absent or the value cannot be converted.
- ``require_<type>`` raises ``KeyNotFoundError`` when the path is absent and
  ``CastError`` when the value cannot be converted.
"""

import copy
from abc import ABC, abstractmethod
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Any, Callable, Dict, List, Mapping, TypeVar

from conflux import cast
from conflux.core.exceptions import CastError, KeyNotFoundError
from conflux.merge import normalize_key

T = TypeVar('T')


class _Missing:
    """Marker for an absent path."""

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


MISSING = _Missing()

_CAST_ERRORS = (TypeError, ValueError, ArithmeticError, OSError)


def resolve_path(values: Mapping[str, Any], path: str) -> Any:
    """
    Resolve ``path`` against ``values``.

    Returns:
        The stored value, or ``MISSING`` if any segment is absent or a
        non-final segment is not a mapping
    """
    key = normalize_key(path)
    if key in values:
        return values[key]

    current: Any = values
    for segment in key.split("."):
        if not isinstance(current, Mapping) or segment not in current:
            return MISSING
        current = current[segment]
    return current


class AccessorMixin(ABC):
    """
    Typed getters for classes exposing a committed aggregate.

    Subclasses implement :meth:`_snapshot`, returning the aggregate readers
    should see. The returned mapping must never be mutated afterwards.
    """

    @abstractmethod
    def _snapshot(self) -> Dict[str, Any]:
        pass

    def get(self, path: str, default: Any = None) -> Any:
        """
        Get the raw value stored at ``path``.

        Mappings and lists are returned as copies so callers cannot alter the
        committed aggregate.

        Args:
            path: Dot-separated, case-insensitive path
            default: Value returned when the path is absent

        Returns:
            The stored value, or ``default``
        """
        value = resolve_path(self._snapshot(), path)
        if value is MISSING:
            return default
        if isinstance(value, (dict, list)):
            return copy.deepcopy(value)
        return value

    def has(self, path: str) -> bool:
        """Tell whether ``path`` resolves to a value (``None`` included)."""
        return resolve_path(self._snapshot(), path) is not MISSING

    def _cast_or_zero(self, path: str, caster: Callable[[Any], T], zero: Callable[[], T]) -> T:
        value = resolve_path(self._snapshot(), path)
        if value is MISSING or value is None:
            return zero()
        try:
            return caster(copy.deepcopy(value))
        except _CAST_ERRORS:
            return zero()

    def _cast_or_raise(self, path: str, caster: Callable[[Any], T]) -> T:
        value = resolve_path(self._snapshot(), path)
        if value is MISSING or value is None:
            raise KeyNotFoundError(path)
        try:
            return caster(copy.deepcopy(value))
        except _CAST_ERRORS as e:
            raise CastError(path, e) from e

    # Strings and booleans

    def get_string(self, path: str) -> str:
        return self._cast_or_zero(path, cast.to_string, str)

    def require_string(self, path: str) -> str:
        return self._cast_or_raise(path, cast.to_string)

    def get_bool(self, path: str) -> bool:
        return self._cast_or_zero(path, cast.to_bool, bool)

    def require_bool(self, path: str) -> bool:
        return self._cast_or_raise(path, cast.to_bool)

    # Integers

    def get_int(self, path: str) -> int:
        return self._cast_or_zero(path, cast.to_int, int)

    def require_int(self, path: str) -> int:
        return self._cast_or_raise(path, cast.to_int)

    def get_int32(self, path: str) -> int:
        return self._cast_or_zero(path, lambda v: cast.to_ranged_int(v, "int32"), int)

    def require_int32(self, path: str) -> int:
        return self._cast_or_raise(path, lambda v: cast.to_ranged_int(v, "int32"))

    def get_int64(self, path: str) -> int:
        return self._cast_or_zero(path, lambda v: cast.to_ranged_int(v, "int64"), int)

    def require_int64(self, path: str) -> int:
        return self._cast_or_raise(path, lambda v: cast.to_ranged_int(v, "int64"))

    def get_uint(self, path: str) -> int:
        return self._cast_or_zero(path, lambda v: cast.to_ranged_int(v, "uint"), int)

    def require_uint(self, path: str) -> int:
        return self._cast_or_raise(path, lambda v: cast.to_ranged_int(v, "uint"))

    def get_uint8(self, path: str) -> int:
        return self._cast_or_zero(path, lambda v: cast.to_ranged_int(v, "uint8"), int)

    def require_uint8(self, path: str) -> int:
        return self._cast_or_raise(path, lambda v: cast.to_ranged_int(v, "uint8"))

    def get_uint16(self, path: str) -> int:
        return self._cast_or_zero(path, lambda v: cast.to_ranged_int(v, "uint16"), int)

    def require_uint16(self, path: str) -> int:
        return self._cast_or_raise(path, lambda v: cast.to_ranged_int(v, "uint16"))

    def get_uint32(self, path: str) -> int:
        return self._cast_or_zero(path, lambda v: cast.to_ranged_int(v, "uint32"), int)

    def require_uint32(self, path: str) -> int:
        return self._cast_or_raise(path, lambda v: cast.to_ranged_int(v, "uint32"))

    def get_uint64(self, path: str) -> int:
        return self._cast_or_zero(path, lambda v: cast.to_ranged_int(v, "uint64"), int)

    def require_uint64(self, path: str) -> int:
        return self._cast_or_raise(path, lambda v: cast.to_ranged_int(v, "uint64"))

    # Real numbers

    def get_float(self, path: str) -> float:
        return self._cast_or_zero(path, cast.to_float, float)

    def require_float(self, path: str) -> float:
        return self._cast_or_raise(path, cast.to_float)

    def get_decimal(self, path: str) -> Decimal:
        return self._cast_or_zero(path, cast.to_decimal, Decimal)

    def require_decimal(self, path: str) -> Decimal:
        return self._cast_or_raise(path, cast.to_decimal)

    # Time

    def get_time(self, path: str) -> datetime:
        """Get an aware datetime; ``ZERO_TIME`` when absent or unparseable."""
        return self._cast_or_zero(path, cast.to_time, lambda: cast.ZERO_TIME)

    def require_time(self, path: str) -> datetime:
        return self._cast_or_raise(path, cast.to_time)

    def get_duration(self, path: str) -> timedelta:
        """Get a duration such as ``"1h2m3s"``; ``timedelta(0)`` when absent or unparseable."""
        return self._cast_or_zero(path, cast.to_duration, timedelta)

    def require_duration(self, path: str) -> timedelta:
        return self._cast_or_raise(path, cast.to_duration)

    # Collections

    def get_int_list(self, path: str) -> List[int]:
        return self._cast_or_zero(path, cast.to_int_list, list)

    def require_int_list(self, path: str) -> List[int]:
        return self._cast_or_raise(path, cast.to_int_list)

    def get_string_list(self, path: str) -> List[str]:
        """Get a list of strings; a scalar string is split on whitespace."""
        return self._cast_or_zero(path, cast.to_string_list, list)

    def require_string_list(self, path: str) -> List[str]:
        return self._cast_or_raise(path, cast.to_string_list)

    def get_string_map(self, path: str) -> Dict[str, Any]:
        return self._cast_or_zero(path, cast.to_string_map, dict)

    def require_string_map(self, path: str) -> Dict[str, Any]:
        return self._cast_or_raise(path, cast.to_string_map)

    def get_string_map_string(self, path: str) -> Dict[str, str]:
        return self._cast_or_zero(path, cast.to_string_map_string, dict)

    def require_string_map_string(self, path: str) -> Dict[str, str]:
        return self._cast_or_raise(path, cast.to_string_map_string)

    def get_string_map_string_list(self, path: str) -> Dict[str, List[str]]:
        return self._cast_or_zero(path, cast.to_string_map_string_list, dict)

    def require_string_map_string_list(self, path: str) -> Dict[str, List[str]]:
        return self._cast_or_raise(path, cast.to_string_map_string_list)

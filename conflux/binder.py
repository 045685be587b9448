"""
Projection of the aggregate onto a caller-owned dataclass.

Each dataclass field is looked up in the mapping of its own nesting level,
under the key given by its ``conflux`` tag or, without a tag, under its
name. Nesting is expressed by nesting dataclasses; inherited fields and
fields declared with ``setting(squash=True)`` share the parent's namespace.

Binding is additive: fields without a matching key keep their value. Fields
whose name starts with an underscore are never written.

The target is never left half-updated. Values are decoded into a working
copy, the copy's ``validate()`` hook runs, and only then are the decoded
fields written back onto the target.
"""

import copy
import dataclasses
import threading
import types
import typing
from datetime import datetime, timedelta
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, List, Mapping, NamedTuple, Optional, Tuple, Union

from conflux import cast
from conflux.core.exceptions import BindingError, ConfigError, ValidationError
from conflux.logger import get_conflux_logger
from conflux.merge import normalize_key

TAG = "conflux"
SQUASH = "conflux_squash"

_NONE_TYPE = type(None)
_UNION_ORIGINS = (Union, getattr(types, "UnionType", Union))


def setting(key: Optional[str] = None, *, squash: bool = False, **kwargs) -> Any:
    """
    Declare a dataclass field bound from the aggregate.

    Args:
        key: Key looked up at the enclosing level; defaults to the field name
        squash: Flatten a nested dataclass into the parent's namespace
        **kwargs: Forwarded to :func:`dataclasses.field` (``default``,
            ``default_factory``, ...)
    """
    metadata = dict(kwargs.pop("metadata", None) or {})
    metadata[TAG] = key
    metadata[SQUASH] = squash
    return dataclasses.field(metadata=metadata, **kwargs)


class FieldDescriptor(NamedTuple):
    name: str
    key: str
    hint: Any
    squash: bool


_descriptor_cache: Dict[type, Tuple[FieldDescriptor, ...]] = {}
_descriptor_lock = threading.Lock()


def describe(cls: type) -> Tuple[FieldDescriptor, ...]:
    """
    Return the binding descriptor of a dataclass type.

    Built once per type and cached.
    """
    with _descriptor_lock:
        cached = _descriptor_cache.get(cls)
    if cached is not None:
        return cached

    try:
        hints = typing.get_type_hints(cls)
    except (NameError, TypeError):
        hints = {}

    descriptors = []
    for f in dataclasses.fields(cls):
        if f.name.startswith("_"):
            continue
        hint = hints.get(f.name, f.type)
        if isinstance(hint, str):
            hint = Any
        key = f.metadata.get(TAG) or f.name
        squash = bool(f.metadata.get(SQUASH)) and isinstance(hint, type) and dataclasses.is_dataclass(hint)
        descriptors.append(FieldDescriptor(f.name, normalize_key(key), hint, squash))

    result = tuple(descriptors)
    with _descriptor_lock:
        _descriptor_cache.setdefault(cls, result)
    return result


def clear_descriptor_cache():
    with _descriptor_lock:
        _descriptor_cache.clear()


class _Keep:
    """Returned by a conversion that leaves the current value in place."""


_KEEP = _Keep()


def _join(parent: str, key: str) -> str:
    return f"{parent}.{key}" if parent else key


def _instantiate(cls: type, path: str) -> Any:
    try:
        return cls()
    except TypeError as e:
        raise BindingError("binding", "decode", e, field=path or None)


class Binder:
    """
    Decodes aggregates into dataclass instances.
    """

    def __init__(self):
        self.logger = get_conflux_logger(component="Binder")

    def bind(self, values: Mapping[str, Any], target: Any) -> None:
        """
        Decode ``values`` onto ``target`` and run its ``validate()`` hook.

        Raises:
            BindingError: If the target is not a dataclass instance or a value
                does not fit its field
            ValidationError: If the target's ``validate()`` hook fails
        """
        if not dataclasses.is_dataclass(target) or isinstance(target, type):
            raise BindingError(
                "binding", "bind",
                TypeError(f"binding target must be a dataclass instance, got {type(target).__name__}"))

        working = copy.copy(target)
        self._decode_into(values, working, "")
        self._self_validate(working)

        try:
            for descriptor in describe(type(target)):
                setattr(target, descriptor.name, getattr(working, descriptor.name))
        except AttributeError as e:
            raise BindingError("binding", "commit", e)

        self.logger.debug("Configuration bound", target=type(target).__name__)

    def _self_validate(self, working: Any):
        hook = getattr(working, "validate", None)
        if not callable(hook):
            return
        try:
            result = hook()
        except Exception as e:
            raise ValidationError("binding", "validate", e)
        if isinstance(result, BaseException):
            raise ValidationError("binding", "validate", result)
        if result is False:
            raise ValidationError(
                "binding", "validate",
                ValueError(f"{type(working).__name__}.validate() returned False"))

    def _decode_into(self, values: Mapping[str, Any], obj: Any, path: str):
        for descriptor in describe(type(obj)):
            if descriptor.squash:
                current = getattr(obj, descriptor.name, None)
                sub = copy.copy(current) if isinstance(current, descriptor.hint) else _instantiate(descriptor.hint, path)
                self._decode_into(values, sub, path)
                value = sub
            else:
                if descriptor.key not in values:
                    continue
                field_path = _join(path, descriptor.key)
                value = self._convert(values[descriptor.key], descriptor.hint,
                                      getattr(obj, descriptor.name, None), field_path)
                if value is _KEEP:
                    continue
            try:
                setattr(obj, descriptor.name, value)
            except AttributeError as e:
                raise BindingError("binding", "decode", e, field=_join(path, descriptor.key))

    def _convert(self, raw: Any, hint: Any, current: Any, path: str) -> Any:
        try:
            return self._convert_value(raw, hint, current, path)
        except ConfigError:
            raise
        except (TypeError, ValueError, ArithmeticError, OSError) as e:
            raise BindingError("binding", "decode", e, field=path)

    def _convert_value(self, raw: Any, hint: Any, current: Any, path: str) -> Any:
        if hint is Any or hint is object:
            return copy.deepcopy(raw)

        origin = typing.get_origin(hint)
        args = typing.get_args(hint)

        if origin in _UNION_ORIGINS:
            if raw is None:
                if _NONE_TYPE in args:
                    return None
                return _KEEP
            errors = []
            for arg in args:
                if arg is _NONE_TYPE:
                    continue
                try:
                    return self._convert_value(raw, arg, current, path)
                except (TypeError, ValueError, ArithmeticError, BindingError) as e:
                    errors.append(e)
            raise TypeError(f"{raw!r} does not match any of {hint}: {errors[-1] if errors else ''}")

        if raw is None:
            return _KEEP

        if origin in (list, List):
            item_hint = args[0] if args else Any
            items = raw if isinstance(raw, (list, tuple)) else cast.to_string_list(raw)
            return [self._convert(item, item_hint, None, f"{path}[{i}]") for i, item in enumerate(items)]

        if origin in (dict, Dict):
            value_hint = args[1] if len(args) > 1 else Any
            if not isinstance(raw, Mapping):
                raise TypeError(f"expected a mapping, got {type(raw).__name__}")
            return {str(k): self._convert(v, value_hint, None, _join(path, str(k))) for k, v in raw.items()}

        if origin is not None:
            raise TypeError(f"unsupported field type {hint}")

        if not isinstance(hint, type):
            raise TypeError(f"unsupported field type {hint!r}")

        if dataclasses.is_dataclass(hint):
            if not isinstance(raw, Mapping):
                raise TypeError(f"expected a mapping for {hint.__name__}, got {type(raw).__name__}")
            sub = copy.copy(current) if isinstance(current, hint) else _instantiate(hint, path)
            self._decode_into(raw, sub, path)
            return sub

        if issubclass(hint, Enum):
            return self._convert_enum(raw, hint)
        if hint is bool:
            return cast.to_bool(raw)
        if hint is int:
            if isinstance(raw, float) and not raw.is_integer():
                raise ValueError(f"{raw!r} is not an integral number")
            return cast.to_int(raw)
        if hint is float:
            return cast.to_float(raw)
        if hint is Decimal:
            return cast.to_decimal(raw)
        if hint is str:
            if isinstance(raw, (bool, dict, list, tuple)):
                raise TypeError(f"expected a string, got {type(raw).__name__}")
            return cast.to_string(raw)
        if hint is datetime:
            return cast.to_time(raw)
        if hint is timedelta:
            return cast.to_duration(raw)
        if hint in (dict, list):
            if not isinstance(raw, hint):
                raise TypeError(f"expected {hint.__name__}, got {type(raw).__name__}")
            return copy.deepcopy(raw)
        if isinstance(raw, hint):
            return copy.deepcopy(raw)
        raise TypeError(f"unsupported field type {hint.__name__}")

    @staticmethod
    def _convert_enum(raw: Any, hint: type) -> Enum:
        if isinstance(raw, hint):
            return raw
        try:
            return hint(raw)
        except ValueError:
            pass
        if isinstance(raw, str):
            for member in hint:
                if member.name.lower() == raw.strip().lower() or str(member.value).lower() == raw.strip().lower():
                    return member
        raise ValueError(f"{raw!r} is not a valid {hint.__name__}")

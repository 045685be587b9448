"""
Base exception classes for the conflux configuration system.
"""

from typing import Any, Iterator, Optional, Type, TypeVar

E = TypeVar("E", bound=BaseException)


class ConfigError(Exception):
    """
    Structured configuration error.

    Carries the label of the source that failed, an optional field label,
    the operation being performed and the wrapped cause. The cause may itself
    be a ``ConfigError``, producing a chain that :func:`has_cause` and
    :func:`find_cause` walk.
    """

    def __init__(self, source: str, operation: str, err: Optional[BaseException] = None,
                 field: Optional[str] = None):
        self.source = source
        self.field = field
        self.operation = operation
        self.err = err
        super().__init__(self._format())
        if err is not None:
            self.__cause__ = err

    def _format(self) -> str:
        location = self.source
        if self.field:
            location += f".{self.field}"
        message = f"config error in {location} during {self.operation}"
        if self.err is not None:
            message += f": {self.err}"
        return message

    def unwrap(self) -> Optional[BaseException]:
        """Return the wrapped cause."""
        return self.err


class SourceError(ConfigError):
    """A source failed to produce its fragment (I/O, decode, remote store)."""


class MergeError(ConfigError):
    """A source fragment could not be merged structurally."""


class SchemaValidationError(ConfigError):
    """The merged aggregate did not satisfy the configured schema."""


class ValidationError(ConfigError):
    """A custom validator rejected the merged aggregate, or raised."""


class BindingError(ConfigError):
    """The aggregate could not be projected onto the binding target."""


class DumpError(ConfigError):
    """A dumper failed to persist the committed aggregate."""


class KeyNotFoundError(ConfigError):
    """Raised by the ``require_*`` accessors when a path is absent."""

    def __init__(self, path: str):
        super().__init__("aggregate", "get", KeyError(f"key {path!r} not found"), field=path)
        self.path = path


class CastError(ConfigError):
    """Raised by the ``require_*`` accessors when a value cannot be converted."""

    def __init__(self, path: str, err: BaseException):
        super().__init__("aggregate", "cast", err, field=path)
        self.path = path


class CodecError(ConfigError):
    """An encoder or decoder failed."""


class UnregisteredCodecError(CodecError):
    """No codec is registered for the requested format."""

    def __init__(self, codec_type: Any, role: str):
        super().__init__(
            "codec_registry",
            f"get_{role}",
            LookupError(f"no {role} registered for format {str(codec_type)!r}"),
        )
        self.codec_type = codec_type
        self.role = role


class LoadCancelledError(ConfigError):
    """The context passed to ``load`` or ``dump`` was cancelled or timed out."""


def new_config_error(source: str, operation: str, err: BaseException) -> ConfigError:
    """Create a ``ConfigError`` without a field label."""
    return ConfigError(source, operation, err)


def new_config_field_error(source: str, field: str, operation: str, err: BaseException) -> ConfigError:
    """Create a ``ConfigError`` scoped to a field."""
    return ConfigError(source, operation, err, field=field)


def error_chain(err: Optional[BaseException]) -> Iterator[BaseException]:
    """
    Iterate over an error and its causes, outermost first.

    Follows ``ConfigError.err`` and, for other exceptions, ``__cause__``.
    """
    seen = set()
    while err is not None and id(err) not in seen:
        seen.add(id(err))
        yield err
        err = err.err if isinstance(err, ConfigError) else err.__cause__


def has_cause(err: BaseException, target: Any) -> bool:
    """
    Tell whether ``target`` appears in the chain of ``err``.

    ``target`` is either an exception instance (matched by identity) or an
    exception class (matched with ``isinstance``).
    """
    for current in error_chain(err):
        if isinstance(target, type):
            if isinstance(current, target):
                return True
        elif current is target:
            return True
    return False


def find_cause(err: BaseException, cls: Type[E]) -> Optional[E]:
    """Return the first error in the chain of ``err`` that is an instance of ``cls``."""
    for current in error_chain(err):
        if isinstance(current, cls):
            return current
    return None

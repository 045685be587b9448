"""
Core exceptions for the conflux configuration system.

Every failure surfaced by the library is a ``ConfigError`` carrying the
source label, an optional field label, the operation and the wrapped cause.
"""

from .base import (
    ConfigError,
    SourceError,
    MergeError,
    SchemaValidationError,
    ValidationError,
    BindingError,
    DumpError,
    KeyNotFoundError,
    CastError,
    CodecError,
    UnregisteredCodecError,
    LoadCancelledError,
    new_config_error,
    new_config_field_error,
    error_chain,
    has_cause,
    find_cause,
)

__all__ = [
    'ConfigError',
    'SourceError',
    'MergeError',
    'SchemaValidationError',
    'ValidationError',
    'BindingError',
    'DumpError',
    'KeyNotFoundError',
    'CastError',
    'CodecError',
    'UnregisteredCodecError',
    'LoadCancelledError',
    'new_config_error',
    'new_config_field_error',
    'error_chain',
    'has_cause',
    'find_cause',
]

"""
Codec registry and the built-in formats.

Concrete codecs convert between raw bytes and structured values:
- JSONCodec: JSON via the standard library
- YAMLCodec: YAML via PyYAML
- EnvVarCodec: ``KEY=VALUE`` lines folded into nested mappings
- ScalarCodec: a single typed scalar, for per-key remote values
"""

from .base import CodecType, Decoder, Encoder
from .env import EnvVarCodec
from .json_codec import JSONCodec
from .yaml_codec import ScalarCodec, YAMLCodec
from .registry import (
    CodecRegistry, get_codec_registry, register_encoder, register_decoder,
    get_encoder, get_decoder, register_default_codecs
)

__all__ = [
    'CodecType',
    'Decoder',
    'Encoder',
    'EnvVarCodec',
    'JSONCodec',
    'ScalarCodec',
    'YAMLCodec',
    'CodecRegistry',
    'get_codec_registry',
    'register_encoder',
    'register_decoder',
    'get_encoder',
    'get_decoder',
    'register_default_codecs',
]

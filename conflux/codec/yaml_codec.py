from typing import Any

import yaml

from conflux.core.exceptions import CodecError
from .base import CodecType, Decoder, Encoder, to_text


class YAMLCodec(Decoder, Encoder):
    """YAML encoder/decoder built on PyYAML's safe loader and dumper."""

    def decode(self, data: bytes) -> Any:
        try:
            return yaml.safe_load(to_text(data))
        except (yaml.YAMLError, UnicodeDecodeError) as e:
            raise CodecError(CodecType.YAML.value, "decode", e)

    def encode(self, value: Any) -> bytes:
        try:
            return yaml.safe_dump(value, default_flow_style=False, indent=2).encode("utf-8")
        except yaml.YAMLError as e:
            raise CodecError(CodecType.YAML.value, "encode", e)


class ScalarCodec(Decoder):
    """
    Decodes a payload holding one scalar (``42``, ``true``, ``some text``).

    Remote stores keep one value per key; this codec gives it a type using
    YAML's scalar resolution. Structured payloads are rejected.
    """

    def decode(self, data: bytes) -> Any:
        text = to_text(data).strip()
        if not text:
            return ""
        try:
            value = yaml.safe_load(text)
        except yaml.YAMLError:
            return text
        if isinstance(value, (dict, list)):
            raise CodecError(
                CodecType.SCALAR.value, "decode",
                ValueError(f"expected a scalar, got {type(value).__name__}"))
        return text if value is None else value

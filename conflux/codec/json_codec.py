import json
from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import Any

from conflux.core.exceptions import CodecError
from .base import CodecType, Decoder, Encoder, to_text


def _default(value: Any) -> Any:
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, timedelta):
        return str(value)
    if isinstance(value, Decimal):
        return str(value)
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


class JSONCodec(Decoder, Encoder):
    """JSON encoder/decoder built on the standard library."""

    def decode(self, data: bytes) -> Any:
        try:
            return json.loads(to_text(data))
        except (ValueError, UnicodeDecodeError) as e:
            raise CodecError(CodecType.JSON.value, "decode", e)

    def encode(self, value: Any) -> bytes:
        try:
            return json.dumps(value, indent=2, default=_default).encode("utf-8")
        except (TypeError, ValueError) as e:
            raise CodecError(CodecType.JSON.value, "encode", e)

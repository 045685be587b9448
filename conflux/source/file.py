"""
File and byte-buffer sources.
"""

from pathlib import Path
from typing import Any, Union

from conflux.codec.base import Decoder
from conflux.context import Context
from conflux.core.exceptions import CodecError, SourceError
from .base import Source


class FileSource(Source):
    """
    Source reading and decoding a file on every load.
    """

    def __init__(self, path: Union[str, Path], decoder: Decoder):
        super().__init__(str(path))
        self.path = Path(path)
        self.decoder = decoder

    def load(self, ctx: Context) -> Any:
        try:
            data = self.path.read_bytes()
        except OSError as e:
            raise SourceError(str(self.path), "read", e)

        try:
            return self.decoder.decode(data)
        except CodecError as e:
            raise SourceError(str(self.path), "decode", e)


class ContentSource(Source):
    """
    Source decoding a byte buffer supplied up front.
    """

    def __init__(self, data: Union[bytes, str], decoder: Decoder, name: str = "content"):
        super().__init__(name)
        self.data = data.encode("utf-8") if isinstance(data, str) else bytes(data)
        self.decoder = decoder

    def load(self, ctx: Context) -> Any:
        try:
            return self.decoder.decode(self.data)
        except CodecError as e:
            raise SourceError(self.name, "decode", e)

from pathlib import Path
from typing import Any, Dict, Union

from conflux.codec.base import Encoder
from conflux.context import Context
from conflux.core.exceptions import CodecError, DumpError
from conflux.logger import get_conflux_logger
from .base import Dumper


class FileDumper(Dumper):
    """
    Dumper writing the encoded aggregate to a file.
    """

    def __init__(self, path: Union[str, Path], encoder: Encoder):
        self.path = Path(path)
        self.encoder = encoder
        self.logger = get_conflux_logger(component="FileDumper")

    def dump(self, ctx: Context, values: Dict[str, Any]) -> None:
        try:
            data = self.encoder.encode(values)
        except CodecError as e:
            raise DumpError(str(self.path), "encode", e)

        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_bytes(data)
        except OSError as e:
            raise DumpError(str(self.path), "write", e)

        self.logger.debug("Configuration dumped", path=str(self.path), size=len(data))

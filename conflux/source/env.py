"""
Operating-system environment source.
"""

import os
from typing import Any, Dict, Mapping, Optional

from conflux.codec.env import EnvVarCodec
from conflux.context import Context
from .base import Source


class OSEnvVarSource(Source):
    """
    Source folding prefixed environment variables into a nested mapping.

    Only variables whose name starts with ``prefix`` (a literal,
    case-sensitive test) take part; the prefix is stripped before folding,
    so with prefix ``APP_`` the variable ``APP_DB_HOST=x`` yields
    ``{"db": {"host": "x"}}``.

    Args:
        prefix: Literal prefix selecting the variables
        environ: Mapping to read instead of ``os.environ``
    """

    def __init__(self, prefix: str, environ: Optional[Mapping[str, str]] = None):
        super().__init__(f"env:{prefix}")
        self.prefix = prefix
        self.environ = environ
        self.codec = EnvVarCodec()

    def load(self, ctx: Context) -> Dict[str, Any]:
        environ = self.environ if self.environ is not None else os.environ
        entries = [
            f"{key[len(self.prefix):]}={value}"
            for key, value in list(environ.items())
            if key.startswith(self.prefix)
        ]
        self.logger.debug("Environment entries selected", prefix=self.prefix, count=len(entries))
        return self.codec.fold(entries)

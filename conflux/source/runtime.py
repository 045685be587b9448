"""
In-memory source.
"""

import copy
import threading
from typing import Any, Dict, Mapping, Optional

from conflux.context import Context
from .base import Source


class MapSource(Source):
    """
    Source backed by a mapping kept in memory.

    Useful for defaults and overrides computed at runtime. The mapping can be
    replaced with :meth:`update`; every load returns a copy.
    """

    def __init__(self, initial: Optional[Mapping[str, Any]] = None, name: str = "map"):
        super().__init__(name)
        self._lock = threading.RLock()
        self._data: Optional[Dict[str, Any]] = dict(initial) if initial is not None else None

    def load(self, ctx: Context) -> Optional[Dict[str, Any]]:
        with self._lock:
            return copy.deepcopy(self._data)

    def update(self, data: Optional[Mapping[str, Any]]):
        """Replace the mapping returned by subsequent loads."""
        with self._lock:
            self._data = dict(data) if data is not None else None

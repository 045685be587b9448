"""
Source base class.

A source produces one configuration fragment: a mapping from string keys to
arbitrarily nested values. Sources must be safe to call repeatedly with the
same backing state.
"""

from abc import ABC, abstractmethod
from typing import Any, Mapping, Optional

from conflux.context import Context
from conflux.logger import get_conflux_logger


class Source(ABC):
    """
    Abstract base class for configuration sources.

    Defines the interface that all configuration sources must implement.
    """

    def __init__(self, name: Optional[str] = None):
        self.name = name or type(self).__name__
        self.logger = get_conflux_logger(component=f"Source_{self.name}")

    @abstractmethod
    def load(self, ctx: Context) -> Optional[Mapping[str, Any]]:
        """
        Load the fragment.

        Returns ``None`` or an empty mapping when the source has nothing to
        contribute.
        """
        pass

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name!r})"

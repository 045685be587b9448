from abc import ABC, abstractmethod
from typing import Any, Dict

from conflux.context import Context


class Dumper(ABC):
    """
    Sink persisting the committed aggregate.

    Dumpers are independent: a failing dumper does not undo what earlier
    dumpers already wrote.
    """

    @abstractmethod
    def dump(self, ctx: Context, values: Dict[str, Any]) -> None:
        """Persist ``values``; raise ``ConfigError`` on failure."""
        raise NotImplementedError("Subclasses must implement dump()")

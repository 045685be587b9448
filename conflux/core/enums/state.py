"""
Lifecycle states of a configuration instance.
"""

from enum import Enum


class LoadState(Enum):
    """State of the committed aggregate."""
    EMPTY = "empty"
    LOADING = "loading"
    COMMITTED = "committed"

"""
Enums shared across the conflux package.
"""

from .state import LoadState

__all__ = [
    'LoadState',
]

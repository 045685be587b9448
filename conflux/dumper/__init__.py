"""
Configuration dumpers.
"""

from .base import Dumper
from .file import FileDumper

__all__ = [
    'Dumper',
    'FileDumper',
]

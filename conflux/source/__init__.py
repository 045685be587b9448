"""
Configuration sources.

Each source produces one fragment; the controller merges fragments in the
order the sources were registered.
"""

from .base import Source
from .file import FileSource, ContentSource
from .env import OSEnvVarSource
from .consul import ConsulSource
from .runtime import MapSource

__all__ = [
    'Source',
    'FileSource',
    'ContentSource',
    'OSEnvVarSource',
    'ConsulSource',
    'MapSource',
]

"""
Core module for the conflux configuration system.

This module provides the foundational components used throughout the package:
- Exception classes with cause chaining
- Enum definitions for the controller lifecycle
"""

from .exceptions import *
from .enums import *

__all__ = []

from .exceptions import __all__ as exceptions_all
from .enums import __all__ as enums_all

__all__.extend(exceptions_all)
__all__.extend(enums_all)

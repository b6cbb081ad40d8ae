"""
toolcall-client tools package

- registry: request-scoped name -> tool lookup
- math_solver: ``calculate`` tool backed by SymPy
"""

from .registry import ToolRegistry
from .math_solver import calculate, calculate_tool

__all__ = [
    "ToolRegistry",
    "calculate",
    "calculate_tool",
]

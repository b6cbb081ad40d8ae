"""
Tool-calling orchestration loop.

Requests completions, runs the tools the model asks for, and resubmits the
grown conversation until a final answer or the iteration ceiling.
"""

from .dispatcher import ToolDispatcher
from .loop import DEFAULT_MAX_ITERATIONS, LoopIteration, LoopState, ReActLoop

__all__ = [
    "DEFAULT_MAX_ITERATIONS",
    "LoopIteration",
    "LoopState",
    "ReActLoop",
    "ToolDispatcher",
]

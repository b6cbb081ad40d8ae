"""
Langfuse tracing integration for toolcall-client.

Provides observability for completion requests and tool executions.
"""

from .client import (
    TracingClient,
    init_tracing_client,
    get_tracing_client,
    shutdown_tracing,
)
from .context import Observation, TracingContext

__all__ = [
    "TracingClient",
    "init_tracing_client",
    "get_tracing_client",
    "shutdown_tracing",
    "Observation",
    "TracingContext",
]

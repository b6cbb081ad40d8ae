"""
Request-scoped tracing using Langfuse SDK v3.

``TracingContext`` hands out ``Observation`` context managers for spans and
generations. Children are linked to their parent by passing an explicit
``TraceContext`` (trace id + parent span id) rather than relying on the
OTEL current context. Everything is a no-op when tracing is disabled.
"""

import logging
import time
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Generator, Optional

from langfuse.types import TraceContext

from .client import get_tracing_client

logger = logging.getLogger(__name__)


def _tracing_enabled() -> bool:
    client = get_tracing_client()
    return client is not None and client.enabled and client.client is not None


@dataclass
class Observation:
    """One span or generation."""

    name: str
    as_type: str = "span"
    enabled: bool = False
    input: Optional[Any] = None
    metadata: Optional[dict] = None
    model: Optional[str] = None
    model_parameters: Optional[dict] = None
    trace_context: Optional[TraceContext] = None
    _context_manager: Any = field(default=None, repr=False)
    _observation: Any = field(default=None, repr=False)
    _start_time: float = field(default=0.0, repr=False)
    _output: Optional[Any] = field(default=None, repr=False)
    _usage: Optional[dict] = field(default=None, repr=False)
    _status: str = field(default="success", repr=False)

    def start(self) -> None:
        if not self.enabled:
            return
        client = get_tracing_client()
        if not client or not client.client:
            return

        kwargs: dict[str, Any] = {
            "trace_context": self.trace_context,
            "as_type": self.as_type,
            "name": self.name,
            "input": self.input,
            "metadata": self.metadata,
        }
        if self.as_type == "generation":
            kwargs["model"] = self.model
            kwargs["model_parameters"] = self.model_parameters

        try:
            self._start_time = time.time()
            self._context_manager = client.client.start_as_current_observation(**kwargs)
            self._observation = self._context_manager.__enter__()
        except Exception as e:
            logger.warning("Failed to start %s '%s': %s", self.as_type, self.name, e)
            self._observation = None

    def end(self) -> None:
        if not self.enabled or not self._observation:
            return
        try:
            update: dict[str, Any] = {
                "metadata": {
                    "status": self._status,
                    "duration_ms": round((time.time() - self._start_time) * 1000, 2),
                }
            }
            if self._output is not None:
                update["output"] = self._output
            if self._usage:
                update["usage_details"] = self._usage
            self._observation.update(**update)
            self._context_manager.__exit__(None, None, None)
        except Exception as e:
            logger.warning("Failed to end %s '%s': %s", self.as_type, self.name, e)

    def set_output(self, output: Any) -> None:
        self._output = output

    def set_status(self, status: str) -> None:
        self._status = status

    def set_usage(
        self,
        prompt_tokens: Optional[int] = None,
        completion_tokens: Optional[int] = None,
        total_tokens: Optional[int] = None,
    ) -> None:
        self._usage = {}
        if prompt_tokens is not None:
            self._usage["input"] = prompt_tokens
        if completion_tokens is not None:
            self._usage["output"] = completion_tokens
        if total_tokens is not None:
            self._usage["total"] = total_tokens

    def child_trace_context(self) -> Optional[TraceContext]:
        """Trace context that makes this observation the parent."""
        span_id = getattr(self._observation, "id", None)
        trace_id = getattr(self._observation, "trace_id", None)
        if not span_id or not trace_id:
            return self.trace_context
        return TraceContext(trace_id=trace_id, parent_span_id=span_id)

    @contextmanager
    def span(
        self,
        name: str,
        input: Optional[Any] = None,
        metadata: Optional[dict] = None,
    ) -> Generator["Observation", None, None]:
        """Create a child span."""
        with _observe(
            Observation(
                name=name,
                enabled=self.enabled,
                input=input,
                metadata=metadata,
                trace_context=self.child_trace_context(),
            )
        ) as child:
            yield child

    @contextmanager
    def generation(
        self,
        name: str,
        model: str,
        input: Optional[Any] = None,
        model_parameters: Optional[dict] = None,
    ) -> Generator["Observation", None, None]:
        """Create a child generation for one LLM call."""
        with _observe(
            Observation(
                name=name,
                as_type="generation",
                enabled=self.enabled,
                input=input,
                model=model,
                model_parameters=model_parameters,
                trace_context=self.child_trace_context(),
            )
        ) as child:
            yield child


@contextmanager
def _observe(observation: Observation) -> Generator[Observation, None, None]:
    try:
        observation.start()
        yield observation
    finally:
        observation.end()


@dataclass
class TracingContext:
    """
    Tracing context for one top-level call.

    Enabled state is captured at construction from the global tracing client.
    """

    execution_id: str
    session_id: Optional[str] = None
    _enabled: bool = field(default=False, repr=False)

    def __post_init__(self):
        self._enabled = _tracing_enabled()

    @property
    def enabled(self) -> bool:
        return self._enabled

    @contextmanager
    def span(
        self,
        name: str,
        input: Optional[Any] = None,
        metadata: Optional[dict] = None,
    ) -> Generator[Observation, None, None]:
        """Create a root span for this context."""
        root_metadata = {"execution_id": self.execution_id}
        if self.session_id:
            root_metadata["session_id"] = self.session_id
        root_metadata.update(metadata or {})
        with _observe(
            Observation(
                name=name,
                enabled=self._enabled,
                input=input,
                metadata=root_metadata,
            )
        ) as obs:
            yield obs

"""
Tool-calling resubmission loop (ReAct loop).

Each iteration requests one completion, inspects the assistant message that
was appended, and either returns it (no tool calls) or runs the requested
tools and goes around again. The conversation lives on the payload and only
ever grows; the loop keeps no other state between iterations apart from its
iteration counter and trace.

States:
    REQUESTING -> INSPECTING -> TERMINAL
                             -> DISPATCHING -> REQUESTING
    REQUESTING with the budget used up -> BUDGET_EXCEEDED
    any transport or tool exception     -> FAILED
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from ..errors import BudgetExceededError
from ..schemas import CompletionRequestPayload, CompletionResponse, Message, Usage
from ..tracing import Observation, TracingContext
from ..transport import HTTPTransport
from .dispatcher import ToolDispatcher

logger = logging.getLogger(__name__)

DEFAULT_MAX_ITERATIONS = 5


class LoopState(str, Enum):
    REQUESTING = "requesting"
    INSPECTING = "inspecting"
    DISPATCHING = "dispatching"
    TERMINAL = "terminal"
    BUDGET_EXCEEDED = "budget_exceeded"
    FAILED = "failed"


@dataclass
class LoopIteration:
    """What happened in one iteration of the loop."""

    iteration: int
    tool_calls: list[str] = field(default_factory=list)
    results_appended: int = 0
    usage: Optional[Usage] = None
    is_final: bool = False


class ReActLoop:
    """
    Drives a conversation until the model stops asking for tools.

    Transport failures abort the run immediately and propagate unchanged;
    nothing is retried here.
    """

    def __init__(
        self,
        transport: HTTPTransport,
        max_iterations: int = DEFAULT_MAX_ITERATIONS,
        dispatcher: Optional[ToolDispatcher] = None,
        tracing_context: Optional[TracingContext] = None,
        execution_id: Optional[str] = None,
    ):
        if max_iterations < 1:
            raise ValueError(f"max_iterations must be at least 1, got {max_iterations}")
        self.transport = transport
        self.max_iterations = max_iterations
        self.dispatcher = dispatcher or ToolDispatcher()
        self.tracing_context = tracing_context
        self.execution_id = execution_id
        self.state = LoopState.REQUESTING
        self.iterations: list[LoopIteration] = []

    def run(self, payload: CompletionRequestPayload) -> Message:
        """
        Run the loop on a payload.

        Args:
            payload: Model, conversation and tools. Messages produced by the
                run are appended to it, also when the run fails.

        Returns:
            The terminal assistant message (its content may be empty).

        Raises:
            ValueError: if the payload has no messages.
            BudgetExceededError: if every allowed iteration asked for tools.
            APIError, MalformedResponseError, requests.RequestException:
                from the transport, unchanged.
        """
        if not payload.messages:
            raise ValueError("payload must contain at least one message")

        self.state = LoopState.REQUESTING
        self.iterations = []
        logger.debug(
            "%sStarting tool loop (max_iterations=%d, tools=%d)",
            self._id_prefix,
            self.max_iterations,
            len(payload.tools),
        )

        if self.tracing_context:
            return self._run_with_tracing(payload)
        return self._run_loop(payload, None)

    def _run_with_tracing(self, payload: CompletionRequestPayload) -> Message:
        with self.tracing_context.span(
            name="tool_loop",
            input={"messages": len(payload.messages)},
            metadata={"max_iterations": self.max_iterations, "model": payload.model},
        ) as span:
            try:
                message = self._run_loop(payload, span)
            except Exception:
                span.set_status("error")
                span.set_output({"state": self.state.value, "iterations": len(self.iterations)})
                raise
            span.set_output(
                {"iterations": len(self.iterations), "content": message.content[:500]}
            )
            return message

    def _run_loop(
        self, payload: CompletionRequestPayload, parent: Optional[Observation]
    ) -> Message:
        iteration = 0
        current: Optional[LoopIteration] = None
        message: Optional[Message] = None

        while True:
            if self.state is LoopState.REQUESTING:
                if iteration >= self.max_iterations:
                    self.state = LoopState.BUDGET_EXCEEDED
                    continue
                iteration += 1
                current = LoopIteration(iteration=iteration)
                self.iterations.append(current)
                try:
                    completion = self._request(payload, iteration, parent)
                except Exception as e:
                    self.state = LoopState.FAILED
                    logger.error(
                        "%sCompletion request failed at iteration %d: %s",
                        self._id_prefix,
                        iteration,
                        e,
                    )
                    raise
                current.usage = completion.usage
                self.state = LoopState.INSPECTING

            elif self.state is LoopState.INSPECTING:
                message = payload.messages[-1]
                current.tool_calls = [c.function.name for c in message.tool_calls]
                if message.tool_calls:
                    self.state = LoopState.DISPATCHING
                else:
                    self.state = LoopState.TERMINAL

            elif self.state is LoopState.DISPATCHING:
                logger.debug(
                    "%sIteration %d: handling %d tool call(s)",
                    self._id_prefix,
                    iteration,
                    len(message.tool_calls),
                )
                try:
                    current.results_appended = self.dispatcher.dispatch(
                        payload, message.tool_calls, parent
                    )
                except Exception:
                    self.state = LoopState.FAILED
                    raise
                self.state = LoopState.REQUESTING

            elif self.state is LoopState.TERMINAL:
                current.is_final = True
                if message.content:
                    logger.info("%sFinal response: %s", self._id_prefix, message.content)
                self._log_trace_summary()
                return message

            elif self.state is LoopState.BUDGET_EXCEEDED:
                logger.warning(
                    "%sMax iterations (%d) reached without a final answer",
                    self._id_prefix,
                    self.max_iterations,
                )
                self._log_trace_summary()
                raise BudgetExceededError(self.max_iterations)

            else:
                raise RuntimeError(f"Unexpected loop state: {self.state}")

    def _request(
        self,
        payload: CompletionRequestPayload,
        iteration: int,
        parent: Optional[Observation],
    ) -> CompletionResponse:
        """Ask the transport for one completion, traced if a parent is given."""
        logger.debug("%sIteration %d: requesting completion", self._id_prefix, iteration)
        if parent is None:
            return self.transport.send_completion(payload)

        with parent.generation(
            name=f"completion_{iteration}",
            model=payload.model,
            input=[m.to_dict() for m in payload.messages],
        ) as gen:
            try:
                completion = self.transport.send_completion(payload)
            except Exception:
                gen.set_status("error")
                raise
            gen.set_output(payload.messages[-1].to_dict())
            if completion.usage:
                gen.set_usage(
                    prompt_tokens=completion.usage.prompt_tokens,
                    completion_tokens=completion.usage.completion_tokens,
                    total_tokens=completion.usage.total_tokens,
                )
            return completion

    @property
    def _id_prefix(self) -> str:
        return f"[{self.execution_id}] " if self.execution_id else ""

    def _log_trace_summary(self) -> None:
        for it in self.iterations:
            if it.is_final:
                logger.info("%sIteration %d [FINAL]", self._id_prefix, it.iteration)
            else:
                logger.info(
                    "%sIteration %d: %s -> %d result(s)",
                    self._id_prefix,
                    it.iteration,
                    ", ".join(it.tool_calls) or "-",
                    it.results_appended,
                )

    def get_trace(self) -> list[dict]:
        """Get a trace of the last run, one dict per iteration."""
        return [
            {
                "iteration": it.iteration,
                "tool_calls": list(it.tool_calls),
                "results_appended": it.results_appended,
                "total_tokens": it.usage.total_tokens if it.usage else None,
                "is_final": it.is_final,
            }
            for it in self.iterations
        ]

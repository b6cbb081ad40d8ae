"""
Tool dispatch for the orchestration loop.

Runs the tool calls of one assistant message, in the order the model sent
them, and appends one ``tool`` message per executed call.
"""

import logging
from typing import Optional, Sequence

from ..schemas import CompletionRequestPayload, Message, MessageRole, ToolCall
from ..tools.registry import ToolRegistry
from ..tracing import Observation

logger = logging.getLogger(__name__)


class ToolDispatcher:
    """
    Executes requested tool calls against the payload's tools.

    A call naming a tool that is not on the payload is logged and skipped:
    no result message is appended for it and the conversation goes on.
    Exceptions raised by a tool are not caught.
    """

    def dispatch(
        self,
        payload: CompletionRequestPayload,
        tool_calls: Sequence[ToolCall],
        parent: Optional[Observation] = None,
    ) -> int:
        """
        Execute tool calls and append their results to the payload.

        Args:
            payload: Conversation state; result messages are appended to it.
            tool_calls: Calls from the latest assistant message.
            parent: Tracing observation to nest tool spans under.

        Returns:
            Number of result messages appended.
        """
        registry = ToolRegistry.from_payload(payload)
        appended = 0

        for call in tool_calls:
            name = call.function.name
            tool = registry.get(name)
            if tool is None:
                logger.warning("Tool not found, skipping call %s: %s", call.id, name)
                continue

            logger.debug("Calling tool '%s' (call %s)", name, call.id)
            if parent is not None:
                with parent.span(
                    name=f"tool:{name}",
                    input={"arguments": call.function.arguments},
                ) as span:
                    try:
                        result = tool.invoke(call.function.arguments)
                    except Exception:
                        span.set_status("error")
                        raise
                    span.set_output({"result": result[:500]})
            else:
                result = tool.invoke(call.function.arguments)

            payload.add_messages(
                Message(
                    role=MessageRole.TOOL,
                    content=result,
                    tool_call_id=call.id,
                )
            )
            appended += 1

        return appended

"""
Tool Registry - name-keyed lookup of the tools offered in one request.

A registry is built from a payload's tool list whenever tool calls are
dispatched. It is request-scoped: nothing is shared between payloads.
"""

from typing import Iterable, Optional

from ..schemas import CompletionRequestPayload, FunctionDefinition, ToolDefinition


class ToolRegistry:
    """Maps tool names to their function definitions."""

    def __init__(self, tools: Iterable[ToolDefinition] = ()):
        self._tools: dict[str, FunctionDefinition] = {}
        for tool in tools:
            self.register(tool)

    @classmethod
    def from_payload(cls, payload: CompletionRequestPayload) -> "ToolRegistry":
        """Build the registry for the tools declared on a payload."""
        return cls(payload.tools)

    def register(self, tool: ToolDefinition) -> None:
        """Register a tool. A later tool with the same name replaces the earlier one."""
        self._tools[tool.function.name] = tool.function

    def get(self, name: str) -> Optional[FunctionDefinition]:
        """Get a tool by name."""
        return self._tools.get(name)

    def all_tools(self) -> dict[str, FunctionDefinition]:
        """Get a copy of all registered tools."""
        return self._tools.copy()

    def get_tools_summary(self) -> str:
        """Get a one-line-per-tool summary for display."""
        lines = []
        for name, tool in self._tools.items():
            if tool.description:
                lines.append(f"- {name}: {tool.description}")
            else:
                lines.append(f"- {name}")
        return "\n".join(lines)

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def __len__(self) -> int:
        return len(self._tools)

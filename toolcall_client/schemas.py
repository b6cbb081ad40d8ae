"""
OpenAI-compatible Pydantic schemas for chat completions and embeddings.

These models are both the wire format sent to / received from the API and
the in-memory conversation the orchestration loop works on.
"""

import json
from enum import Enum
from typing import Any, Callable, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr, field_validator

# A tool takes the raw argument text produced by the model and returns the
# raw result text sent back to it.
ToolFunction = Callable[[str], str]


class MessageRole(str, Enum):
    """The role of a message author."""

    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"
    DEVELOPER = "developer"
    TOOL = "tool"


class JsonSchema(BaseModel):
    """Subset of JSON Schema used to describe tool parameters."""

    type: Optional[str] = None
    description: Optional[str] = None
    properties: Optional[dict[str, "JsonSchema"]] = None
    required: Optional[list[str]] = None
    items: Optional["JsonSchema"] = None


class FunctionCall(BaseModel):
    """The function part of a tool call requested by the model."""

    model_config = ConfigDict(frozen=True)

    name: str
    arguments: str = ""


class ToolCall(BaseModel):
    """A tool invocation requested by the model."""

    model_config = ConfigDict(frozen=True)

    id: str
    type: str = "function"
    function: FunctionCall


class Message(BaseModel):
    """A single message in a chat conversation."""

    model_config = ConfigDict(frozen=True, use_enum_values=True)

    role: MessageRole = Field(..., description="The role of the message author")
    content: str = Field(default="", description="Text content, may be empty")
    tool_calls: list[ToolCall] = Field(
        default_factory=list, description="Tool calls requested by the assistant"
    )
    name: Optional[str] = None
    tool_call_id: Optional[str] = Field(
        default=None, description="Id of the tool call this message answers"
    )

    @field_validator("content", mode="before")
    @classmethod
    def normalize_content(cls, v):
        """The API sends ``null`` content on tool-call messages."""
        return "" if v is None else v

    @field_validator("tool_calls", mode="before")
    @classmethod
    def normalize_tool_calls(cls, v):
        return [] if v is None else v

    def to_dict(self) -> dict:
        """Serialize for the request body, omitting empty optional fields."""
        data = self.model_dump(exclude_none=True)
        if not data.get("tool_calls"):
            data.pop("tool_calls", None)
        return data


class FunctionDefinition(BaseModel):
    """A locally callable function the model may ask to run."""

    name: str
    description: Optional[str] = None
    parameters: Optional[JsonSchema] = None
    fn: Optional[ToolFunction] = Field(default=None, exclude=True, repr=False)

    def invoke(self, arguments: str) -> str:
        """Run the bound callable with the model's raw argument text."""
        if self.fn is None:
            raise TypeError(f"Tool '{self.name}' has no callable bound")
        return self.fn(arguments)


class ToolDefinition(BaseModel):
    """A tool entry in a completion request."""

    type: Literal["function"] = "function"
    function: FunctionDefinition


def new_tool_definition(
    name: str,
    fn: ToolFunction,
    description: Optional[str] = None,
    parameters: Optional[JsonSchema | dict] = None,
) -> ToolDefinition:
    """Build a ToolDefinition with ``type`` set to ``function``."""
    if isinstance(parameters, dict):
        parameters = JsonSchema.model_validate(parameters)
    return ToolDefinition(
        function=FunctionDefinition(
            name=name,
            description=description,
            parameters=parameters,
            fn=fn,
        )
    )


class CompletionRequestPayload(BaseModel):
    """
    Request state threaded through every iteration of the loop.

    ``messages`` is the full history sent to the API. Everything appended
    through ``add_messages`` is also recorded in ``new_messages`` so a caller
    can see what one run produced.
    """

    model: str = ""
    messages: list[Message] = Field(default_factory=list)
    tools: list[ToolDefinition] = Field(default_factory=list)
    tool_choice: Optional[Any] = None

    _new_messages: list[Message] = PrivateAttr(default_factory=list)

    @property
    def new_messages(self) -> list[Message]:
        return self._new_messages

    def add_messages(self, *messages: Message) -> None:
        """Append messages to the conversation."""
        self.messages.extend(messages)
        self._new_messages.extend(messages)

    @property
    def last_message(self) -> Optional[Message]:
        return self.messages[-1] if self.messages else None

    def to_request_body(self) -> dict:
        """Build the JSON body for ``/v1/chat/completions``."""
        body: dict = {}
        if self.model:
            body["model"] = self.model
        body["messages"] = [m.to_dict() for m in self.messages]
        if self.tools:
            body["tools"] = [t.model_dump(exclude_none=True) for t in self.tools]
        if self.tool_choice is not None:
            body["tool_choice"] = self.tool_choice
        return body


class Usage(BaseModel):
    """Token counts reported by the API."""

    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0


class Choice(BaseModel):
    index: int = 0
    message: Optional[Message] = None


class CompletionResponse(BaseModel):
    """Response body of ``/v1/chat/completions``."""

    choices: list[Choice] = Field(default_factory=list)
    usage: Optional[Usage] = None

    @field_validator("choices", mode="before")
    @classmethod
    def normalize_choices(cls, v):
        return [] if v is None else v


class ToolResult(BaseModel):
    """Result envelope a tool can use to report success or its own error."""

    error: Optional[str] = None
    result: Optional[str] = None

    def to_json(self) -> str:
        data = {k: v for k, v in self.model_dump().items() if v}
        return json.dumps(data)


class EmbeddingPayload(BaseModel):
    """Request body for ``/v1/embeddings``."""

    model: str
    input: str


class EmbeddingObject(BaseModel):
    object: str = "embedding"
    index: int = 0
    embedding: list[float] = Field(default_factory=list)
    model: Optional[str] = None


class EmbeddingResponse(BaseModel):
    """Response body of ``/v1/embeddings``."""

    object: str = "list"
    data: list[EmbeddingObject] = Field(default_factory=list)
    usage: Optional[Usage] = None

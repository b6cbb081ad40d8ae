"""
toolcall-client - tool-calling loop for OpenAI-compatible chat APIs

This package provides:
- Pydantic models for messages, tool definitions and request payloads
- An HTTP transport with classified API errors
- A ReAct-style loop that runs locally registered tools for the model
- An embeddings call and a thin CLI
"""

from .errors import (
    APIError,
    AuthenticationError,
    BudgetExceededError,
    InvalidRequestError,
    MalformedResponseError,
    NotFoundError,
    RateLimitError,
    ServiceUnavailableError,
    ToolcallClientError,
    UnknownAPIError,
)
from .llm_call import LLMClient
from .orchestration import ReActLoop, ToolDispatcher
from .schemas import (
    CompletionRequestPayload,
    EmbeddingPayload,
    FunctionDefinition,
    JsonSchema,
    Message,
    MessageRole,
    ToolCall,
    ToolDefinition,
    ToolResult,
    new_tool_definition,
)

__all__ = [
    "LLMClient",
    "ReActLoop",
    "ToolDispatcher",
    "CompletionRequestPayload",
    "EmbeddingPayload",
    "FunctionDefinition",
    "JsonSchema",
    "Message",
    "MessageRole",
    "ToolCall",
    "ToolDefinition",
    "ToolResult",
    "new_tool_definition",
    "ToolcallClientError",
    "APIError",
    "InvalidRequestError",
    "AuthenticationError",
    "RateLimitError",
    "ServiceUnavailableError",
    "NotFoundError",
    "UnknownAPIError",
    "BudgetExceededError",
    "MalformedResponseError",
]

__version__ = "0.1.0"

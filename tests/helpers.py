"""
Builders for fake chat-completion HTTP responses used across the tests.
"""

import json
from typing import Optional
from unittest.mock import Mock


def make_http_response(status_code: int = 200, body=None) -> Mock:
    """Create a mock ``requests.Response`` with a JSON (or raw) body."""
    response = Mock()
    response.status_code = status_code
    if isinstance(body, (bytes, str)):
        response.content = body if isinstance(body, bytes) else body.encode()
    else:
        response.content = json.dumps(body or {}).encode()
    return response


def completion_body(
    content: Optional[str] = "",
    tool_calls: Optional[list[dict]] = None,
    usage: Optional[dict] = None,
) -> dict:
    """Body of a chat-completion response with a single assistant choice."""
    message: dict = {"role": "assistant", "content": content}
    if tool_calls:
        message["tool_calls"] = tool_calls
    return {
        "choices": [{"index": 0, "message": message}],
        "usage": usage or {"prompt_tokens": 5, "completion_tokens": 10, "total_tokens": 15},
    }


def tool_call(call_id: str, name: str, arguments: str = "") -> dict:
    return {
        "id": call_id,
        "type": "function",
        "function": {"name": name, "arguments": arguments},
    }

"""
Pytest configuration and fixtures for toolcall-client tests.
"""

from unittest.mock import Mock

import pytest

from toolcall_client.schemas import (
    CompletionRequestPayload,
    Message,
    MessageRole,
    new_tool_definition,
)
from toolcall_client.tracing import shutdown_tracing
from toolcall_client.transport import HTTPTransport


@pytest.fixture
def session():
    """A mock ``requests.Session``; set ``post.side_effect`` per test."""
    return Mock()


@pytest.fixture
def transport(session):
    return HTTPTransport(base_url="http://example.com", api_key="test-key", session=session)


@pytest.fixture
def echo_tool():
    return new_tool_definition(
        name="echo",
        fn=lambda args: f"echo:{args}",
        description="Echo the arguments back",
    )


@pytest.fixture
def user_payload(echo_tool):
    """Payload with one user message and the echo tool."""
    return CompletionRequestPayload(
        model="test-model",
        messages=[Message(role=MessageRole.USER, content="Hi")],
        tools=[echo_tool],
    )


@pytest.fixture(autouse=True)
def reset_tracing():
    """Make sure no test leaks a tracing client into the next one."""
    shutdown_tracing()
    yield
    shutdown_tracing()


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Isolate tests from the developer's environment."""
    for name in (
        "OPENAI_BASE_URL",
        "OPENAI_API_KEY",
        "OPENAI_MODEL",
        "OPENAI_EMBEDDING_MODEL",
        "OPENAI_TIMEOUT",
        "MAX_TOOL_ITERATIONS",
        "LANGFUSE_PUBLIC_KEY",
        "LANGFUSE_SECRET_KEY",
        "LANGFUSE_HOST",
        "LANGFUSE_DEBUG",
        "LOG_LEVEL",
        "TOOLCALL_CLIENT_CONFIG",
    ):
        monkeypatch.delenv(name, raising=False)

"""
Tests for Langfuse tracing integration with SDK v3.

Tests cover:
- Client disabled states (credentials, init failure, auth check)
- Context manager no-ops when disabled
- Full observation lifecycle with mocked Langfuse
"""

from unittest.mock import MagicMock, patch

import pytest

from toolcall_client.tracing import (
    Observation,
    TracingClient,
    TracingContext,
    get_tracing_client,
    init_tracing_client,
    shutdown_tracing,
)


@pytest.fixture
def mock_langfuse():
    """Patch the Langfuse class; auth_check succeeds by default."""
    with patch("toolcall_client.tracing.client.Langfuse") as mock_cls:
        mock_cls.return_value.auth_check.return_value = True
        yield mock_cls


class TestTracingClient:
    """Tests for TracingClient."""

    def test_client_disabled_without_credentials(self):
        client = TracingClient(public_key="", secret_key="")
        assert client.enabled is False
        assert "credentials not configured" in client.error.lower()

    def test_client_disabled_with_partial_credentials(self):
        client = TracingClient(public_key="pk-test", secret_key="")
        assert client.enabled is False
        assert client.client is None

    def test_flush_and_shutdown_no_op_when_disabled(self):
        client = TracingClient()
        client.flush()
        client.shutdown()

    def test_client_enabled_with_credentials(self, mock_langfuse):
        client = TracingClient(public_key="pk", secret_key="sk", host="http://lf")

        assert client.enabled is True
        assert client.error is None
        mock_langfuse.assert_called_once_with(
            public_key="pk", secret_key="sk", debug=False, host="http://lf"
        )

    def test_host_omitted_when_empty(self, mock_langfuse):
        TracingClient(public_key="pk", secret_key="sk")
        assert "host" not in mock_langfuse.call_args.kwargs

    def test_auth_check_false_disables(self, mock_langfuse):
        mock_langfuse.return_value.auth_check.return_value = False

        client = TracingClient(public_key="pk", secret_key="sk")

        assert client.enabled is False
        assert client.client is None
        assert "auth_check" in client.error

    def test_auth_check_exception_disables(self, mock_langfuse):
        mock_langfuse.return_value.auth_check.side_effect = ConnectionError("unreachable")

        client = TracingClient(public_key="pk", secret_key="sk")

        assert client.enabled is False
        assert "unreachable" in client.error

    def test_init_failure_disables(self, mock_langfuse):
        mock_langfuse.side_effect = ValueError("bad host")

        client = TracingClient(public_key="pk", secret_key="sk")

        assert client.enabled is False
        assert "bad host" in client.error

    def test_flush_errors_are_logged_not_raised(self, mock_langfuse):
        mock_langfuse.return_value.flush.side_effect = RuntimeError("boom")
        client = TracingClient(public_key="pk", secret_key="sk")

        client.flush()

        mock_langfuse.return_value.flush.assert_called_once()


class TestGlobalClient:
    """Tests for the process-wide client helpers."""

    def test_no_client_by_default(self):
        assert get_tracing_client() is None

    def test_init_and_get(self, mock_langfuse):
        client = init_tracing_client(public_key="pk", secret_key="sk")
        assert get_tracing_client() is client

    def test_shutdown_clears_client(self, mock_langfuse):
        init_tracing_client(public_key="pk", secret_key="sk")

        shutdown_tracing()

        assert get_tracing_client() is None
        mock_langfuse.return_value.shutdown.assert_called_once()


class TestDisabledContext:
    """Everything is a no-op when tracing is off."""

    def test_context_disabled_without_client(self):
        assert TracingContext(execution_id="abc").enabled is False

    def test_context_disabled_when_client_disabled(self):
        init_tracing_client()
        assert TracingContext(execution_id="abc").enabled is False

    def test_nested_observations_are_no_ops(self):
        ctx = TracingContext(execution_id="abc")

        with ctx.span("root") as root:
            with root.generation("gen", model="m") as gen:
                gen.set_usage(1, 2, 3)
                gen.set_output("x")
            with root.span("child") as child:
                child.set_status("error")

        assert isinstance(root, Observation)
        assert root.enabled is False


class TestEnabledContext:
    """Observation lifecycle against a mocked Langfuse client."""

    def test_span_starts_and_ends_observation(self, mock_langfuse):
        init_tracing_client(public_key="pk", secret_key="sk")
        langfuse = mock_langfuse.return_value
        observation = MagicMock(id="span-1", trace_id="trace-1")
        langfuse.start_as_current_observation.return_value.__enter__.return_value = observation

        ctx = TracingContext(execution_id="abc", session_id="s1")
        with ctx.span("tool_loop", input={"q": 1}) as root:
            root.set_output({"answer": "done"})

        kwargs = langfuse.start_as_current_observation.call_args.kwargs
        assert kwargs["name"] == "tool_loop"
        assert kwargs["as_type"] == "span"
        assert kwargs["metadata"] == {"execution_id": "abc", "session_id": "s1"}
        update = observation.update.call_args.kwargs
        assert update["output"] == {"answer": "done"}
        assert update["metadata"]["status"] == "success"
        langfuse.start_as_current_observation.return_value.__exit__.assert_called_once()

    def test_generation_links_to_parent(self, mock_langfuse):
        init_tracing_client(public_key="pk", secret_key="sk")
        langfuse = mock_langfuse.return_value
        observation = MagicMock(id="span-1", trace_id="trace-1")
        langfuse.start_as_current_observation.return_value.__enter__.return_value = observation

        ctx = TracingContext(execution_id="abc")
        with ctx.span("root") as root:
            with root.generation("completion_1", model="gpt", input=[]) as gen:
                gen.set_usage(prompt_tokens=5, completion_tokens=10, total_tokens=15)

        gen_kwargs = langfuse.start_as_current_observation.call_args_list[1].kwargs
        assert gen_kwargs["as_type"] == "generation"
        assert gen_kwargs["model"] == "gpt"
        assert gen_kwargs["trace_context"] == {
            "trace_id": "trace-1",
            "parent_span_id": "span-1",
        }
        usage_update = observation.update.call_args_list[0].kwargs
        assert usage_update["usage_details"] == {"input": 5, "output": 10, "total": 15}

    def test_start_failure_does_not_raise(self, mock_langfuse):
        init_tracing_client(public_key="pk", secret_key="sk")
        mock_langfuse.return_value.start_as_current_observation.side_effect = RuntimeError("otel")

        with TracingContext(execution_id="abc").span("root") as root:
            root.set_output("ok")

        assert root.enabled is True

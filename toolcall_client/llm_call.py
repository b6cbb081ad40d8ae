"""
LLM client for toolcall-client.

Entry point for callers: runs the tool-calling loop on a payload, and
fetches embeddings, against an OpenAI-compatible endpoint.
"""

import logging
import uuid
from typing import Optional

import requests

from .config import ClientConfig, get_config
from .orchestration import ReActLoop
from .schemas import CompletionRequestPayload, EmbeddingPayload, Message
from .tracing import TracingContext
from .transport import HTTPTransport

logger = logging.getLogger(__name__)


class LLMClient:
    """Client for an OpenAI-compatible chat-completion API."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        max_iterations: Optional[int] = None,
        session: Optional[requests.Session] = None,
        settings: Optional[ClientConfig] = None,
        trace: bool = True,
    ):
        """
        Args:
            base_url: API root, e.g. ``https://api.openai.com``. Defaults to
                OPENAI_BASE_URL.
            api_key: Bearer token. Defaults to OPENAI_API_KEY.
            model: Model used when a payload names none. Defaults to OPENAI_MODEL.
            max_iterations: Default iteration ceiling for the tool loop.
            session: ``requests`` session to send through.
            settings: Explicit configuration instead of the environment.
            trace: Trace runs with Langfuse when tracing is enabled.
        """
        settings = settings or get_config().client
        self.base_url = base_url or settings.base_url
        self.api_key = api_key or settings.api_key
        self.model = model or settings.model
        self.embedding_model = settings.embedding_model
        self.max_iterations = (
            settings.max_iterations if max_iterations is None else max_iterations
        )
        self.trace = trace
        self.transport = HTTPTransport(
            base_url=self.base_url,
            api_key=self.api_key,
            session=session,
            timeout=settings.timeout,
        )
        self.last_loop: Optional[ReActLoop] = None

    def run(
        self,
        payload: CompletionRequestPayload,
        max_iterations: Optional[int] = None,
    ) -> Message:
        """
        Run the tool-calling loop and return the final assistant message.

        The payload is mutated: every message produced by the run is appended
        to ``payload.messages`` (and ``payload.new_messages``).
        """
        if not payload.model:
            payload.model = self.model

        execution_id = uuid.uuid4().hex[:8]
        tracing_context = TracingContext(execution_id=execution_id) if self.trace else None

        loop = ReActLoop(
            transport=self.transport,
            max_iterations=self.max_iterations if max_iterations is None else max_iterations,
            tracing_context=tracing_context if tracing_context and tracing_context.enabled else None,
            execution_id=execution_id,
        )
        self.last_loop = loop
        return loop.run(payload)

    def get_completion(
        self,
        payload: CompletionRequestPayload,
        max_iterations: Optional[int] = None,
    ) -> str:
        """Run the tool-calling loop and return the final answer text."""
        return self.run(payload, max_iterations=max_iterations).content

    def get_embedding(self, payload: EmbeddingPayload | str) -> list[float]:
        """
        Get the embedding vector for one input.

        Args:
            payload: Full request, or just the input text to embed with the
                configured embedding model.
        """
        if isinstance(payload, str):
            payload = EmbeddingPayload(model=self.embedding_model, input=payload)
        response = self.transport.create_embedding(payload)
        return response.data[0].embedding

    def get_trace(self) -> list[dict]:
        """Per-iteration trace of the last run."""
        return self.last_loop.get_trace() if self.last_loop else []

    def close(self) -> None:
        """Close the underlying HTTP session."""
        try:
            self.transport.close()
        except Exception as e:
            logger.debug("Error closing HTTP session: %s", e)

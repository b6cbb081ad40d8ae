"""
HTTP transport for the chat-completion API.

One call sends one request and, on success, appends exactly one assistant
message to the payload. Failures leave the payload untouched:

- network errors from ``requests`` propagate unchanged
- non-success statuses raise a classified APIError
- undecodable bodies and empty ``choices`` raise MalformedResponseError

There is no retry here; every failure surfaces on the first attempt.
"""

import logging
from typing import Optional, TypeVar

import requests
from pydantic import BaseModel, ValidationError

from .errors import MalformedResponseError, api_error_from_response
from .schemas import (
    CompletionRequestPayload,
    CompletionResponse,
    EmbeddingPayload,
    EmbeddingResponse,
)

logger = logging.getLogger(__name__)

CHAT_COMPLETIONS_PATH = "/v1/chat/completions"
EMBEDDINGS_PATH = "/v1/embeddings"

ResponseModel = TypeVar("ResponseModel", bound=BaseModel)


def build_headers(api_key: str) -> dict[str, str]:
    """Headers for an authorized JSON request."""
    return {
        "Content-Type": "application/json",
        "Authorization": f"Bearer {api_key}",
    }


class HTTPTransport:
    """Sends requests to an OpenAI-compatible endpoint over ``requests``."""

    def __init__(
        self,
        base_url: str,
        api_key: str,
        session: Optional[requests.Session] = None,
        timeout: Optional[float] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.timeout = timeout
        self.session = session or requests.Session()

    def endpoint(self, path: str) -> str:
        return f"{self.base_url}{path}"

    def post(self, path: str, body: dict) -> requests.Response:
        """POST a JSON body. Transport errors are not caught."""
        url = self.endpoint(path)
        logger.debug("POST %s", url)
        return self.session.post(
            url,
            json=body,
            headers=build_headers(self.api_key),
            timeout=self.timeout,
        )

    @staticmethod
    def decode(response: requests.Response, model: type[ResponseModel]) -> ResponseModel:
        """
        Check the status of a response and parse its body.

        Raises:
            APIError: for any non-2xx status.
            MalformedResponseError: if the body does not match ``model``.
        """
        if not 200 <= response.status_code < 300:
            error = api_error_from_response(response.status_code, response.content)
            logger.error("API request failed: %s", error)
            raise error

        try:
            return model.model_validate_json(response.content)
        except ValidationError as e:
            text = response.content.decode("utf-8", errors="replace")
            raise MalformedResponseError(
                f"error unmarshaling response body: {e}", body=text
            ) from e

    def send_completion(self, payload: CompletionRequestPayload) -> CompletionResponse:
        """
        Request one completion and append the returned message to the payload.

        Args:
            payload: The conversation state. Mutated only on success.

        Returns:
            The decoded response, for callers interested in usage.
        """
        response = self.post(CHAT_COMPLETIONS_PATH, payload.to_request_body())
        completion = self.decode(response, CompletionResponse)

        if not completion.choices:
            raise MalformedResponseError("response contained zero choices")
        message = completion.choices[0].message
        if message is None:
            raise MalformedResponseError("first choice carries no message")

        payload.add_messages(message)
        return completion

    def create_embedding(self, payload: EmbeddingPayload) -> EmbeddingResponse:
        """Request an embedding vector for one input."""
        response = self.post(EMBEDDINGS_PATH, payload.model_dump())
        embedding = self.decode(response, EmbeddingResponse)
        if not embedding.data:
            raise MalformedResponseError("response contained no embedding data")
        return embedding

    def close(self) -> None:
        self.session.close()

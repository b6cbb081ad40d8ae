"""
Error taxonomy for toolcall-client.

API failures are classified from the HTTP status and the response body
into one exception class per error type, so callers can ``except`` the
condition they care about. The loop adds two conditions of its own:
budget exhaustion and malformed responses.
"""

import json
from typing import Optional

ERR_TYPE_INVALID_REQUEST = "invalid_request_error"
ERR_TYPE_AUTHENTICATION = "authentication_error"
ERR_TYPE_RATE_LIMIT = "rate_limit_error"
ERR_TYPE_SERVICE_UNAVAILABLE = "service_unavailable"
ERR_TYPE_NOT_FOUND = "not_found"
ERR_TYPE_UNKNOWN = "unknown_error"

# Used only when the body does not name a type itself.
STATUS_ERROR_TYPES: dict[int, str] = {
    400: ERR_TYPE_INVALID_REQUEST,
    401: ERR_TYPE_AUTHENTICATION,
    404: ERR_TYPE_NOT_FOUND,
    429: ERR_TYPE_RATE_LIMIT,
    503: ERR_TYPE_SERVICE_UNAVAILABLE,
}


class ToolcallClientError(Exception):
    """Base class for every error raised by this package."""


class APIError(ToolcallClientError):
    """An error reported by the remote chat-completion API."""

    def __init__(
        self,
        type: str,
        message: str,
        code: Optional[str] = None,
        param: Optional[str] = None,
        status_code: Optional[int] = None,
    ):
        self.type = type
        self.message = message
        self.code = code
        self.param = param
        self.status_code = status_code
        super().__init__(str(self))

    def __str__(self) -> str:
        if self.code:
            return f"{self.type}: {self.message} (code: {self.code})"
        return f"{self.type}: {self.message}"


class InvalidRequestError(APIError):
    pass


class AuthenticationError(APIError):
    pass


class RateLimitError(APIError):
    pass


class ServiceUnavailableError(APIError):
    pass


class NotFoundError(APIError):
    pass


class UnknownAPIError(APIError):
    pass


ERROR_CLASSES: dict[str, type[APIError]] = {
    ERR_TYPE_INVALID_REQUEST: InvalidRequestError,
    ERR_TYPE_AUTHENTICATION: AuthenticationError,
    ERR_TYPE_RATE_LIMIT: RateLimitError,
    ERR_TYPE_SERVICE_UNAVAILABLE: ServiceUnavailableError,
    ERR_TYPE_NOT_FOUND: NotFoundError,
}


class BudgetExceededError(ToolcallClientError):
    """The loop hit its iteration ceiling without a final answer."""

    def __init__(self, max_iterations: int):
        self.max_iterations = max_iterations
        super().__init__(
            f"reached max iterations ({max_iterations}) without finalizing an answer"
        )


class MalformedResponseError(ToolcallClientError):
    """The API answered with a body that cannot be turned into a message."""

    def __init__(self, reason: str, body: Optional[str] = None):
        self.reason = reason
        self.body = body
        super().__init__(reason)


def _make_api_error(
    error_type: str,
    message: str,
    code: Optional[str] = None,
    param: Optional[str] = None,
    status_code: Optional[int] = None,
) -> APIError:
    cls = ERROR_CLASSES.get(error_type, UnknownAPIError)
    return cls(
        type=error_type,
        message=message,
        code=code,
        param=param,
        status_code=status_code,
    )


def classify_status(status_code: int) -> str:
    """Map an HTTP status code to an error type."""
    return STATUS_ERROR_TYPES.get(status_code, ERR_TYPE_UNKNOWN)


def api_error_from_response(status_code: int, body: bytes | str) -> APIError:
    """
    Build the API error for a non-success response.

    The body may be a flat ``{"type": ..., "message": ...}`` object or the
    OpenAI envelope ``{"error": {...}}``. A type named in the body wins over
    the one derived from the status code.

    Args:
        status_code: HTTP status of the response.
        body: Raw response body.

    Returns:
        An APIError subclass matching the classified type.
    """
    text = body.decode("utf-8", errors="replace") if isinstance(body, bytes) else body

    try:
        data = json.loads(text)
    except (json.JSONDecodeError, TypeError):
        data = None

    if isinstance(data, dict) and isinstance(data.get("error"), dict):
        data = data["error"]

    if not isinstance(data, dict):
        return _make_api_error(
            classify_status(status_code),
            f"request failed with status {status_code}: {text}",
            status_code=status_code,
        )

    error_type = data.get("type") or classify_status(status_code)
    message = data.get("message")
    if not message and isinstance(data.get("error"), str):
        # {"error": "Invalid API key"}
        message = data["error"]
    if not message:
        message = f"request failed with status {status_code}: {text}"
    code = data.get("code")
    param = data.get("param")
    return _make_api_error(
        error_type,
        message,
        code=str(code) if code is not None else None,
        param=str(param) if param is not None else None,
        status_code=status_code,
    )


def new_invalid_request_error(message: str) -> InvalidRequestError:
    return InvalidRequestError(type=ERR_TYPE_INVALID_REQUEST, message=message)


def new_authentication_error(message: str) -> AuthenticationError:
    return AuthenticationError(type=ERR_TYPE_AUTHENTICATION, message=message)


def new_rate_limit_error(message: str) -> RateLimitError:
    return RateLimitError(type=ERR_TYPE_RATE_LIMIT, message=message)


def new_service_unavailable_error(message: str) -> ServiceUnavailableError:
    return ServiceUnavailableError(type=ERR_TYPE_SERVICE_UNAVAILABLE, message=message)


def new_not_found_error(message: str) -> NotFoundError:
    return NotFoundError(type=ERR_TYPE_NOT_FOUND, message=message)


def is_api_error(err: BaseException) -> bool:
    """True if the error, or any error in its cause chain, is an APIError."""
    current: Optional[BaseException] = err
    while current is not None:
        if isinstance(current, APIError):
            return True
        current = current.__cause__
    return False


def get_api_error_type(err: BaseException) -> str:
    """Return the error type of an APIError, or an empty string."""
    if isinstance(err, APIError):
        return err.type
    return ""

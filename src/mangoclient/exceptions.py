"""Exception hierarchy for mangoclient.

All exceptions inherit from :class:`MangoError`, which carries an
``exit_code`` attribute mapped to a constant from
:mod:`mangoclient.exit_codes`. Library callers catch the specific
subclasses; the command line entry point in :func:`mangoclient.app.main`
catches ``MangoError`` and exits with the appropriate code.

Subclass hierarchy::

    MangoError (exit 1)
    +-- InvalidUsageError   (exit 2)
    +-- AuthError           (exit 3)
    +-- RequestError        (exit 5)
    |   +-- NotFoundError   (exit 4)
    +-- TransportError      (exit 6)
    +-- ModelError          (exit 7)
    +-- ConfigError         (exit 1)
"""

from __future__ import annotations

from typing import Any

from mangoclient.exit_codes import (
    EXIT_AUTH_FAILURE,
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
    EXIT_MODEL_ERROR,
    EXIT_NOT_FOUND,
    EXIT_REQUEST_ERROR,
    EXIT_TRANSPORT_ERROR,
)


class MangoError(Exception):
    """Base exception for all mangoclient errors.

    Args:
        message: Human-readable error description.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class InvalidUsageError(MangoError):
    """Raised for unknown endpoint names or unresolved URL placeholders."""

    exit_code = EXIT_INVALID_USAGE


class AuthError(MangoError):
    """Raised when the OAuth2 token grant is rejected or malformed.

    Args:
        message: Human-readable error description.
        payload: The decoded token endpoint response, when one was received.
    """

    exit_code = EXIT_AUTH_FAILURE

    def __init__(self, message: str, payload: Any = None):
        super().__init__(message)
        self.payload = payload


class RequestError(MangoError):
    """Raised when the API answers with a non-2xx status.

    Args:
        status_code: The HTTP status of the failed response.
        body: The decoded error body (``dict`` for JSON errors, raw text
            otherwise).
    """

    exit_code = EXIT_REQUEST_ERROR

    def __init__(self, status_code: int, body: Any = None):
        self.status_code = status_code
        self.body = body
        message = f"HTTP {status_code}"
        api_message = error_message(body)
        if api_message:
            message = f"{message}: {api_message}"
        super().__init__(message)


class NotFoundError(RequestError):
    """Raised when the API returns HTTP 404 (resource not found)."""

    exit_code = EXIT_NOT_FOUND


class TransportError(MangoError):
    """Raised on network-level failures (timeout, DNS resolution, connection refused)."""

    exit_code = EXIT_TRANSPORT_ERROR


class ModelError(MangoError):
    """Raised when a response payload cannot be mapped onto the requested model."""

    exit_code = EXIT_MODEL_ERROR


class ConfigError(MangoError):
    """Raised for configuration problems (invalid files, unresolvable credential sources)."""

    exit_code = EXIT_GENERIC_FAILURE


def error_message(body: Any) -> str:
    """Extract the human-readable message from a Mangopay error body."""
    if isinstance(body, dict):
        return str(body.get("Message") or body.get("message") or body.get("error") or "")
    if isinstance(body, str):
        return body[:200]
    return ""

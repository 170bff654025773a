"""
Error Taxonomy and Global Error Handling

This module defines the request-level error taxonomy of the chat service and
the helpers that turn any of them into an HTTP response.

Design Goals
------------
- Never leak internal exception details to clients
- Always return deterministic, machine-readable error responses
- Log full stack traces internally for debugging
- One response shape for every failure: ``{"error": "<message>"}``
"""

from __future__ import annotations

import logging
from typing import Dict

from fastapi import Request
from fastapi.responses import JSONResponse

logger = logging.getLogger("chat.errors")


GENERIC_ERROR_MESSAGE = "I'm having trouble accessing my memory right now."

# Sent with every chat response so the portfolio page can read it cross-origin.
CORS_RESPONSE_HEADERS: Dict[str, str] = {"Access-Control-Allow-Origin": "*"}


# ---------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------

class ChatError(Exception):
    """
    Base class for every failure that ends a chat request.

    ``public_message`` is the only text that crosses the HTTP boundary;
    the exception's own message is for logs.
    """

    public_message: str = GENERIC_ERROR_MESSAGE
    status_code: int = 500


class ConfigError(ChatError):
    """Required provider configuration (e.g. an API key) is missing."""


class InputValidationError(ChatError):
    """The request body is not JSON or has no usable ``question``."""

    public_message = 'Please send a question as JSON: {"question": "..."}'


class ProviderError(ChatError):
    """The embedding provider, vector index or answer generator failed."""


class InternalError(ChatError):
    """Anything not covered by the other categories."""


# ---------------------------------------------------------------------
# Response rendering
# ---------------------------------------------------------------------

def error_response(exc: ChatError) -> JSONResponse:
    """Render a ChatError as the public ``{"error": ...}`` payload."""
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.public_message},
        headers=CORS_RESPONSE_HEADERS,
    )


# ---------------------------------------------------------------------
# Public Exception Handlers
# ---------------------------------------------------------------------

async def chat_error_handler(request: Request, exc: ChatError) -> JSONResponse:
    """
    Handler for ChatError raised outside the chat route's own boundary.
    """
    logger.error(
        "%s during request %s %s: %s",
        type(exc).__name__,
        request.method,
        request.url.path,
        exc,
    )
    return error_response(exc)


async def unhandled_exception_handler(
    request: Request,
    exc: Exception,
) -> JSONResponse:
    """
    Catch-all handler for uncaught exceptions.

    This handler is registered with FastAPI as the final safety net for any
    exception not otherwise handled by route-level handlers.

    Behavior
    --------
    - Logs the full exception stack trace for internal diagnostics.
    - Returns a generic 500 error to the client with no internal details.

    Parameters
    ----------
    request : Request
        The incoming HTTP request that triggered the exception.

    exc : Exception
        The uncaught exception instance.

    Returns
    -------
    JSONResponse
        A JSON 500 response with a minimal error payload.
    """

    # Log full traceback internally (never returned to client)
    logger.exception(
        "Unhandled exception during request: %s %s",
        request.method,
        request.url.path,
        exc_info=exc,
    )

    return error_response(InternalError(str(exc)))

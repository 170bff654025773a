"""
Chat Routes: Portfolio Question Answering

This module implements the public chat endpoint used by the portfolio page.

Major Responsibilities
----------------------
1. Answer CORS preflight requests.
2. Parse the JSON body and extract ``question``.
3. Run the retrieval-augmented ChatPipeline.
4. Translate every failure into ``{"error": ...}`` with status 500.

Security Model
--------------
- The endpoint is public; cross-origin reads are allowed from any origin.
- Internal exception detail is logged, never returned.
"""

import json
import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Request, Response, status
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from .dependencies import get_pipeline
from .models import ChatRequest, ChatResponse, ErrorResponse
from ..core.errors import (
    CORS_RESPONSE_HEADERS,
    ChatError,
    InputValidationError,
    InternalError,
    error_response,
)
from ..pipeline.chat_pipeline import ChatPipeline

logger = logging.getLogger("chat.routes")

router = APIRouter(prefix="/api", tags=["chat"])


CORS_PREFLIGHT_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "POST, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type",
}


# ---------------------------------------------------------------------
# Helper functions
# ---------------------------------------------------------------------

async def _parse_chat_request(request: Request) -> ChatRequest:
    """Read the raw body into a ChatRequest, or raise InputValidationError."""
    raw = await request.body()
    try:
        payload = json.loads(raw or b"null")
    except ValueError as exc:
        raise InputValidationError("request body is not valid JSON") from exc

    if not isinstance(payload, dict):
        raise InputValidationError("request body must be a JSON object")

    try:
        return ChatRequest.model_validate(payload)
    except ValidationError as exc:
        raise InputValidationError(
            f"invalid chat request: {exc.error_count()} error(s)"
        ) from exc


# ---------------------------------------------------------------------
# Chat Routes
# ---------------------------------------------------------------------

@router.options(
    "/chat",
    summary="CORS preflight for the chat endpoint",
    status_code=status.HTTP_200_OK,
)
async def chat_preflight() -> Response:
    return Response(status_code=status.HTTP_200_OK, headers=CORS_PREFLIGHT_HEADERS)


@router.post(
    "/chat",
    response_model=ChatResponse,
    responses={500: {"model": ErrorResponse}},
    summary="Ask the portfolio assistant a question",
    status_code=status.HTTP_200_OK,
)
async def chat(
    request: Request,
    pipeline: Annotated[ChatPipeline, Depends(get_pipeline)],
) -> JSONResponse:
    """
    Answer a question about the portfolio owner.

    The body is parsed by hand: a malformed body yields the same
    ``{"error": ...}`` 500 response as every other failure.

    Returns
    -------
    JSONResponse
        200 ``{"answer": ...}`` or 500 ``{"error": ...}``.
    """
    try:
        req = await _parse_chat_request(request)
        answer = await pipeline.answer(req.question)
    except ChatError as exc:
        logger.error(
            "Chat request failed with %s: %s",
            type(exc).__name__,
            exc,
            exc_info=exc.__cause__ is not None,
        )
        return error_response(exc)
    except Exception as exc:
        logger.exception("Unexpected failure in chat request")
        return error_response(InternalError(str(exc)))

    return JSONResponse(
        status_code=status.HTTP_200_OK,
        content=ChatResponse(answer=answer).model_dump(),
        headers=CORS_RESPONSE_HEADERS,
    )

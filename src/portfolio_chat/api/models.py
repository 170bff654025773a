"""
API Models

Pydantic models for the chat service's request and response bodies.
"""

from __future__ import annotations

from pydantic import BaseModel, Field, ConfigDict


class ChatRequest(BaseModel):
    """
    Chat request payload. Unknown fields are ignored.
    """
    question: str = Field(..., min_length=1)

    model_config = ConfigDict(extra="ignore", str_strip_whitespace=True)


class ChatResponse(BaseModel):
    answer: str

    model_config = ConfigDict(extra="forbid")


class ErrorResponse(BaseModel):
    error: str

    model_config = ConfigDict(extra="forbid")


class HealthResponse(BaseModel):
    status: str = "ok"
    provider: str
    chunks: int = Field(..., ge=0)

    model_config = ConfigDict(extra="forbid")

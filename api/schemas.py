"""
Dispatch endpoint - Pydantic Schemas

PURE DATA MODELS - NO LOGIC
Defines the JSON bodies exchanged between the client service and /api/gemini.
"""

from pydantic import BaseModel, ConfigDict, Field


class GenerateRequest(BaseModel):
    """Inbound body: {"prompt": "..."}."""

    prompt: str = Field(..., min_length=1, description="Prompt text (opaque to the server)")


class GenerateResponse(BaseModel):
    """200 body."""

    model_config = ConfigDict(frozen=True)

    text: str


class RateLimitedResponse(BaseModel):
    """429 body. retryDelay mirrors the Retry-After header."""

    model_config = ConfigDict(frozen=True)

    error: str = "All API keys are rate-limited."
    retryDelay: int = Field(..., ge=1, description="Seconds before the next attempt")


class ErrorResponse(BaseModel):
    """400 / 405 / 500 body."""

    model_config = ConfigDict(frozen=True)

    error: str

"""Dispatch endpoint - Module Exports"""

from .schemas import ErrorResponse, GenerateRequest, GenerateResponse, RateLimitedResponse
from .gemini import router, render_result

__all__ = [
    "GenerateRequest",
    "GenerateResponse",
    "RateLimitedResponse",
    "ErrorResponse",
    "render_result",
    "router",
]

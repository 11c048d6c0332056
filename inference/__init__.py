"""
Model boundary layer for Gemini inference.

This package provides a clean abstraction for a single model call made
with one explicit credential, so the dispatcher can fail over between
credentials without knowing the SDK.

Supported backends:
- StubModelBackend: Scripted fake model (default for CI/tests)
- GeminiModelBackend: Google Gemini via google-genai

Example usage:
    from inference import StubModelBackend, GenerationRequest

    backend = StubModelBackend()
    text = backend.generate(GenerationRequest(prompt="Hello", api_key="k1"))
"""

from .types import GenerationRequest
from .base import ModelBackend
from .stub import StubModelBackend
from .gemini import GeminiModelBackend, DEFAULT_MODEL_NAME

__all__ = [
    "GenerationRequest",
    "ModelBackend",
    "StubModelBackend",
    "GeminiModelBackend",
    "DEFAULT_MODEL_NAME",
]

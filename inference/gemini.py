"""
Gemini backend (google-genai).

One call == one credential. A fresh client is built for every request so
the API key never outlives the call that uses it. SDK exceptions are not
caught here: the dispatcher needs the original error (status code, headers,
structured details) to decide between failover, backoff and abort.
"""

import logging

from google import genai

from .base import ModelBackend
from .types import GenerationRequest

logger = logging.getLogger(__name__)

DEFAULT_MODEL_NAME = "gemini-2.5-flash-lite"


class GeminiModelBackend(ModelBackend):
    """
    Google Gemini backend.

    Uses the synchronous google-genai client; the HTTP layer runs the
    dispatcher in a worker thread so blocking here is fine.
    """

    def __init__(self, model_name: str = DEFAULT_MODEL_NAME):
        """
        Initialize Gemini backend.

        Args:
            model_name: Gemini model id (e.g. "gemini-2.5-flash-lite")
        """
        self.model_name = model_name

    def generate(self, request: GenerationRequest) -> str:
        model = request.model or self.model_name
        client = genai.Client(api_key=request.api_key)

        logger.debug(f"generate_content model={model} prompt_chars={len(request.prompt)}")
        resp = client.models.generate_content(model=model, contents=request.prompt)

        return getattr(resp, "text", "") or ""

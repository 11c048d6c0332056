"""
Integration Service (client side)

Talks only to our own /api/gemini endpoint, never to Google directly.
Maps the HTTP response back onto the dispatcher's result variants:

  2xx  -> Ok{text}
  429  -> AllLimited{n}   n from Retry-After, else body "retryDelay", else 20
  else -> raises IntegrationServiceError (server's "error" field when present)

Transport failures (httpx.HTTPError) propagate unchanged.
"""

import logging
import math
from typing import Any, Optional, Sequence

import httpx

from config import Config
from dispatcher import AllLimited, DispatchResult, Ok

from .courses import MAX_COURSES, MIN_COURSES, Course, build_prompt, can_generate

logger = logging.getLogger(__name__)

DEFAULT_CLIENT_RETRY_SECONDS = 20
DEFAULT_TIMEOUT_S = 60.0


class IntegrationServiceError(Exception):
    """Non rate-limit failure reported by the integration endpoint."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


def _positive_number(value: Any) -> Optional[float]:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(number) or math.isinf(number) or number <= 0:
        return None
    return number


class IntegrationClient:
    """
    HTTP client for the integration endpoint.

    Usage:
        client = IntegrationClient("http://localhost:8000/api/gemini")
        result = await client.generate_integration(courses)

    Args:
        api_url: Endpoint URL (defaults to INTEGRATIONS_API_URL)
        timeout: Per-request timeout in seconds
        fallback_retry_seconds: Wait used when a 429 carries no timing
        transport: Optional httpx transport (tests inject httpx.MockTransport)
    """

    def __init__(
        self,
        api_url: Optional[str] = None,
        *,
        timeout: float = DEFAULT_TIMEOUT_S,
        fallback_retry_seconds: int = DEFAULT_CLIENT_RETRY_SECONDS,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_url = api_url or Config.INTEGRATIONS_API_URL
        self.timeout = timeout
        self.fallback_retry_seconds = fallback_retry_seconds
        self._transport = transport

    async def generate_integration(self, courses: Sequence[Course]) -> DispatchResult:
        """Build the prompt for 2-4 courses and request an integration."""
        if not can_generate(courses):
            raise ValueError(f"Number of courses must be between {MIN_COURSES} and {MAX_COURSES}.")
        return await self.generate(build_prompt(courses))

    async def generate(self, prompt: str) -> DispatchResult:
        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            response = await client.post(
                self.api_url,
                json={"prompt": prompt},
                headers={"Content-Type": "application/json"},
            )

        if response.is_success:
            data = self._json(response)
            text = data.get("text") if isinstance(data, dict) else None
            return Ok(text=str(text or ""))

        if response.status_code == 429:
            delay = self._retry_delay(response)
            logger.info(f"Integration endpoint rate-limited; retry in {delay}s")
            return AllLimited(retry_after_seconds=delay)

        data = self._json(response)
        server_msg = data.get("error") if isinstance(data, dict) else None
        raise IntegrationServiceError(
            server_msg or f"Failed to generate integrations from server (status {response.status_code}).",
            status_code=response.status_code,
        )

    def _retry_delay(self, response: httpx.Response) -> int:
        """Retry-After header first, then the body's retryDelay, then the fallback."""
        delay = _positive_number(response.headers.get("Retry-After"))
        if delay is None:
            data = self._json(response)
            if isinstance(data, dict):
                delay = _positive_number(data.get("retryDelay"))
        if delay is None:
            delay = self.fallback_retry_seconds
        return max(1, math.ceil(delay))

    @staticmethod
    def _json(response: httpx.Response) -> Any:
        try:
            return response.json()
        except ValueError:
            return None

"""
Multi-credential dispatcher.

Sends one prompt to the model, failing over across the credential pool:

  credential 1 ──► Success ─────────────► Ok{text}            (stop)
       │
       ├─► RateLimited(wait) ── record wait, next credential
       ├─► InvalidCredential ── next credential
       └─► Fatal ─────────────────────────► Error{message}    (stop)

  pool exhausted, waits recorded ────────► AllLimited{max(1, ceil(min(waits) + buffer))}
  pool exhausted, nothing recorded ──────► Error{"Failed to generate with all API keys."}

Invariants:
- Credentials are tried strictly in pool order, one at a time
- First success wins; later credentials are never called
- Exactly one DispatchResult per call
- API keys are never logged (credentials are referred to by position)
"""

import logging
import math
from typing import List, Optional

from inference import GenerationRequest, ModelBackend

from .errors import classify_error
from .pool import CredentialPool
from .results import (
    AllLimited,
    DispatchResult,
    Error,
    Fatal,
    InvalidCredential,
    Ok,
    Outcome,
    RateLimited,
    Success,
)

logger = logging.getLogger(__name__)

DEFAULT_RETRY_FALLBACK_SECONDS = 20.0
DEFAULT_RETRY_BUFFER_SECONDS = 2.0

EMPTY_RESPONSE_MESSAGE = "Empty response from Gemini API."
FATAL_MESSAGE = "Gemini API error"
EXHAUSTED_MESSAGE = "Failed to generate with all API keys."


class Dispatcher:
    """
    Stateless failover dispatcher.

    Usage:
        dispatcher = Dispatcher(pool, GeminiModelBackend())
        result = dispatcher.dispatch("prompt text")

    The only state is the injected, read-only pool and backend, so one
    instance can serve concurrent requests.
    """

    def __init__(
        self,
        pool: CredentialPool,
        backend: ModelBackend,
        *,
        model_name: Optional[str] = None,
        fallback_retry_seconds: float = DEFAULT_RETRY_FALLBACK_SECONDS,
        retry_buffer_seconds: float = DEFAULT_RETRY_BUFFER_SECONDS,
    ):
        self.pool = pool
        self.backend = backend
        self.model_name = model_name
        self.fallback_retry_seconds = fallback_retry_seconds
        self.retry_buffer_seconds = retry_buffer_seconds

    def attempt(self, api_key: str, prompt: str) -> Outcome:
        """Make one call with one credential and classify the result."""
        try:
            text = self.backend.generate(
                GenerationRequest(prompt=prompt, api_key=api_key, model=self.model_name)
            )
        except Exception as e:
            return classify_error(e)

        if not text:
            return Fatal(message=EMPTY_RESPONSE_MESSAGE)
        return Success(text=text)

    def retry_after(self, waits: List[float]) -> int:
        """Seconds the caller should wait before retrying the whole pool."""
        return max(1, math.ceil(min(waits) + self.retry_buffer_seconds))

    def dispatch(self, prompt: str) -> DispatchResult:
        if self.pool.is_empty:
            message = f"No API keys configured on server ({self.pool.source})."
            logger.error(message)
            return Error(message=message)

        waits: List[float] = []

        for position, api_key in enumerate(self.pool, start=1):
            outcome = self.attempt(api_key, prompt)

            if isinstance(outcome, Success):
                logger.info(f"Generated with key #{position}/{len(self.pool)}")
                return Ok(text=outcome.text)

            if isinstance(outcome, RateLimited):
                wait = outcome.wait_seconds
                if wait is None:
                    wait = self.fallback_retry_seconds
                logger.warning(
                    f"Key #{position} rate-limited (wait={wait}s"
                    f"{'' if outcome.wait_seconds is not None else ', fallback'}); trying next"
                )
                waits.append(wait)
                continue

            if isinstance(outcome, InvalidCredential):
                logger.warning(f"Key #{position} rejected as invalid; trying next")
                continue

            logger.error(f"Gemini non-rate-limit error on key #{position}: {outcome.message}")
            return Error(message=FATAL_MESSAGE, detail=outcome.message)

        if waits:
            retry_after = self.retry_after(waits)
            logger.warning(f"All {len(self.pool)} keys rate-limited; retry after {retry_after}s")
            return AllLimited(retry_after_seconds=retry_after)

        logger.error(EXHAUSTED_MESSAGE)
        return Error(message=EXHAUSTED_MESSAGE)

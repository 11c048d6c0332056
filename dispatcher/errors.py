"""
Provider error classification and retry-timing extraction.

Provider errors arrive in heterogeneous shapes (google-genai APIError,
raw HTTP errors, plain exceptions wrapping a JSON body). Everything here is
duck-typed: we look for a status code, response headers and a body text
wherever they may live, never for a concrete exception class.

Classification order:
  1. rate-limited      status 429, or "too many requests" / "quota exceeded" / "rate limit"
  2. invalid key       "api key not valid" / "api_key_invalid"
  3. fatal             anything else

Retry timing (rate-limited only), first match wins:
  a. Retry-After header              "17"            -> 17.0
  b. google.rpc.RetryInfo in body    "retryDelay": "15s" -> 15.0
  c. free text                       "retry in 22.85s"   -> 23.0
  d. nothing                         -> None
"""

import json
import math
import re
from typing import Any, Iterable, Optional

from .results import Fatal, InvalidCredential, Outcome, RateLimited

RATE_LIMIT_STATUS = 429

RATE_LIMIT_MARKERS = ("too many requests", "quota exceeded", "rate limit")
INVALID_KEY_MARKERS = ("api key not valid", "api_key_invalid")

# Structured RetryInfo, e.g. {"@type": "...RetryInfo", "retryDelay": "15s"}.
# Single quotes cover Python reprs of the same details dict.
_RETRY_DELAY_RE = re.compile(r"""["']retryDelay["']\s*:\s*["'](\d+)s["']""", re.IGNORECASE)
# Free text, e.g. "Please retry in 22.85s."
_RETRY_IN_RE = re.compile(r"retry in (\d+(\.\d+)?)s", re.IGNORECASE)


# ──────────────────────────────────────────────────────────────
# ERROR INTROSPECTION
# ──────────────────────────────────────────────────────────────


def error_text(error: Any) -> str:
    """Textual representation used for marker matching."""
    return str(error if error is not None else "")


def _carriers(error: Any) -> Iterable[Any]:
    """The error itself, then its cause, then its HTTP response."""
    yield error
    cause = getattr(error, "__cause__", None)
    if cause is not None:
        yield cause
    response = getattr(error, "response", None)
    if response is not None:
        yield response


def status_code(error: Any) -> Optional[int]:
    """First integer HTTP status found on the error, its cause or its response."""
    for carrier in _carriers(error):
        for attr in ("status", "code", "status_code"):
            value = getattr(carrier, attr, None)
            if isinstance(value, int) and not isinstance(value, bool):
                return value
    return None


def _response_text(response: Any) -> str:
    try:
        text = getattr(response, "text", None)
    except Exception:
        # httpx raises ResponseNotRead for unread streaming bodies
        return ""
    return text if isinstance(text, str) else ""


def error_body(error: Any) -> str:
    """
    Best available body text: raw response text, then structured details
    serialized as JSON, then the error's own text.
    """
    response = getattr(error, "response", None)
    if response is not None:
        text = _response_text(response)
        if text:
            return text

    details = getattr(error, "details", None)
    if isinstance(details, (dict, list)):
        try:
            return json.dumps(details)
        except (TypeError, ValueError):
            pass

    return error_text(error)


def _retry_after_header(error: Any) -> Optional[str]:
    headers = getattr(getattr(error, "response", None), "headers", None)
    if headers is None or not hasattr(headers, "get"):
        return None
    return headers.get("retry-after") or headers.get("Retry-After")


# ──────────────────────────────────────────────────────────────
# CLASSIFICATION
# ──────────────────────────────────────────────────────────────


def is_rate_limit_error(error: Any) -> bool:
    if status_code(error) == RATE_LIMIT_STATUS:
        return True
    msg = error_text(error).lower()
    return any(marker in msg for marker in RATE_LIMIT_MARKERS)


def is_invalid_key_error(error: Any) -> bool:
    msg = error_text(error).lower()
    return any(marker in msg for marker in INVALID_KEY_MARKERS)


def extract_retry_delay_seconds(error: Any) -> Optional[float]:
    """Provider-suggested wait in seconds, or None if no timing is present."""
    header = _retry_after_header(error)
    if header:
        try:
            seconds = float(header)
        except (TypeError, ValueError):
            seconds = 0.0
        if seconds > 0 and not math.isinf(seconds):
            return seconds

    body = error_body(error)

    match = _RETRY_DELAY_RE.search(body)
    if match:
        seconds = int(match.group(1))
        if seconds > 0:
            return float(seconds)

    match = _RETRY_IN_RE.search(body)
    if match:
        seconds = float(match.group(1))
        if seconds > 0:
            return float(math.ceil(seconds))

    return None


def classify_error(error: Any) -> Outcome:
    """Map a provider exception onto a per-credential outcome."""
    if is_rate_limit_error(error):
        return RateLimited(wait_seconds=extract_retry_delay_seconds(error))
    if is_invalid_key_error(error):
        return InvalidCredential()
    return Fatal(message=error_text(error) or type(error).__name__)

"""
Resilient multi-credential dispatch for Gemini generation requests.

Example usage:
    from dispatcher import CredentialPool, Dispatcher
    from inference import StubModelBackend

    pool = CredentialPool.from_string("key1,key2")
    result = Dispatcher(pool, StubModelBackend()).dispatch("prompt")
"""

from .pool import CredentialPool, ConfigurationError
from .results import (
    Success,
    RateLimited,
    InvalidCredential,
    Fatal,
    Outcome,
    Ok,
    AllLimited,
    Error,
    DispatchResult,
)
from .errors import (
    classify_error,
    extract_retry_delay_seconds,
    is_invalid_key_error,
    is_rate_limit_error,
)
from .dispatcher import (
    Dispatcher,
    DEFAULT_RETRY_BUFFER_SECONDS,
    DEFAULT_RETRY_FALLBACK_SECONDS,
)

__all__ = [
    "CredentialPool",
    "ConfigurationError",
    "Success",
    "RateLimited",
    "InvalidCredential",
    "Fatal",
    "Outcome",
    "Ok",
    "AllLimited",
    "Error",
    "DispatchResult",
    "classify_error",
    "extract_retry_delay_seconds",
    "is_invalid_key_error",
    "is_rate_limit_error",
    "Dispatcher",
    "DEFAULT_RETRY_BUFFER_SECONDS",
    "DEFAULT_RETRY_FALLBACK_SECONDS",
]

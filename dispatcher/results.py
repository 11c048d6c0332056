"""
Dispatcher value types.

Two families:

  Outcome         one credential attempt     Success | RateLimited | InvalidCredential | Fatal
  DispatchResult  one whole dispatch call    Ok | AllLimited | Error

Only DispatchResult crosses the HTTP boundary. Exactly one variant is
produced per dispatch.
"""

from dataclasses import dataclass
from typing import Optional, Union


# ──────────────────────────────────────────────────────────────
# PER-CREDENTIAL OUTCOMES
# ──────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class Success:
    text: str


@dataclass(frozen=True)
class RateLimited:
    wait_seconds: Optional[float] = None   # None when the provider gave no timing


@dataclass(frozen=True)
class InvalidCredential:
    pass


@dataclass(frozen=True)
class Fatal:
    message: str


Outcome = Union[Success, RateLimited, InvalidCredential, Fatal]


# ──────────────────────────────────────────────────────────────
# DISPATCH RESULTS (WIRE CONTRACT)
# ──────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class Ok:
    text: str


@dataclass(frozen=True)
class AllLimited:
    retry_after_seconds: int

    def __post_init__(self):
        if self.retry_after_seconds < 1:
            raise ValueError("retry_after_seconds must be >= 1")


@dataclass(frozen=True)
class Error:
    message: str
    detail: Optional[str] = None   # server-side only, never serialized to clients


DispatchResult = Union[Ok, AllLimited, Error]

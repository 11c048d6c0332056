"""
Credential pool.

An ordered, immutable set of Gemini API keys. Order is failover precedence.
The pool is built once per process from configuration and injected into the
dispatcher; nothing ever mutates it afterwards, so concurrent requests can
share it without locking.
"""

from dataclasses import dataclass, field
from typing import Iterator, Optional, Tuple


class ConfigurationError(Exception):
    """No usable credentials configured."""
    pass


@dataclass(frozen=True)
class CredentialPool:
    keys: Tuple[str, ...] = field(default=(), repr=False)
    source: str = "GOOGLE_API_KEYS"    # where the keys came from (for messages)

    @classmethod
    def from_string(cls, raw: Optional[str], source: str = "GOOGLE_API_KEYS") -> "CredentialPool":
        """
        Parse a comma-delimited key list.

        Entries are trimmed; blank entries are dropped. ``None`` or an
        all-blank string yields an empty pool.
        """
        keys = tuple(k.strip() for k in (raw or "").strip().split(",") if k.strip())
        return cls(keys=keys, source=source)

    def __iter__(self) -> Iterator[str]:
        return iter(self.keys)

    def __len__(self) -> int:
        return len(self.keys)

    @property
    def is_empty(self) -> bool:
        return not self.keys

    def require(self) -> "CredentialPool":
        """Return self, or raise ConfigurationError if the pool is empty."""
        if self.is_empty:
            raise ConfigurationError(f"No API keys configured on server ({self.source}).")
        return self

    def __repr__(self) -> str:
        return f"CredentialPool(size={len(self.keys)}, source={self.source!r})"

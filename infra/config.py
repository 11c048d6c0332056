"""
Infrastructure configuration system.

Environment-based backend selection with sensible defaults.
Credentials are read once per process and frozen into a CredentialPool.
"""

import os
from typing import Literal
from dataclasses import dataclass

from inference import ModelBackend, StubModelBackend, GeminiModelBackend, DEFAULT_MODEL_NAME
from dispatcher import (
    CredentialPool,
    Dispatcher,
    DEFAULT_RETRY_BUFFER_SECONDS,
    DEFAULT_RETRY_FALLBACK_SECONDS,
)


LLMBackendType = Literal["stub", "gemini"]


@dataclass
class InfraConfig:
    """Infrastructure configuration from environment."""

    # LLM
    llm_backend: LLMBackendType
    gemini_model: str

    # Credentials (raw comma-separated list, never logged)
    google_api_keys: str

    # Rate-limit handling
    retry_fallback_seconds: float
    retry_buffer_seconds: float

    @classmethod
    def from_env(cls) -> "InfraConfig":
        """
        Load configuration from environment variables.

        Defaults:
        - LLM: gemini (gemini-2.5-flash-lite)
        - Fallback wait when a 429 carries no timing: 20s
        - Buffer added to the shortest wait: 2s
        """
        return cls(
            llm_backend=os.getenv("LLM_BACKEND", "gemini"),  # type: ignore
            gemini_model=os.getenv("GEMINI_MODEL", DEFAULT_MODEL_NAME),
            google_api_keys=os.getenv("GOOGLE_API_KEYS", ""),
            retry_fallback_seconds=float(
                os.getenv("RETRY_FALLBACK_SECONDS", str(DEFAULT_RETRY_FALLBACK_SECONDS))
            ),
            retry_buffer_seconds=float(
                os.getenv("RETRY_BUFFER_SECONDS", str(DEFAULT_RETRY_BUFFER_SECONDS))
            ),
        )

    def create_llm_backend(self) -> ModelBackend:
        """Create LLM backend instance based on configuration."""
        if self.llm_backend == "stub":
            return StubModelBackend()
        return GeminiModelBackend(model_name=self.gemini_model)

    def create_credential_pool(self) -> CredentialPool:
        """Parse the configured key list (may be empty)."""
        return CredentialPool.from_string(self.google_api_keys, source="GOOGLE_API_KEYS")

    def create_dispatcher(self) -> Dispatcher:
        """Create the failover dispatcher over the configured pool."""
        return Dispatcher(
            self.create_credential_pool(),
            self.create_llm_backend(),
            fallback_retry_seconds=self.retry_fallback_seconds,
            retry_buffer_seconds=self.retry_buffer_seconds,
        )

    def __repr__(self) -> str:
        return (
            f"InfraConfig(llm_backend={self.llm_backend!r}, gemini_model={self.gemini_model!r}, "
            f"keys={len(self.create_credential_pool())}, "
            f"retry_fallback_seconds={self.retry_fallback_seconds}, "
            f"retry_buffer_seconds={self.retry_buffer_seconds})"
        )


def get_config() -> InfraConfig:
    """Get global infrastructure configuration."""
    return InfraConfig.from_env()

"""
Infrastructure initialization and bootstrap.

Singleton pattern for creating the dispatcher from configuration.
"""

import logging
from typing import Optional

from dispatcher import CredentialPool, Dispatcher
from inference import ModelBackend

from .config import InfraConfig, get_config

logger = logging.getLogger(__name__)


class InfraBootstrap:
    """
    Bootstrap infrastructure based on configuration.

    Singleton pattern - single instance per process. The credential pool is
    loaded exactly once here and never reloaded for the process lifetime.
    """

    _instance: Optional["InfraBootstrap"] = None

    def __init__(self, config: Optional[InfraConfig] = None):
        """Initialize bootstrap with configuration."""
        self.config = config or get_config()
        self.dispatcher = self.config.create_dispatcher()

        if self.dispatcher.pool.is_empty:
            # Fatal for generation; the process stays up so health checks can report it
            logger.critical(
                "No API keys configured (GOOGLE_API_KEYS); every generation request will fail"
            )
        else:
            logger.info(f"Loaded {len(self.dispatcher.pool)} API key(s), backend={self.config.llm_backend}")

    @classmethod
    def get_instance(cls, config: Optional[InfraConfig] = None) -> "InfraBootstrap":
        """
        Get singleton instance.

        Args:
            config: Optional custom configuration (only used first time)

        Returns:
            Singleton InfraBootstrap instance
        """
        if cls._instance is None:
            cls._instance = cls(config)
        return cls._instance

    @classmethod
    def reset(cls):
        """Reset singleton (for testing)."""
        cls._instance = None

    def get_dispatcher(self) -> Dispatcher:
        """Get the failover dispatcher."""
        return self.dispatcher

    def get_llm_backend(self) -> ModelBackend:
        """Get LLM backend."""
        return self.dispatcher.backend

    def get_credential_pool(self) -> CredentialPool:
        """Get the (immutable) credential pool."""
        return self.dispatcher.pool

    def __repr__(self) -> str:
        """String representation showing configured backends."""
        return (
            f"InfraBootstrap(llm={self.config.llm_backend}, "
            f"keys={len(self.dispatcher.pool)})"
        )


def bootstrap_infrastructure(config: Optional[InfraConfig] = None) -> InfraBootstrap:
    """
    Bootstrap all infrastructure backends.

    Args:
        config: Optional custom configuration

    Returns:
        InfraBootstrap instance with the dispatcher initialized
    """
    return InfraBootstrap.get_instance(config)

"""
Infrastructure module exports.

Configuration and bootstrap for the dispatcher and its model backend.
"""

from .config import InfraConfig, get_config, LLMBackendType
from .bootstrap import InfraBootstrap, bootstrap_infrastructure

__all__ = [
    "InfraConfig",
    "get_config",
    "LLMBackendType",
    "InfraBootstrap",
    "bootstrap_infrastructure",
]

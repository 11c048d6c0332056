"""
Configuration management for the Integration Finder.

Loads environment variables from .env file and provides typed access to configuration.
"""

import logging
import os
from pathlib import Path
from dotenv import load_dotenv

# Load environment variables from .env file
env_path = Path(__file__).parent / ".env"
load_dotenv(env_path)

logger = logging.getLogger(__name__)


class Config:
    """Configuration class for the Integration Finder."""

    # Gemini credentials: comma-separated, failover order (e.g. key1,key2,key3)
    GOOGLE_API_KEYS = os.getenv("GOOGLE_API_KEYS", "")

    # LLM Backend Configuration
    LLM_BACKEND = os.getenv("LLM_BACKEND", "gemini")
    GEMINI_MODEL = os.getenv("GEMINI_MODEL", "gemini-2.5-flash-lite")

    # API Configuration
    AGENT_PORT = int(os.getenv("AGENT_PORT", "8000"))
    INTEGRATIONS_API_URL = os.getenv("INTEGRATIONS_API_URL", "http://localhost:8000/api/gemini")

    # Environment
    ENVIRONMENT = os.getenv("ENVIRONMENT", "development")
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    @classmethod
    def validate(cls) -> bool:
        """Validate that required configuration is set."""
        required = ["GOOGLE_API_KEYS"]
        missing = [key for key in required if not str(getattr(cls, key)).strip(" ,")]

        if missing:
            logger.error(f"Missing required environment variables: {', '.join(missing)}")
            logger.error("Please set them in .env file")
            return False

        return True

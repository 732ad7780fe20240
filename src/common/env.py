"""Environment configuration interface for the validation pipeline.

All environment variable access goes through this module. Values are read on
every call so tests can change them with monkeypatch.
"""

import os
from pathlib import Path

from dotenv import load_dotenv

from common.constants import (
    DEFAULT_BATCH_DELAY,
    DEFAULT_CACHE_MAX_SIZE,
    DEFAULT_CACHE_TTL,
    DEFAULT_DEBOUNCE_DELAY,
    DEFAULT_HTTP_TIMEOUT,
)

# Load environment variables from .env file if it exists
load_dotenv()


def _optional(name: str) -> str | None:
    value = os.getenv(name, "").strip()
    return value or None


class Environment:
    """Interface for accessing environment configuration."""

    @staticmethod
    def validation_api_url() -> str | None:
        """Get the base URL of the remote validation worker.

        Returns:
            Base URL (e.g. 'https://blog.example.com/api'), or None to
            validate locally with the built-in rule engine
        """
        return _optional("VALIDATION_API_URL")

    @staticmethod
    def ai_suggestions_url() -> str | None:
        """Get the base URL of the AI suggestion service.

        Returns:
            Base URL, or None when AI suggestions are disabled
        """
        return _optional("AI_SUGGESTIONS_URL")

    @staticmethod
    def ai_api_key() -> str | None:
        """Get the bearer token sent to the AI suggestion service."""
        return _optional("AI_API_KEY")

    @staticmethod
    def batch_delay() -> float:
        """Get the batch flush window in seconds.

        Returns:
            Flush delay, defaults to 0.1
        """
        return float(os.getenv("VALIDATION_BATCH_DELAY", str(DEFAULT_BATCH_DELAY)))

    @staticmethod
    def cache_ttl() -> float:
        """Get the validation cache TTL in seconds.

        Returns:
            TTL, defaults to 300 (five minutes)
        """
        return float(os.getenv("VALIDATION_CACHE_TTL", str(DEFAULT_CACHE_TTL)))

    @staticmethod
    def cache_max_size() -> int:
        """Get the maximum number of cached validation results.

        Returns:
            Maximum entry count, defaults to 100
        """
        return int(os.getenv("VALIDATION_CACHE_MAX_SIZE", str(DEFAULT_CACHE_MAX_SIZE)))

    @staticmethod
    def debounce_delay() -> float:
        """Get the editor debounce delay in seconds.

        Returns:
            Delay, defaults to 1.0
        """
        return float(os.getenv("VALIDATION_DEBOUNCE_DELAY", str(DEFAULT_DEBOUNCE_DELAY)))

    @staticmethod
    def http_timeout() -> float:
        """Get the timeout for outbound HTTP requests in seconds."""
        return float(os.getenv("VALIDATION_HTTP_TIMEOUT", str(DEFAULT_HTTP_TIMEOUT)))

    @staticmethod
    def custom_rules_path() -> Path:
        """Get the path of the custom rules JSON file.

        Returns:
            Path, defaults to ./data/custom_rules.json
        """
        return Path(os.getenv("CUSTOM_RULES_PATH", "./data/custom_rules.json"))


# Singleton instance for convenient access
env = Environment()

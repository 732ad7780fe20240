"""Shared constants for the validation pipeline.

For environment-based configuration (service URLs, cache sizes, etc.), use the
env module:
    from common.env import env
    ttl = env.cache_ttl()
"""

from pathlib import Path

# Data directories
DATA_DIR = Path("./data")

# Pipeline defaults (seconds unless noted)
DEFAULT_BATCH_DELAY = 0.1
DEFAULT_CACHE_TTL = 300.0
DEFAULT_CACHE_MAX_SIZE = 100
DEFAULT_DEBOUNCE_DELAY = 1.0
DEFAULT_HTTP_TIMEOUT = 10.0

# Remote worker splits documents into chunks of at most this many characters
MAX_CHUNK_CHARS = 1000

# Retry policy for full-document validation
MAX_VALIDATION_RETRIES = 3
RETRY_BASE_DELAY = 1.0

# Lines of context sent around an issue when asking for AI suggestions
SUGGESTION_CONTEXT_LINES = 3

# Cache key prefix shared by every validation result
VALIDATION_CACHE_PREFIX = "validation:"

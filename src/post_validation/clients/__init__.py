"""HTTP clients for the remote validation and AI suggestion services."""

from .suggestions import SuggestionClient
from .validation_api import ValidationApiClient

__all__ = ["SuggestionClient", "ValidationApiClient"]

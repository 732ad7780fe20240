"""Shared session handling for the remote services."""

from typing import Any

import requests

from common.env import env
from common.logger import get_logger

from ..errors import APIError

logger = get_logger(__name__)


class ServiceClient:
    """Base class for JSON-over-HTTP service clients.

    Subclasses set ``error_class`` to the exception raised on failure.
    """

    error_class: type[APIError] = APIError

    def __init__(self, base_url: str, api_key: str | None = None, timeout: float | None = None):
        """Initialize the client.

        Args:
            base_url: Service base URL, e.g. 'https://blog.example.com/api'
            api_key: Optional bearer token
            timeout: Request timeout in seconds (default: VALIDATION_HTTP_TIMEOUT)
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout if timeout is not None else env.http_timeout()
        self.session = requests.Session()
        self.session.headers.update({"Content-Type": "application/json"})
        if api_key:
            self.session.headers.update({"Authorization": f"Bearer {api_key}"})

    def post_json(self, path: str, payload: dict[str, Any]) -> Any:
        """POST a JSON payload and decode the JSON response.

        Raises:
            APIError (or error_class): If the request fails or times out
        """
        url = f"{self.base_url}{path}"
        try:
            response = self.session.post(url, json=payload, timeout=self.timeout)
            response.raise_for_status()
            return response.json()
        except requests.exceptions.Timeout as e:
            raise self.error_class(f"Request to {url} timed out") from e
        except requests.exceptions.RequestException as e:
            raise self.error_class(f"Request to {url} failed: {e}") from e
        except ValueError as e:
            raise self.error_class(f"Invalid JSON from {url}") from e

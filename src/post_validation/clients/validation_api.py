"""Client for the batched validation endpoint."""

from common.logger import get_logger

from ..errors import APIError
from ..models import Issue, ValidationRequest
from .base import ServiceClient

logger = get_logger(__name__)


class ValidationApiClient(ServiceClient):
    """Client for ``POST /validation/batch``.

    The endpoint takes ``{"requests": [{"content", "type"}, ...]}`` and returns
    one issue list per request, in the same order.
    """

    BATCH_PATH = "/validation/batch"

    def validate_batch(self, requests: list[ValidationRequest]) -> list[list[Issue]]:
        """Validate a batch of requests in one call.

        Args:
            requests: Requests to validate

        Returns:
            One issue list per request, same order

        Raises:
            APIError: If the request fails or the response shape is wrong
        """
        logger.debug(f"Sending validation batch of {len(requests)} request(s)")
        data = self.post_json(self.BATCH_PATH, {"requests": [r.to_dict() for r in requests]})

        if not isinstance(data, list) or len(data) != len(requests):
            raise APIError(
                f"Expected {len(requests)} results from validation service, "
                f"got {len(data) if isinstance(data, list) else type(data).__name__}"
            )

        return [[Issue.from_dict(item) for item in result or []] for result in data]

"""Downstream workers that validate a whole batch of requests."""

import asyncio
from abc import ABC, abstractmethod

from common.constants import MAX_CHUNK_CHARS
from common.logger import get_logger

from .clients.validation_api import ValidationApiClient
from .matcher import RuleMatcher
from .merge import chunk_content, combine_results
from .models import Issue, ValidationRequest
from .rules.rule_set import RuleSet

logger = get_logger(__name__)


class ValidationWorker(ABC):
    """Validates a batch; results come back in request order.

    A failure fails the whole batch.
    """

    @abstractmethod
    async def validate_batch(self, requests: list[ValidationRequest]) -> list[list[Issue]]:
        """Validate every request in the batch.

        Args:
            requests: Batched requests

        Returns:
            One issue list per request, same length and order
        """
        pass


class LocalValidationWorker(ValidationWorker):
    """Validates with the built-in rule engine."""

    def __init__(self, rule_set: RuleSet, matcher: RuleMatcher | None = None):
        self.rule_set = rule_set
        self.matcher = matcher or RuleMatcher()

    async def validate_batch(self, requests: list[ValidationRequest]) -> list[list[Issue]]:
        results = []
        for request in requests:
            rules = self.rule_set.get_rules(request.type)
            results.append(await self.matcher.apply_rules(request.content, rules))
        return results


class RemoteValidationWorker(ValidationWorker):
    """Validates through the remote batch endpoint.

    Long documents are split into chunks sent in the same batch; each
    request's chunk results are merged back and de-duplicated.
    """

    def __init__(self, client: ValidationApiClient, max_chunk_chars: int = MAX_CHUNK_CHARS):
        self.client = client
        self.max_chunk_chars = max_chunk_chars

    async def validate_batch(self, requests: list[ValidationRequest]) -> list[list[Issue]]:
        chunked: list[ValidationRequest] = []
        layout: list[tuple[int, list[int]]] = []  # (first chunk index, line offsets)

        for request in requests:
            chunks = chunk_content(request.content, self.max_chunk_chars)
            layout.append((len(chunked), [offset for _, offset in chunks]))
            chunked.extend(ValidationRequest(content=chunk, type=request.type) for chunk, _ in chunks)

        if len(chunked) > len(requests):
            logger.debug(f"Split {len(requests)} request(s) into {len(chunked)} chunk(s)")

        # requests is blocking; keep the event loop free
        chunk_results = await asyncio.to_thread(self.client.validate_batch, chunked)

        return [
            combine_results(chunk_results[first : first + len(offsets)], offsets)
            for first, offsets in layout
        ]

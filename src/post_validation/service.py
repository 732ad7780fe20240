"""Validation entry point used by the editor and the CLI."""

import asyncio
import hashlib
import re
import time
from collections.abc import Sequence

from common.constants import MAX_VALIDATION_RETRIES, RETRY_BASE_DELAY, VALIDATION_CACHE_PREFIX
from common.env import env
from common.logger import get_logger

from .batcher import RequestBatcher
from .cache import ResultCache
from .clients.suggestions import SuggestionClient
from .clients.validation_api import ValidationApiClient
from .errors import OfflineError, classify_error
from .matcher import RuleMatcher
from .metrics import PerformanceTracker
from .models import ErrorState, Issue, RuleCategory, ValidationPass, ValidationRequest
from .passes import build_passes
from .rules.rule_set import RuleSet
from .suggestions import RemoteSuggestionProvider
from .workers import LocalValidationWorker, RemoteValidationWorker, ValidationWorker

logger = get_logger(__name__)

# Categories validated by the editor on every change
STANDARD_CATEGORIES: tuple[str, ...] = tuple(
    c.value for c in RuleCategory if c != RuleCategory.CUSTOM
)

# Categories warmed up when a post is opened
COMMON_CATEGORIES: tuple[str, ...] = (
    RuleCategory.TECHNICAL_ACCURACY.value,
    RuleCategory.CONTENT_STRUCTURE.value,
    RuleCategory.READABILITY.value,
)


class ValidationService:
    """Cached, batched validate(content, category) calls.

    Each call first checks the result cache; misses go through the request
    batcher, which sends everything queued within one window to the worker in a
    single call.
    """

    def __init__(
        self,
        worker: ValidationWorker,
        cache: ResultCache | None = None,
        batch_delay: float | None = None,
        cache_ttl: float | None = None,
        tracker: PerformanceTracker | None = None,
        rule_set: RuleSet | None = None,
    ):
        """Initialize the service.

        Args:
            worker: Downstream worker validating batches
            cache: Result cache (default: sized from the environment)
            batch_delay: Batch flush window in seconds (default: from environment)
            cache_ttl: Lifetime of cached results in seconds (default: from environment)
            tracker: Performance metrics sink
            rule_set: Rule set whose custom rule changes invalidate cached
                custom results
        """
        self.worker = worker
        self.cache_ttl = env.cache_ttl() if cache_ttl is None else cache_ttl
        self.cache = cache or ResultCache(max_size=env.cache_max_size(), default_ttl=self.cache_ttl)
        self.batcher: RequestBatcher[ValidationRequest, list[Issue]] = RequestBatcher(
            worker.validate_batch,
            delay=env.batch_delay() if batch_delay is None else batch_delay,
        )
        self.tracker = tracker or PerformanceTracker()
        self.rule_set = rule_set
        self._rule_revision = rule_set.revision if rule_set is not None else 0
        self.online = True
        self.offline_queue: list[str] = []

    @classmethod
    def from_env(cls, rule_set: RuleSet) -> "ValidationService":
        """Build a service wired to the services configured in the environment.

        Uses the remote validation worker when VALIDATION_API_URL is set and the
        local rule engine otherwise. AI suggestions are enabled for local
        validation when AI_SUGGESTIONS_URL is set.
        """
        api_url = env.validation_api_url()
        if api_url:
            logger.debug(f"Validating through {api_url}")
            return cls(RemoteValidationWorker(ValidationApiClient(api_url)), rule_set=rule_set)

        ai_url = env.ai_suggestions_url()
        ai_provider = (
            RemoteSuggestionProvider(SuggestionClient(ai_url, api_key=env.ai_api_key()))
            if ai_url
            else None
        )
        return cls(
            LocalValidationWorker(rule_set, RuleMatcher(ai_provider=ai_provider)), rule_set=rule_set
        )

    @staticmethod
    def cache_key(content: str, category: str) -> str:
        """Cache key for a category and a fingerprint of the content."""
        digest = hashlib.sha256(content.encode("utf-8")).hexdigest()
        return f"{VALIDATION_CACHE_PREFIX}{category}:{digest}"

    async def validate_content(self, content: str, category: str) -> list[Issue]:
        """Validate content against one category.

        Args:
            content: Document text
            category: Rule category name

        Returns:
            Issues found (cached for the configured TTL)

        Raises:
            OfflineError: If the service is offline; content is queued instead
            BatchDispatchFailure: If the downstream batch fails
        """
        if not self.online:
            self._queue_offline(content)
            raise OfflineError("Cannot validate while offline")

        if category == RuleCategory.CUSTOM.value:
            self._drop_outdated_custom_results()

        async def fetch() -> list[Issue]:
            return await self.tracker.measure_async(
                "validation",
                lambda: self.batcher.submit(ValidationRequest(content=content, type=category)),
            )

        issues = await self.cache.get(self.cache_key(content, category), fetch, self.cache_ttl)
        return list(issues)

    def get_validation_passes(self, include_custom: bool = True) -> list[ValidationPass]:
        """One pass per category, all validating through this service."""
        return build_passes(self.validate_content, include_custom=include_custom)

    async def preload_common_validations(self, content: str) -> None:
        """Warm the cache for the categories checked most often.

        Failures are logged; the next real validation will retry them.
        """
        results = await asyncio.gather(
            *(self.validate_content(content, category) for category in COMMON_CATEGORIES),
            return_exceptions=True,
        )
        for category, result in zip(COMMON_CATEGORIES, results):
            if isinstance(result, BaseException):
                logger.warning(f"Preloading {category} validation failed: {result}")

    async def validate_all(
        self,
        content: str,
        categories: Sequence[str] = STANDARD_CATEGORIES,
        max_retries: int = MAX_VALIDATION_RETRIES,
        retry_delay: float = RETRY_BASE_DELAY,
    ) -> tuple[list[Issue], ErrorState | None]:
        """Validate all categories concurrently, retrying with exponential backoff.

        Args:
            content: Document text
            categories: Categories to validate
            max_retries: Retries after the first failure (none while offline)
            retry_delay: Delay before the first retry; doubled on each retry

        Returns:
            Tuple of (issues, error state). On failure issues is empty and the
            error state describes what went wrong.
        """
        attempt = 0
        while True:
            start = time.perf_counter()
            try:
                results = await asyncio.gather(
                    *(self.validate_content(content, category) for category in categories)
                )
            except Exception as e:
                state = classify_error(e, online=self.online)
                if not self.online or attempt >= max_retries:
                    logger.error(f"Validation failed: {e}")
                    return [], state

                delay = retry_delay * 2**attempt
                attempt += 1
                logger.warning(f"Validation failed ({e}); retry {attempt} in {delay:.1f}s")
                await asyncio.sleep(delay)
                continue

            self.tracker.track_metric("validation_total", (time.perf_counter() - start) * 1000)
            return [issue for result in results for issue in result], None

    def set_online(self, online: bool) -> list[str]:
        """Record connectivity changes.

        Returns:
            Content queued while offline, to be revalidated now that the
            network is back (empty unless coming back online)
        """
        self.online = online
        if not online or not self.offline_queue:
            return []

        queued, self.offline_queue = self.offline_queue, []
        logger.info(f"Back online; {len(queued)} change(s) queued for validation")
        return queued

    def clear_cache(self) -> int:
        """Drop every cached validation result.

        Returns:
            Number of entries removed
        """
        return self.cache.invalidate_pattern(f"^{re.escape(VALIDATION_CACHE_PREFIX)}")

    async def close(self) -> None:
        """Flush queued requests and wait for in-flight batches."""
        await self.batcher.flush()

    def _drop_outdated_custom_results(self) -> None:
        if self.rule_set is None or self.rule_set.revision == self._rule_revision:
            return
        self._rule_revision = self.rule_set.revision
        removed = self.cache.invalidate_pattern(
            f"^{re.escape(VALIDATION_CACHE_PREFIX)}{RuleCategory.CUSTOM.value}:"
        )
        logger.debug(f"Custom rules changed; dropped {removed} cached result(s)")

    def _queue_offline(self, content: str) -> None:
        if content not in self.offline_queue:
            self.offline_queue.append(content)

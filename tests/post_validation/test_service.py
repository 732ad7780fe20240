"""Tests for the cached, batched validation service."""

import asyncio

import pytest

from post_validation.errors import BatchDispatchFailure, OfflineError
from post_validation.models import Issue, Rule, Severity
from post_validation.orchestrator import MultiPassOrchestrator
from post_validation.notifications import Notifier
from post_validation.rules import RuleSet
from post_validation.service import COMMON_CATEGORIES, ValidationService
from post_validation.workers import LocalValidationWorker, RemoteValidationWorker, ValidationWorker


class FakeWorker(ValidationWorker):
    """Worker returning one issue per request and recording batches."""

    def __init__(self, failures=0, error=None):
        self.batches = []
        self.failures = failures
        self.error = error or ConnectionError("validation service unreachable")

    async def validate_batch(self, requests):
        self.batches.append([(r.type, r.content) for r in requests])
        if self.failures:
            self.failures -= 1
            raise self.error
        return [
            [Issue(type=r.type, message=f"{r.type} issue", severity=Severity.LOW)]
            for r in requests
        ]


def make_service(worker, **kwargs):
    kwargs.setdefault("batch_delay", 0.01)
    kwargs.setdefault("cache_ttl", 60)
    return ValidationService(worker, **kwargs)


@pytest.mark.asyncio
async def test_validate_content_goes_through_worker():
    """Test a single call reaches the worker and returns its issues."""
    worker = FakeWorker()
    service = make_service(worker)

    issues = await service.validate_content("var x = 1;", "technical_accuracy")

    assert [i.message for i in issues] == ["technical_accuracy issue"]
    assert worker.batches == [[("technical_accuracy", "var x = 1;")]]


@pytest.mark.asyncio
async def test_repeated_content_is_served_from_cache():
    """Test unchanged content is not re-requested within the TTL."""
    worker = FakeWorker()
    service = make_service(worker)

    await service.validate_content("post", "readability")
    await service.validate_content("post", "readability")
    await service.validate_content("edited post", "readability")

    assert len(worker.batches) == 2


@pytest.mark.asyncio
async def test_concurrent_categories_are_batched():
    """Test categories validated together share one downstream call."""
    worker = FakeWorker()
    service = make_service(worker)

    await asyncio.gather(
        *(service.validate_content("post", c) for c in ["readability", "content_structure"])
    )

    assert worker.batches == [[("readability", "post"), ("content_structure", "post")]]


@pytest.mark.asyncio
async def test_batch_failure_is_not_cached():
    """Test a failed batch propagates and the next call retries."""
    worker = FakeWorker(failures=1)
    service = make_service(worker)

    with pytest.raises(BatchDispatchFailure):
        await service.validate_content("post", "readability")

    issues = await service.validate_content("post", "readability")
    assert len(issues) == 1
    assert len(worker.batches) == 2


@pytest.mark.asyncio
async def test_cache_keys_use_prefix_and_fingerprint():
    """Test cache keys are namespaced and do not embed raw content."""
    key = ValidationService.cache_key("secret draft", "readability")

    assert key.startswith("validation:readability:")
    assert "secret draft" not in key
    assert key != ValidationService.cache_key("secret draft", "content_structure")


@pytest.mark.asyncio
async def test_clear_cache_forces_revalidation():
    """Test clear_cache drops validation entries only."""
    worker = FakeWorker()
    service = make_service(worker)
    service.cache.set("docs:intro", "kept")

    await service.validate_content("post", "readability")
    removed = service.clear_cache()
    await service.validate_content("post", "readability")

    assert removed == 1
    assert "docs:intro" in service.cache
    assert len(worker.batches) == 2


@pytest.mark.asyncio
async def test_custom_rule_changes_refresh_custom_results():
    """Test edited custom rules apply at once instead of after the cache TTL."""
    rule_set = RuleSet()
    service = make_service(LocalValidationWorker(rule_set), rule_set=rule_set)
    content = "TODO: write the intro. It is really simple."

    assert await service.validate_content(content, "custom") == []
    await service.validate_content(content, "readability")

    rule_set.add_rule(
        Rule(pattern=r"\bTODO\b", message="Unfinished section", severity=Severity.HIGH, type="content_structure")
    )
    issues = await service.validate_content(content, "custom")
    assert [i.message for i in issues] == ["Unfinished section"]
    assert ValidationService.cache_key(content, "readability") in service.cache

    rule_set.delete_rule(0)
    assert await service.validate_content(content, "custom") == []


@pytest.mark.asyncio
async def test_preload_warms_common_categories():
    """Test preloading fills the cache for the common categories in one batch."""
    worker = FakeWorker()
    service = make_service(worker)

    await service.preload_common_validations("post")

    assert [t for t, _ in worker.batches[0]] == list(COMMON_CATEGORIES)
    for category in COMMON_CATEGORIES:
        assert ValidationService.cache_key("post", category) in service.cache


@pytest.mark.asyncio
async def test_preload_failure_is_logged(caplog):
    """Test preload swallows failures after logging them."""
    service = make_service(FakeWorker(failures=1))

    await service.preload_common_validations("post")

    assert "Preloading" in caplog.text


@pytest.mark.asyncio
async def test_offline_requests_are_queued():
    """Test offline validation raises and keeps the content for later."""
    worker = FakeWorker()
    service = make_service(worker)
    service.set_online(False)

    with pytest.raises(OfflineError):
        await service.validate_content("draft 1", "readability")
    with pytest.raises(OfflineError):
        await service.validate_content("draft 1", "content_structure")

    assert service.offline_queue == ["draft 1"]
    assert worker.batches == []
    assert service.set_online(True) == ["draft 1"]
    assert service.offline_queue == []
    assert service.set_online(True) == []


@pytest.mark.asyncio
async def test_validate_all_collects_every_category():
    """Test validate_all returns issues for all categories and no error."""
    worker = FakeWorker()
    service = make_service(worker)

    issues, error = await service.validate_all("post", categories=["readability", "content_structure"])

    assert error is None
    assert [i.type for i in issues] == ["readability", "content_structure"]
    assert service.tracker.get_metrics("validation_total")


@pytest.mark.asyncio
async def test_validate_all_retries_with_backoff():
    """Test transient failures are retried."""
    worker = FakeWorker(failures=2)
    service = make_service(worker)

    issues, error = await service.validate_all("post", categories=["readability"], retry_delay=0.001)

    assert error is None
    assert len(issues) == 1
    assert len(worker.batches) == 3


@pytest.mark.asyncio
async def test_validate_all_gives_up_with_error_state():
    """Test exhausting retries yields a network error state."""
    worker = FakeWorker(failures=10)
    service = make_service(worker)

    issues, error = await service.validate_all(
        "post", categories=["readability"], max_retries=2, retry_delay=0.001
    )

    assert issues == []
    assert error.type == "network"
    assert len(worker.batches) == 3


@pytest.mark.asyncio
async def test_validate_all_offline_does_not_retry():
    """Test offline validation returns the offline state at once."""
    service = make_service(FakeWorker())
    service.set_online(False)

    issues, error = await service.validate_all("post")

    assert issues == []
    assert error.type == "offline"
    assert service.offline_queue == ["post"]


@pytest.mark.asyncio
async def test_passes_drive_orchestrator_end_to_end():
    """Test the standard passes run through the local rule engine."""
    service = make_service(LocalValidationWorker(RuleSet()))
    orchestrator = MultiPassOrchestrator(
        service.get_validation_passes(), delay=0, notifier=Notifier(echo=False)
    )

    state = await orchestrator.run("This code uses var x = 1; it is really simple.")

    by_source = {(i.source, i.message) for i in state.issues}
    assert ("Technical Accuracy", "Avoid using var declarations") in by_source
    assert ("Readability", "Consider using more specific language") in by_source
    assert state.progress == 100
    await service.close()


def test_from_env_builds_local_worker(monkeypatch):
    """Test the local rule engine is used without a validation URL."""
    monkeypatch.delenv("VALIDATION_API_URL", raising=False)
    monkeypatch.setenv("AI_SUGGESTIONS_URL", "https://ai.example.com")

    service = ValidationService.from_env(RuleSet())

    assert isinstance(service.worker, LocalValidationWorker)
    assert service.worker.matcher.ai_provider is not service.worker.matcher.local_provider


def test_from_env_builds_remote_worker(monkeypatch):
    """Test a configured validation URL selects the remote worker."""
    monkeypatch.setenv("VALIDATION_API_URL", "https://blog.example.com/api")
    monkeypatch.setenv("VALIDATION_BATCH_DELAY", "0.5")

    service = ValidationService.from_env(RuleSet())

    assert isinstance(service.worker, RemoteValidationWorker)
    assert service.worker.client.base_url == "https://blog.example.com/api"
    assert service.batcher.delay == 0.5

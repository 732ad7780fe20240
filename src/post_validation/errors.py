"""Exceptions raised by the validation pipeline and their user-facing form."""

import requests

from .models import ErrorState


class ValidationPipelineError(Exception):
    """Base exception for validation pipeline errors."""

    pass


class RuleDefinitionError(ValidationPipelineError):
    """A rule is missing a required field."""

    pass


class RulePatternError(RuleDefinitionError):
    """A rule's pattern is not a valid regular expression."""

    def __init__(self, pattern: str, reason: str):
        super().__init__(f"Invalid regular expression pattern {pattern!r}: {reason}")
        self.pattern = pattern
        self.reason = reason


class PassFailure(ValidationPipelineError):
    """A validation pass raised while running."""

    def __init__(self, pass_name: str, cause: BaseException):
        super().__init__(f"Validation failed in {pass_name} pass: {cause}")
        self.pass_name = pass_name
        self.cause = cause


class BatchDispatchFailure(ValidationPipelineError):
    """The downstream batched call failed; every request in the batch is rejected."""

    def __init__(self, message: str, batch_size: int):
        super().__init__(message)
        self.batch_size = batch_size


class OfflineError(ValidationPipelineError):
    """Validation was requested while the network is unavailable."""

    pass


class APIError(ValidationPipelineError):
    """Request to the remote validation service failed."""

    pass


class SuggestionError(APIError):
    """AI suggestion request failed."""

    pass


_OFFLINE_STATE = ErrorState(
    type="offline",
    message="Unable to validate content while offline",
    action="Changes will be validated when you're back online.",
)
_NETWORK_STATE = ErrorState(
    type="network",
    message="Network error occurred while validating",
    action="Check your internet connection and try again.",
)
_AI_STATE = ErrorState(
    type="ai",
    message="AI service is temporarily unavailable",
    action="Basic validation will continue to work. Please try AI features again later.",
)
_VALIDATION_STATE = ErrorState(
    type="validation",
    message="Failed to validate content",
    action="Please try again or contact support if the issue persists.",
)


def _root_cause(exc: BaseException) -> BaseException:
    seen = {id(exc)}
    while exc.__cause__ is not None and id(exc.__cause__) not in seen:
        exc = exc.__cause__
        seen.add(id(exc))
    return exc


def classify_error(exc: BaseException, online: bool = True) -> ErrorState:
    """Turn an exception into the structured state shown to the editor.

    Args:
        exc: The exception raised while validating
        online: Whether the network was reported available

    Returns:
        ErrorState describing the failure and what the user can do
    """
    if not online or isinstance(exc, OfflineError):
        return _OFFLINE_STATE

    root = _root_cause(exc)
    if isinstance(exc, SuggestionError) or isinstance(root, SuggestionError):
        return _AI_STATE
    if isinstance(root, (ConnectionError, TimeoutError, requests.exceptions.ConnectionError)):
        return _NETWORK_STATE
    if isinstance(root, requests.exceptions.Timeout):
        return _NETWORK_STATE
    return _VALIDATION_STATE

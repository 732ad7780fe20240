"""Suggestion providers attached to rules.

A rule's ``ai_enabled`` flag picks the provider: local rules keep only their
static suggestion, AI rules ask the remote suggestion service for alternatives.
"""

import asyncio
from abc import ABC, abstractmethod

from common.constants import SUGGESTION_CONTEXT_LINES
from common.logger import get_logger

from .clients.suggestions import SuggestionClient
from .models import Issue, Rule

logger = get_logger(__name__)


def surrounding_content(content: str, line: int, radius: int = SUGGESTION_CONTEXT_LINES) -> str:
    """Get the lines around a 1-based line number.

    Example:
        >>> surrounding_content("a\\nb\\nc\\nd\\ne\\nf\\ng\\nh", 5, radius=1)
        'd\\ne\\nf'
    """
    lines = content.split("\n")
    start = max(0, line - 1 - radius)
    return "\n".join(lines[start : line + radius])


class SuggestionProvider(ABC):
    """Produces alternative suggestions for an issue."""

    @abstractmethod
    async def suggest(self, content: str, issue: Issue, rule: Rule) -> list[str] | None:
        """Get suggestions for an issue.

        Args:
            content: Full document text
            issue: The issue produced by the rule
            rule: The rule that matched

        Returns:
            Suggestions, or None if this provider does not produce any

        Raises:
            SuggestionError: If the provider fails
        """
        pass


class LocalSuggestionProvider(SuggestionProvider):
    """Provider for pattern-only rules; the rule's own suggestion is enough."""

    async def suggest(self, content: str, issue: Issue, rule: Rule) -> list[str] | None:
        return None


class RemoteSuggestionProvider(SuggestionProvider):
    """Asks the AI suggestion service for alternatives."""

    def __init__(self, client: SuggestionClient):
        self.client = client

    async def suggest(self, content: str, issue: Issue, rule: Rule) -> list[str] | None:
        line = issue.location.line if issue.location else 1
        context = {
            "surroundingContent": surrounding_content(content, line),
            "ruleType": rule.type,
        }
        if rule.language:
            context["language"] = rule.language

        logger.debug(f"Requesting AI suggestions for '{issue.message}' on line {line}")
        # requests is blocking; keep the event loop free
        return await asyncio.to_thread(self.client.get_suggestions, content, issue, context)

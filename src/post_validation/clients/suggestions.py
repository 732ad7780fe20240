"""Client for the AI suggestion endpoint."""

from typing import Any

from ..errors import SuggestionError
from ..models import Issue
from .base import ServiceClient


class SuggestionClient(ServiceClient):
    """Client for ``POST /ai-suggestions``."""

    SUGGESTIONS_PATH = "/ai-suggestions"
    error_class = SuggestionError

    def get_suggestions(self, content: str, issue: Issue, context: dict[str, Any]) -> list[str]:
        """Ask the AI service for alternatives to the flagged text.

        Args:
            content: Full document text
            issue: The issue to get suggestions for
            context: Surrounding content, rule type and language

        Returns:
            Suggestion texts; structured suggestions are reduced to their text

        Raises:
            SuggestionError: If the request fails
        """
        payload = {
            "content": content,
            "issue": {
                "type": issue.type,
                "message": issue.message,
                "severity": issue.severity.value,
                "location": issue.location.to_dict() if issue.location else None,
            },
            "context": context,
        }
        data = self.post_json(self.SUGGESTIONS_PATH, payload)

        suggestions = data.get("suggestions", []) if isinstance(data, dict) else []
        texts = []
        for suggestion in suggestions:
            if isinstance(suggestion, dict):
                text = suggestion.get("text")
                if text:
                    texts.append(text)
            elif suggestion:
                texts.append(str(suggestion))
        return texts

"""Application of a single rule to document text."""

import re
from collections.abc import Iterator, Sequence

from common.logger import get_logger

from .code_blocks import extract_code_blocks
from .errors import RulePatternError
from .models import Issue, Rule, ValidationLocation
from .rules.rule_set import compile_pattern
from .suggestions import LocalSuggestionProvider, SuggestionProvider

logger = get_logger(__name__)


def _scan(regex: re.Pattern[str], text: str, first_line: int = 1) -> Iterator[ValidationLocation]:
    for match in regex.finditer(text):
        start, end = match.span()
        if start == end:
            # Zero-width matches have nothing to highlight
            continue
        line_start = text.rfind("\n", 0, start) + 1
        yield ValidationLocation(
            line=first_line + text.count("\n", 0, start),
            column=start - line_start + 1,
            length=end - start,
        )


def find_matches(
    regex: re.Pattern[str], content: str, language: str | None = None
) -> list[ValidationLocation]:
    """Locate every non-empty match of a compiled pattern.

    Args:
        regex: Compiled rule pattern
        content: Full document text
        language: If set, only scan fenced code blocks tagged with this language

    Returns:
        Locations in document order, lines relative to the whole document
    """
    if not language:
        return list(_scan(regex, content))

    wanted = language.lower()
    locations = []
    for block in extract_code_blocks(content):
        if block.language.lower() != wanted:
            continue
        # Block text starts on the line after the opening fence
        locations.extend(_scan(regex, block.code, first_line=block.start_line + 1))
    return locations


class RuleMatcher:
    """Applies rules to content and builds located issues."""

    def __init__(
        self,
        ai_provider: SuggestionProvider | None = None,
        local_provider: SuggestionProvider | None = None,
    ):
        """Initialize the matcher.

        Args:
            ai_provider: Provider used for rules with ai_enabled (default: local)
            local_provider: Provider used for every other rule
        """
        self.local_provider = local_provider or LocalSuggestionProvider()
        self.ai_provider = ai_provider or self.local_provider

    def provider_for(self, rule: Rule) -> SuggestionProvider:
        return self.ai_provider if rule.ai_enabled else self.local_provider

    async def apply_rule(self, content: str, rule: Rule) -> list[Issue]:
        """Apply one rule to a document.

        A rule whose pattern does not compile is logged and skipped. A failing
        suggestion provider leaves the issue with an empty suggestion list.

        Args:
            content: Full document text
            rule: Rule to apply

        Returns:
            One issue per match, in document order
        """
        try:
            regex = compile_pattern(rule.pattern)
        except RulePatternError as e:
            logger.error(f"Skipping rule '{rule.message}': {e}")
            return []

        issues = [
            Issue(
                type=rule.type,
                message=rule.message,
                severity=rule.severity,
                suggestion=rule.suggestion,
                location=location,
                quick_fix=rule.quick_fix,
            )
            for location in find_matches(regex, content, rule.language)
        ]

        provider = self.provider_for(rule)
        for issue in issues:
            issue.ai_suggestions = await self._suggest(provider, content, issue, rule)

        return issues

    async def apply_rules(self, content: str, rules: Sequence[Rule]) -> list[Issue]:
        """Apply rules in order and concatenate their issues."""
        issues: list[Issue] = []
        for rule in rules:
            issues.extend(await self.apply_rule(content, rule))
        return issues

    async def _suggest(
        self, provider: SuggestionProvider, content: str, issue: Issue, rule: Rule
    ) -> list[str] | None:
        try:
            return await provider.suggest(content, issue, rule)
        except Exception as e:
            logger.warning(f"AI suggestions unavailable for '{issue.message}': {e}")
            return []

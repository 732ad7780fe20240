"""Ordered rule collections grouped by category."""

import json
import re
from collections.abc import Mapping, Sequence
from pathlib import Path

from common.logger import get_logger

from ..errors import RuleDefinitionError, RulePatternError
from ..models import Rule, RuleCategory
from .defaults import DEFAULT_RULES

logger = get_logger(__name__)

CUSTOM = RuleCategory.CUSTOM.value


def compile_pattern(pattern: str) -> re.Pattern[str]:
    """Compile a rule pattern the way the matcher scans with it.

    Raises:
        RulePatternError: If the pattern is not a valid regular expression
    """
    try:
        return re.compile(pattern, re.IGNORECASE)
    except re.error as e:
        raise RulePatternError(pattern, str(e)) from e


def check_rule(rule: Rule) -> None:
    """Reject a rule before it is accepted into the custom category.

    Raises:
        RuleDefinitionError: If pattern, message or type is empty
        RulePatternError: If the pattern does not compile
    """
    if not rule.pattern or not rule.message or not rule.type:
        raise RuleDefinitionError("Please fill in all required fields")
    compile_pattern(rule.pattern)


class RuleSet:
    """Rules for every category; only the custom category can change.

    Build one at startup and hand it to the matcher, workers and passes.
    """

    def __init__(
        self,
        rules: Mapping[str, Sequence[Rule]] | None = None,
        custom_rules: Sequence[Rule] | None = None,
    ):
        """Initialize the rule set.

        Args:
            rules: Fixed rule tables keyed by category (default: built-in tables)
            custom_rules: Initial custom rules; each is checked like add_rule
        """
        source = DEFAULT_RULES if rules is None else rules
        self._fixed: dict[str, tuple[Rule, ...]] = {
            _category_key(category): tuple(category_rules)
            for category, category_rules in source.items()
        }
        self._custom: list[Rule] = []
        # Bumped on every custom rule change so cached results can be dropped
        self.revision = 0
        for rule in custom_rules or []:
            self.add_rule(rule)

    def categories(self) -> list[str]:
        """List categories in pass order, custom last."""
        return [*self._fixed.keys(), CUSTOM]

    def get_rules(self, category: str | RuleCategory) -> list[Rule]:
        """Get the rules of a category in registration order.

        Args:
            category: Category name or enum member

        Returns:
            List of rules; empty for unknown categories
        """
        key = _category_key(category)
        if key == CUSTOM:
            return list(self._custom)
        return list(self._fixed.get(key, ()))

    @property
    def custom_rules(self) -> list[Rule]:
        return list(self._custom)

    def add_rule(self, rule: Rule) -> None:
        """Append a custom rule.

        Raises:
            RuleDefinitionError: If a required field is empty
            RulePatternError: If the pattern does not compile
        """
        check_rule(rule)
        self._custom.append(rule)
        self.revision += 1
        logger.debug(f"Added custom rule {rule.pattern!r}")

    def update_rule(self, index: int, rule: Rule) -> bool:
        """Replace the custom rule at index.

        Returns:
            True if replaced, False if index is out of range (no-op)

        Raises:
            RuleDefinitionError: If a required field is empty
            RulePatternError: If the pattern does not compile
        """
        if not 0 <= index < len(self._custom):
            logger.warning(f"No custom rule at index {index}; update ignored")
            return False
        check_rule(rule)
        self._custom[index] = rule
        self.revision += 1
        return True

    def delete_rule(self, index: int) -> bool:
        """Remove the custom rule at index.

        Returns:
            True if removed, False if index is out of range (no-op)
        """
        if not 0 <= index < len(self._custom):
            logger.warning(f"No custom rule at index {index}; delete ignored")
            return False
        del self._custom[index]
        self.revision += 1
        return True

    def save(self, file_path: Path) -> None:
        """Save custom rules to a JSON file."""
        file_path.parent.mkdir(parents=True, exist_ok=True)
        data = {"rules": [rule.to_dict() for rule in self._custom]}
        file_path.write_text(json.dumps(data, indent=2), encoding="utf-8")

    @classmethod
    def load(cls, file_path: Path) -> "RuleSet":
        """Build a rule set with the built-in tables plus custom rules from JSON.

        A missing file yields a rule set with no custom rules.

        Raises:
            RuleDefinitionError: If the file is not valid JSON or holds a rule
                that is malformed or does not compile
        """
        if not file_path.exists():
            return cls()

        try:
            data = json.loads(file_path.read_text(encoding="utf-8"))
            if not isinstance(data, dict):
                raise RuleDefinitionError('expected an object with a "rules" list')
            return cls(custom_rules=[Rule.from_dict(r) for r in data.get("rules", [])])
        except (RuleDefinitionError, ValueError, KeyError, TypeError) as e:
            raise RuleDefinitionError(f"Invalid custom rules file {file_path}: {e}") from e


def _category_key(category: str | RuleCategory) -> str:
    return category.value if isinstance(category, RuleCategory) else category

"""Standard validation passes, one per rule category."""

from collections.abc import Awaitable, Callable

from .models import Issue, RuleCategory, ValidationPass

# (pass name, category, priority); higher priority runs first
PASS_DEFINITIONS: tuple[tuple[str, RuleCategory, int], ...] = (
    ("Technical Accuracy", RuleCategory.TECHNICAL_ACCURACY, 5),
    ("Content Structure", RuleCategory.CONTENT_STRUCTURE, 4),
    ("Industry Standards", RuleCategory.INDUSTRY_STANDARDS, 3),
    ("Readability", RuleCategory.READABILITY, 2),
    ("Custom Rules", RuleCategory.CUSTOM, 1),
)


def build_passes(
    validate: Callable[[str, str], Awaitable[list[Issue]]],
    include_custom: bool = True,
) -> list[ValidationPass]:
    """Build one pass per category around a validate(content, category) function.

    Args:
        validate: Coroutine function validating content for one category
        include_custom: Whether to add the custom rules pass

    Returns:
        Passes in priority order
    """
    passes = []
    for name, category, priority in PASS_DEFINITIONS:
        if category == RuleCategory.CUSTOM and not include_custom:
            continue
        passes.append(
            ValidationPass(
                name=name,
                priority=priority,
                validate=lambda content, c=category.value: validate(content, c),
            )
        )
    return passes

"""Validation result reporters."""

import json

from common.logger import get_logger

from .models import Issue, Severity

logger = get_logger(__name__)

ICONS = {
    Severity.HIGH: "[red]✗[/red]",
    Severity.MEDIUM: "[yellow]⚠[/yellow]",
    Severity.LOW: "ℹ",
}


class ValidationReporter:
    """Format and display validation issues."""

    def __init__(self, show_low: bool = True):
        """Initialize the reporter.

        Args:
            show_low: Whether to show low-severity issues
        """
        self.show_low = show_low

    def report_console(self, name: str, issues: list[Issue]) -> int:
        """Print issues for one document to the console.

        Args:
            name: Document name shown as the heading
            issues: Issues to report

        Returns:
            Exit code (0 for success, 1 if high-severity issues were found)
        """
        counts = {severity: 0 for severity in Severity}

        if issues:
            logger.info(f"\n{name}:")

        for issue in sorted(issues, key=_sort_key):
            counts[issue.severity] += 1
            if not self.show_low and issue.severity == Severity.LOW:
                continue

            where = (
                f"Line [bold]{issue.location.line}[/bold], col {issue.location.column}"
                if issue.location
                else "Document"
            )
            source = f" ({issue.source})" if issue.source else ""
            logger.info(f"  {ICONS[issue.severity]} {where}: {issue.message}{source}")
            if issue.suggestion:
                logger.info(f"      Suggestion: {issue.suggestion}")
            if issue.quick_fix:
                logger.info(
                    f"      Quick fix: {issue.quick_fix.label} → {issue.quick_fix.replacement!r}"
                )
            for alternative in issue.ai_suggestions or []:
                logger.info(f"      AI: {alternative}")

        logger.info("\n" + "=" * 60)
        logger.info(
            f"Total: [bold]{counts[Severity.HIGH]}[/bold] high, "
            f"[bold]{counts[Severity.MEDIUM]}[/bold] medium, "
            f"[bold]{counts[Severity.LOW]}[/bold] low"
        )

        if counts[Severity.HIGH] > 0:
            return 1
        return 0

    def report_json(self, name: str, issues: list[Issue]) -> str:
        """Format issues for one document as JSON.

        Returns:
            JSON string representation of the issues
        """
        data = {
            "file": name,
            "issues": [issue.to_dict() for issue in sorted(issues, key=_sort_key)],
        }
        return json.dumps(data, indent=2)


def _sort_key(issue: Issue) -> tuple[int, int]:
    if issue.location is None:
        return (0, 0)
    return (issue.location.line, issue.location.column)

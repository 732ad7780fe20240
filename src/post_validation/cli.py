#!/usr/bin/env python3
"""CLI interface for the post_validation module.

Usage:
    post-validation validate draft.md [--format json] [--category readability]
    post-validation rules list
    post-validation rules add --pattern "\\bsimply\\b" --message "Avoid 'simply'"
    post-validation rules delete 0
"""

import argparse
import asyncio
from pathlib import Path

from common.env import env
from common.logger import setup_logging

from .errors import RuleDefinitionError
from .models import QuickFix, Rule, RuleCategory, Severity, ValidationState
from .notifications import Notifier
from .orchestrator import MultiPassOrchestrator
from .passes import PASS_DEFINITIONS
from .reporters import ValidationReporter
from .rules.rule_set import RuleSet
from .service import ValidationService


def _rules_path(args) -> Path:
    return Path(args.rules) if args.rules else env.custom_rules_path()


def _load_rule_set(rules_path: Path) -> RuleSet | None:
    """Load the rule set, printing an error instead of raising on a bad file."""
    try:
        return RuleSet.load(rules_path)
    except RuleDefinitionError as e:
        print(f"Error: {e}")
        return None


async def _run_passes(rule_set: RuleSet, content: str, categories: list[str] | None) -> ValidationState:
    service = ValidationService.from_env(rule_set)
    passes = service.get_validation_passes()
    if categories:
        wanted = {name for name, category, _ in PASS_DEFINITIONS if category.value in categories}
        passes = [p for p in passes if p.name in wanted]

    orchestrator = MultiPassOrchestrator(passes, delay=0, notifier=Notifier())
    try:
        return await orchestrator.run(content)
    finally:
        await service.close()


def cmd_validate(args):
    """Run all validation passes on a markdown post.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (0 for success, non-zero for errors)
    """
    post_path = Path(args.file)

    if not post_path.exists():
        print(f"Error: File '{post_path}' does not exist")
        return 1

    rule_set = _load_rule_set(_rules_path(args))
    if rule_set is None:
        return 1

    content = post_path.read_text(encoding="utf-8")
    state = asyncio.run(_run_passes(rule_set, content, args.category))

    if state.error:
        print(f"Error: {state.error.message}")
        return 1

    reporter = ValidationReporter(show_low=not args.hide_low)

    if args.format == "json":
        output = reporter.report_json(post_path.name, state.issues)
        if args.output:
            output_path = Path(args.output)
            output_path.write_text(output, encoding="utf-8")
            print(f"Validation results written to {output_path}")
        else:
            print(output)
        return 0

    return reporter.report_console(post_path.name, state.issues)


def _rule_from_args(args) -> Rule:
    quick_fix = None
    if args.fix_replacement is not None:
        quick_fix = QuickFix(label=args.fix_label or "Apply fix", replacement=args.fix_replacement)
    return Rule(
        pattern=args.pattern,
        message=args.message,
        severity=Severity(args.severity),
        type=args.type,
        suggestion=args.suggestion,
        language=args.language,
        ai_enabled=args.ai,
        quick_fix=quick_fix,
    )


def cmd_rules_list(args):
    """List custom rules with their indices."""
    rule_set = _load_rule_set(_rules_path(args))
    if rule_set is None:
        return 1

    rules = rule_set.custom_rules

    if not rules:
        print("No custom rules defined")
        return 0

    for index, rule in enumerate(rules):
        scope = f" [{rule.language}]" if rule.language else ""
        print(f"{index}: {rule.pattern!r} ({rule.severity.value}, {rule.type}){scope}")
        print(f"   {rule.message}")
        if rule.suggestion:
            print(f"   Suggestion: {rule.suggestion}")
    return 0


def cmd_rules_add(args):
    """Add a custom rule."""
    rules_path = _rules_path(args)
    rule_set = _load_rule_set(rules_path)
    if rule_set is None:
        return 1

    try:
        rule_set.add_rule(_rule_from_args(args))
    except RuleDefinitionError as e:
        print(f"Error: {e}")
        return 1

    rule_set.save(rules_path)
    print(f"Rule added ({len(rule_set.custom_rules)} custom rules in {rules_path})")
    return 0


def cmd_rules_update(args):
    """Replace a custom rule by index."""
    rules_path = _rules_path(args)
    rule_set = _load_rule_set(rules_path)
    if rule_set is None:
        return 1

    try:
        updated = rule_set.update_rule(args.index, _rule_from_args(args))
    except RuleDefinitionError as e:
        print(f"Error: {e}")
        return 1

    if not updated:
        print(f"Error: No custom rule at index {args.index}")
        return 1

    rule_set.save(rules_path)
    print(f"Rule {args.index} updated")
    return 0


def cmd_rules_delete(args):
    """Delete a custom rule by index."""
    rules_path = _rules_path(args)
    rule_set = _load_rule_set(rules_path)
    if rule_set is None:
        return 1

    if not rule_set.delete_rule(args.index):
        print(f"Error: No custom rule at index {args.index}")
        return 1

    rule_set.save(rules_path)
    print(f"Rule {args.index} deleted")
    return 0


def _add_rule_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--pattern", required=True, help="Regular expression (case-insensitive)")
    parser.add_argument("--message", required=True, help="Message shown for each match")
    parser.add_argument(
        "--severity",
        choices=[s.value for s in Severity],
        default=Severity.MEDIUM.value,
        help="Issue severity",
    )
    parser.add_argument(
        "--type",
        choices=[c.value for c in RuleCategory if c != RuleCategory.CUSTOM],
        default=RuleCategory.TECHNICAL_ACCURACY.value,
        help="Issue type reported for matches",
    )
    parser.add_argument("--suggestion", help="Suggested fix")
    parser.add_argument("--language", help="Only check fenced code blocks in this language")
    parser.add_argument("--ai", action="store_true", help="Ask the AI service for suggestions")
    parser.add_argument("--fix-label", help="Quick fix label")
    parser.add_argument("--fix-replacement", help="Quick fix replacement text")


def main(argv=None):
    """Main entry point for the CLI."""
    parser = argparse.ArgumentParser(description="Validate blog posts before publishing")
    parser.add_argument("--log-level", default="INFO", help="Logging level")
    parser.add_argument(
        "--rules",
        type=str,
        help="Path to custom rules JSON file (default: CUSTOM_RULES_PATH)",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    # Validate command
    validate_parser = subparsers.add_parser("validate", help="Validate a markdown post")
    validate_parser.add_argument("file", type=str, help="Markdown file to validate")
    validate_parser.add_argument(
        "--category",
        action="append",
        choices=[c.value for c in RuleCategory],
        help="Only run these categories (repeatable)",
    )
    validate_parser.add_argument(
        "--format",
        choices=["console", "json"],
        default="console",
        help="Output format",
    )
    validate_parser.add_argument("--output", type=str, help="Write JSON results to file")
    validate_parser.add_argument(
        "--hide-low",
        action="store_true",
        help="Hide low-severity issues in console output",
    )
    validate_parser.set_defaults(func=cmd_validate)

    # Rules command
    rules_parser = subparsers.add_parser("rules", help="Manage custom validation rules")
    rules_subparsers = rules_parser.add_subparsers(dest="rules_command", required=True)

    list_parser = rules_subparsers.add_parser("list", help="List custom rules")
    list_parser.set_defaults(func=cmd_rules_list)

    add_parser = rules_subparsers.add_parser("add", help="Add a custom rule")
    _add_rule_arguments(add_parser)
    add_parser.set_defaults(func=cmd_rules_add)

    update_parser = rules_subparsers.add_parser("update", help="Replace a custom rule")
    update_parser.add_argument("index", type=int, help="Index shown by 'rules list'")
    _add_rule_arguments(update_parser)
    update_parser.set_defaults(func=cmd_rules_update)

    delete_parser = rules_subparsers.add_parser("delete", help="Delete a custom rule")
    delete_parser.add_argument("index", type=int, help="Index shown by 'rules list'")
    delete_parser.set_defaults(func=cmd_rules_delete)

    args = parser.parse_args(argv)
    setup_logging(level=args.log_level)
    return args.func(args)


if __name__ == "__main__":
    exit(main())

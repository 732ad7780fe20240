"""Validation rules and their default tables."""

from .defaults import DEFAULT_RULES
from .rule_set import RuleSet, check_rule, compile_pattern

__all__ = ["DEFAULT_RULES", "RuleSet", "check_rule", "compile_pattern"]

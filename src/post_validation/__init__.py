"""Multi-pass validation of blog posts: rules, batching and caching."""

from .batcher import RequestBatcher
from .cache import ResultCache
from .code_blocks import extract_code_blocks
from .matcher import RuleMatcher
from .models import (
    CodeBlock,
    ErrorState,
    Issue,
    QuickFix,
    Rule,
    RuleCategory,
    Severity,
    ValidationLocation,
    ValidationPass,
    ValidationState,
)
from .orchestrator import MultiPassOrchestrator
from .rules.rule_set import RuleSet
from .service import ValidationService

__all__ = [
    "CodeBlock",
    "ErrorState",
    "Issue",
    "MultiPassOrchestrator",
    "QuickFix",
    "RequestBatcher",
    "ResultCache",
    "Rule",
    "RuleCategory",
    "RuleMatcher",
    "RuleSet",
    "Severity",
    "ValidationLocation",
    "ValidationPass",
    "ValidationService",
    "ValidationState",
    "extract_code_blocks",
]

"""Built-in rule tables, one per fixed category."""

from ..models import QuickFix, Rule, RuleCategory, Severity

TECHNICAL_ACCURACY = RuleCategory.TECHNICAL_ACCURACY.value
CONTENT_STRUCTURE = RuleCategory.CONTENT_STRUCTURE.value
INDUSTRY_STANDARDS = RuleCategory.INDUSTRY_STANDARDS.value
READABILITY = RuleCategory.READABILITY.value

TECHNICAL_ACCURACY_RULES: tuple[Rule, ...] = (
    Rule(
        pattern=r"\bvar\b",
        message="Avoid using var declarations",
        severity=Severity.MEDIUM,
        type=TECHNICAL_ACCURACY,
        suggestion="Use let or const instead of var",
        quick_fix=QuickFix(label="Replace with const", replacement="const"),
    ),
    Rule(
        pattern=r"\beval\s*\(",
        message="Avoid eval; it executes arbitrary code",
        severity=Severity.HIGH,
        type=TECHNICAL_ACCURACY,
        suggestion="Parse the input explicitly (e.g. JSON.parse) instead of evaluating it",
        language="javascript",
        ai_enabled=True,
    ),
    Rule(
        pattern=r"[^=!<>]==[^=]",
        message="Use strict equality (===) instead of loose equality (==)",
        severity=Severity.MEDIUM,
        type=TECHNICAL_ACCURACY,
        suggestion="Replace == with ===",
        language="javascript",
    ),
    Rule(
        pattern=r"\bconsole\.log\s*\(",
        message="Remove console.log calls from published examples",
        severity=Severity.LOW,
        type=TECHNICAL_ACCURACY,
        language="javascript",
    ),
    Rule(
        pattern=r"except\s*:",
        message="Bare except clauses hide errors",
        severity=Severity.HIGH,
        type=TECHNICAL_ACCURACY,
        suggestion="Catch a specific exception type, e.g. except ValueError:",
        language="python",
        ai_enabled=True,
    ),
    Rule(
        pattern=r"\bprint\s+[\"'\w]",
        message="Python 2 print statement",
        severity=Severity.MEDIUM,
        type=TECHNICAL_ACCURACY,
        suggestion="Use the print() function",
        language="python",
    ),
)

CONTENT_STRUCTURE_RULES: tuple[Rule, ...] = (
    Rule(
        pattern=r"(?m)^#{4,}\s",
        message="Headings deeper than level 3 are hard to navigate",
        severity=Severity.LOW,
        type=CONTENT_STRUCTURE,
        suggestion="Restructure the section or use a level 2 or 3 heading",
    ),
    Rule(
        pattern=r"(?m)^#{1,6}[^\s#]",
        message="Missing space after # in heading",
        severity=Severity.MEDIUM,
        type=CONTENT_STRUCTURE,
        suggestion="Add a space between the # characters and the heading text",
    ),
    Rule(
        pattern=r"\b(TODO|TBD|FIXME)\b",
        message="Draft placeholder left in post",
        severity=Severity.HIGH,
        type=CONTENT_STRUCTURE,
        suggestion="Replace the placeholder with final content",
    ),
    Rule(
        pattern=r"\[(click here|here|link)\]\(",
        message="Link text should describe the destination",
        severity=Severity.LOW,
        type=CONTENT_STRUCTURE,
        suggestion="Use descriptive link text instead of 'click here'",
    ),
)

INDUSTRY_STANDARDS_RULES: tuple[Rule, ...] = (
    Rule(
        pattern=r"\bhttp://(?!localhost|127\.0\.0\.1)",
        message="Use HTTPS URLs",
        severity=Severity.MEDIUM,
        type=INDUSTRY_STANDARDS,
        suggestion="Link to the https:// version of the page",
        quick_fix=QuickFix(label="Use https", replacement="https://"),
    ),
    Rule(
        pattern=r"\b(whitelist|blacklist)\b",
        message="Prefer inclusive terminology",
        severity=Severity.LOW,
        type=INDUSTRY_STANDARDS,
        suggestion="Use allowlist / denylist",
    ),
    Rule(
        pattern=r"\bmaster\s*/\s*slave\b",
        message="Prefer inclusive terminology",
        severity=Severity.LOW,
        type=INDUSTRY_STANDARDS,
        suggestion="Use primary / replica",
    ),
    Rule(
        pattern=r"\b(password|api[_-]?key|secret)\s*[:=]\s*[\"'][^\"']+[\"']",
        message="Hard-coded credential in example",
        severity=Severity.HIGH,
        type=INDUSTRY_STANDARDS,
        suggestion="Read credentials from environment variables in examples",
        ai_enabled=True,
    ),
)

READABILITY_RULES: tuple[Rule, ...] = (
    Rule(
        pattern=r"\b(very|really|quite|just)\b",
        message="Consider using more specific language",
        severity=Severity.LOW,
        type=READABILITY,
        suggestion="Remove the filler word or use a precise term",
    ),
    Rule(
        pattern=r"\b(utilize|leverage)\b",
        message="Prefer plain words",
        severity=Severity.LOW,
        type=READABILITY,
        suggestion="Use 'use'",
        quick_fix=QuickFix(label="Replace with 'use'", replacement="use"),
    ),
    Rule(
        pattern=r"\b(is|are|was|were|been|being)\s+\w+ed\b",
        message="Possible passive voice",
        severity=Severity.LOW,
        type=READABILITY,
        suggestion="Rewrite the sentence in active voice",
        ai_enabled=True,
    ),
    Rule(
        pattern=r"[^.!?\n]{250,}[.!?]",
        message="Sentence is very long",
        severity=Severity.MEDIUM,
        type=READABILITY,
        suggestion="Split the sentence into shorter ones",
    ),
)

DEFAULT_RULES: dict[str, tuple[Rule, ...]] = {
    TECHNICAL_ACCURACY: TECHNICAL_ACCURACY_RULES,
    CONTENT_STRUCTURE: CONTENT_STRUCTURE_RULES,
    INDUSTRY_STANDARDS: INDUSTRY_STANDARDS_RULES,
    READABILITY: READABILITY_RULES,
}

"""Data models for rules, issues and validation state."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Generic, TypeVar

T = TypeVar("T")


class Severity(Enum):
    """Severity levels for validation issues."""

    HIGH = "high"  # Wrong or unsafe (e.g., eval on user input)
    MEDIUM = "medium"  # Outdated or inconsistent (e.g., var declarations)
    LOW = "low"  # Style nits (e.g., filler words)


class RuleCategory(Enum):
    """Rule categories, each run as one validation pass."""

    TECHNICAL_ACCURACY = "technical_accuracy"
    CONTENT_STRUCTURE = "content_structure"
    INDUSTRY_STANDARDS = "industry_standards"
    READABILITY = "readability"
    CUSTOM = "custom"


@dataclass(frozen=True)
class QuickFix:
    """A literal replacement offered for a rule violation."""

    label: str
    replacement: str

    def to_dict(self) -> dict[str, str]:
        return {"label": self.label, "replacement": self.replacement}

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> "QuickFix | None":
        if not data:
            return None
        return cls(label=data["label"], replacement=data["replacement"])


@dataclass(frozen=True)
class Rule:
    """A pattern-based validation rule."""

    pattern: str  # Regular expression text, matched case-insensitively
    message: str
    severity: Severity
    type: str  # Issue type reported for matches, e.g. "technical_accuracy"
    suggestion: str | None = None
    language: str | None = None  # Only scan fenced code blocks in this language
    ai_enabled: bool = False
    quick_fix: QuickFix | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "pattern": self.pattern,
            "message": self.message,
            "severity": self.severity.value,
            "type": self.type,
        }
        if self.suggestion is not None:
            data["suggestion"] = self.suggestion
        if self.language is not None:
            data["language"] = self.language
        if self.ai_enabled:
            data["ai_enabled"] = True
        if self.quick_fix is not None:
            data["quick_fix"] = self.quick_fix.to_dict()
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Rule":
        return cls(
            pattern=data["pattern"],
            message=data["message"],
            severity=Severity(data.get("severity", "medium")),
            type=data.get("type", RuleCategory.TECHNICAL_ACCURACY.value),
            suggestion=data.get("suggestion"),
            language=data.get("language"),
            ai_enabled=bool(data.get("ai_enabled", False)),
            quick_fix=QuickFix.from_dict(data.get("quick_fix")),
        )


@dataclass(frozen=True)
class CodeBlock:
    """A fenced code fragment extracted from a document."""

    code: str
    language: str  # Fence tag, "" when the fence has none
    start_line: int  # 1-based line of the opening fence


@dataclass(frozen=True)
class ValidationLocation:
    """Where a match sits in the document (1-based line and column)."""

    line: int
    column: int
    length: int

    def to_dict(self) -> dict[str, int]:
        return {"line": self.line, "column": self.column, "length": self.length}


@dataclass
class Issue:
    """A single validation issue."""

    type: str
    message: str
    severity: Severity
    suggestion: str | None = None
    location: ValidationLocation | None = None
    quick_fix: QuickFix | None = None
    ai_suggestions: list[str] | None = None
    source: str | None = None  # Name of the pass that produced the issue

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.type,
            "message": self.message,
            "severity": self.severity.value,
            "suggestion": self.suggestion,
            "location": self.location.to_dict() if self.location else None,
            "quick_fix": self.quick_fix.to_dict() if self.quick_fix else None,
            "ai_suggestions": self.ai_suggestions,
            "source": self.source,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Issue":
        location = data.get("location")
        return cls(
            type=data.get("type", ""),
            message=data["message"],
            severity=Severity(data.get("severity", "medium")),
            suggestion=data.get("suggestion"),
            location=(
                ValidationLocation(
                    line=location["line"],
                    column=location.get("column", 1),
                    length=location.get("length", 1),
                )
                if location
                else None
            ),
            quick_fix=QuickFix.from_dict(data.get("quick_fix") or data.get("quickFix")),
            ai_suggestions=data.get("ai_suggestions") or data.get("aiSuggestions"),
            source=data.get("source"),
        )


@dataclass(frozen=True)
class ValidationRequest:
    """One validate(content, type) call waiting in a batch."""

    content: str
    type: str

    def to_dict(self) -> dict[str, str]:
        return {"content": self.content, "type": self.type}


@dataclass
class CacheEntry(Generic[T]):
    """A cached value with its creation and expiry times."""

    value: T
    timestamp: float
    expires_at: float


@dataclass
class ValidationPass:
    """A named, prioritized unit of validation work."""

    name: str
    priority: int  # Higher runs first
    validate: Callable[[str], Awaitable[list[Issue]]]


@dataclass(frozen=True)
class ErrorState:
    """User-facing description of a failure."""

    type: str  # "network", "validation", "ai" or "offline"
    message: str
    action: str | None = None


@dataclass
class ValidationState:
    """What the editor observes about the latest validation run."""

    issues: list[Issue] = field(default_factory=list)
    is_validating: bool = False
    progress: float = 0.0
    error: ErrorState | None = None

    @property
    def has_high_severity(self) -> bool:
        """Check if any issue is high severity."""
        return any(i.severity == Severity.HIGH for i in self.issues)

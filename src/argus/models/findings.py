"""Finding models for code review results."""

from dataclasses import dataclass, field
from enum import Enum


class Severity(Enum):
    """Severity levels for issues.

    - CRITICAL: Must fix before merge.
    - ERROR: Incorrect or unsafe behaviour that should be fixed.
    - WARNING: Potential problem worth addressing.
    - INFO: Observation or optional improvement.
    """

    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"

    @property
    def rank(self) -> int:
        """Ordering used for deduplication, thresholds and sorting."""
        return _SEVERITY_RANK[self]


_SEVERITY_RANK = {
    Severity.INFO: 1,
    Severity.WARNING: 2,
    Severity.ERROR: 3,
    Severity.CRITICAL: 4,
}


@dataclass(frozen=True)
class SuggestedFix:
    """A proposed fix for an issue."""

    comment: str
    diff: str | None = None


@dataclass(frozen=True)
class CoachingInfo:
    """Educational context attached to an issue."""

    rationale: str
    best_practice: str
    resources: list[str] = field(default_factory=list)
    level: str = "beginner"  # beginner | intermediate | advanced


@dataclass(frozen=True)
class IssueSource:
    """Analyzer that reported an issue and its weighted confidence."""

    agent: str
    confidence: float


@dataclass(frozen=True)
class Issue:
    """A single finding reported by an analyzer."""

    severity: Severity
    category: str
    title: str
    description: str
    file: str
    line: int | None = None
    end_line: int | None = None
    snippet: str | None = None
    suggestion: SuggestedFix | None = None
    coaching: CoachingInfo | None = None
    source: IssueSource | None = None

    def __post_init__(self) -> None:
        """Coerce string severities into the enum."""
        if isinstance(self.severity, str):
            object.__setattr__(self, "severity", Severity(self.severity.lower()))

    @property
    def dedup_key(self) -> tuple[str, int | None, str]:
        """Composite key under which duplicate issues collapse."""
        return (self.file, self.line, self.category)

    def to_dict(self) -> dict:
        """Serialize to a JSON-compatible dict."""
        data: dict = {
            "severity": self.severity.value,
            "category": self.category,
            "title": self.title,
            "description": self.description,
            "file": self.file,
            "line": self.line,
            "end_line": self.end_line,
        }
        if self.snippet:
            data["snippet"] = self.snippet
        if self.suggestion:
            data["suggestion"] = {
                "comment": self.suggestion.comment,
                "diff": self.suggestion.diff,
            }
        if self.coaching:
            data["coaching"] = coaching_to_dict(self.coaching)
        if self.source:
            data["agent"] = self.source.agent
            data["confidence"] = self.source.confidence
        return data


def coaching_to_dict(coaching: CoachingInfo) -> dict:
    """Serialize a coaching payload."""
    return {
        "rationale": coaching.rationale,
        "best_practice": coaching.best_practice,
        "resources": list(coaching.resources),
        "level": coaching.level,
    }

"""Review result models."""

from dataclasses import dataclass, field
from typing import Any

from argus.models.findings import CoachingInfo, Issue, Severity, coaching_to_dict


@dataclass(frozen=True)
class AnalysisResult:
    """Complete output of a single analyzer for one run."""

    agent: str
    confidence: float  # 0.0 - 1.0
    issues: list[Issue]
    summary: str
    execution_time_ms: int = 0
    degraded: bool = False
    # Confidence as reported by the analyzer, before its weight was applied
    raw_confidence: float | None = None

    @property
    def issues_count(self) -> int:
        """Total number of issues."""
        return len(self.issues)

    @property
    def critical_count(self) -> int:
        """Number of critical issues."""
        return sum(1 for i in self.issues if i.severity == Severity.CRITICAL)


@dataclass(frozen=True)
class LintResult:
    """Linter output, passed through synthesis untouched."""

    total_issues: int = 0
    severity_breakdown: dict[str, int] = field(default_factory=dict)
    by_linter: dict[str, list[dict[str, Any]]] = field(default_factory=dict)
    summary: str = ""
    auto_fixable: int = 0

    @classmethod
    def empty(cls) -> "LintResult":
        return cls(summary="No linters were run.")

    def to_dict(self) -> dict:
        return {
            "total_issues": self.total_issues,
            "severity_breakdown": dict(self.severity_breakdown),
            "by_linter": {k: list(v) for k, v in self.by_linter.items()},
            "summary": self.summary,
            "auto_fixable": self.auto_fixable,
        }


@dataclass(frozen=True)
class AgentPerformance:
    """Per-analyzer figures reported in the review metrics."""

    issues_found: int
    execution_time_ms: int
    average_confidence: float


@dataclass(frozen=True)
class ReviewMetrics:
    """Metrics for tracking review runs."""

    files_reviewed: int
    issues_found: int
    execution_time_ms: int
    agent_performance: dict[str, AgentPerformance] = field(default_factory=dict)


@dataclass(frozen=True)
class FinalReview:
    """Synthesized output of all analyzers."""

    summary: str
    blocking_issues: list[Issue]
    recommendations: list[Issue]
    linting_summary: LintResult
    coaching: list[CoachingInfo]
    metrics: ReviewMetrics
    failed_agents: list[str] = field(default_factory=list)

    @property
    def has_blocking_issues(self) -> bool:
        """Check if the review should block the merge."""
        return bool(self.blocking_issues)

    @property
    def all_issues(self) -> list[Issue]:
        return self.blocking_issues + self.recommendations

    def to_dict(self) -> dict:
        """Serialize to a JSON-compatible dict for the reporting layer."""
        return {
            "summary": self.summary,
            "blocking_issues": [i.to_dict() for i in self.blocking_issues],
            "recommendations": [i.to_dict() for i in self.recommendations],
            "linting_summary": self.linting_summary.to_dict(),
            "coaching": [coaching_to_dict(c) for c in self.coaching],
            "metrics": {
                "files_reviewed": self.metrics.files_reviewed,
                "issues_found": self.metrics.issues_found,
                "execution_time_ms": self.metrics.execution_time_ms,
                "agent_performance": {
                    agent: {
                        "issues_found": perf.issues_found,
                        "execution_time_ms": perf.execution_time_ms,
                        "average_confidence": perf.average_confidence,
                    }
                    for agent, perf in self.metrics.agent_performance.items()
                },
            },
            "failed_agents": list(self.failed_agents),
        }

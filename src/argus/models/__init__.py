"""Data models for Argus."""

from argus.models.context import (
    ArchitectureInfo,
    ChangedFile,
    FilePriority,
    PerformanceProfile,
    ProjectContext,
    PullRequestInfo,
    ReviewContext,
    SecurityProfile,
)
from argus.models.findings import (
    CoachingInfo,
    Issue,
    IssueSource,
    Severity,
    SuggestedFix,
)
from argus.models.review import (
    AgentPerformance,
    AnalysisResult,
    FinalReview,
    LintResult,
    ReviewMetrics,
)

__all__ = [
    "AgentPerformance",
    "AnalysisResult",
    "ArchitectureInfo",
    "ChangedFile",
    "CoachingInfo",
    "FilePriority",
    "FinalReview",
    "Issue",
    "IssueSource",
    "LintResult",
    "PerformanceProfile",
    "ProjectContext",
    "PullRequestInfo",
    "ReviewContext",
    "ReviewMetrics",
    "SecurityProfile",
    "Severity",
    "SuggestedFix",
]

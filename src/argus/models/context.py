"""Review context models."""

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from argus.config import ReviewConfig


class FilePriority(Enum):
    """Review priority assigned to a changed file."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"

    @property
    def rank(self) -> int:
        return _PRIORITY_RANK[self]


_PRIORITY_RANK = {
    FilePriority.LOW: 1,
    FilePriority.MEDIUM: 2,
    FilePriority.HIGH: 3,
    FilePriority.CRITICAL: 4,
}


@dataclass(frozen=True)
class PullRequestInfo:
    """Metadata of the pull request under review."""

    repo_name: str
    number: int
    title: str
    description: str
    base_ref: str
    head_ref: str
    head_sha: str
    author: str
    labels: tuple[str, ...] = ()

    def to_prompt_context(self) -> str:
        """Format metadata for inclusion in analyzer prompts."""
        return f"""## Pull Request Context
- Repository: {self.repo_name}
- PR #{self.number}: {self.title}
- Author: {self.author}
- Branch: {self.head_ref} → {self.base_ref}
- Labels: {', '.join(self.labels) if self.labels else 'None'}

## PR Description
{self.description or 'No description provided.'}
"""


@dataclass(frozen=True)
class ChangedFile:
    """A file touched by the pull request."""

    filename: str
    status: str  # added | modified | removed | renamed
    additions: int = 0
    deletions: int = 0
    patch: str | None = None
    previous_filename: str | None = None
    content: str | None = None
    priority: FilePriority = FilePriority.LOW

    @property
    def changes(self) -> int:
        return self.additions + self.deletions


@dataclass(frozen=True)
class ArchitectureInfo:
    """Layout of the project under review."""

    pattern: str = "unknown"
    source_directories: tuple[str, ...] = ()
    test_directories: tuple[str, ...] = ()


@dataclass(frozen=True)
class SecurityProfile:
    """Security-sensitive areas of the project."""

    critical_files: tuple[str, ...] = ()
    auth_patterns: tuple[str, ...] = ()


@dataclass(frozen=True)
class PerformanceProfile:
    """Performance-sensitive areas of the project."""

    critical_areas: tuple[str, ...] = ()


@dataclass(frozen=True)
class ProjectContext:
    """Project-level knowledge consumed by the prioritizer and analyzers."""

    frameworks: tuple[str, ...] = ()
    architecture: ArchitectureInfo = field(default_factory=ArchitectureInfo)
    security: SecurityProfile = field(default_factory=SecurityProfile)
    performance: PerformanceProfile = field(default_factory=PerformanceProfile)

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> "ProjectContext":
        """Build from the ``project`` section of the configuration file."""
        arch_raw = raw.get("architecture", {}) or {}
        sec_raw = raw.get("security", {}) or {}
        perf_raw = raw.get("performance", {}) or {}
        return cls(
            frameworks=tuple(raw.get("frameworks", [])),
            architecture=ArchitectureInfo(
                pattern=arch_raw.get("pattern", "unknown"),
                source_directories=tuple(arch_raw.get("source_directories", [])),
                test_directories=tuple(arch_raw.get("test_directories", [])),
            ),
            security=SecurityProfile(
                critical_files=tuple(sec_raw.get("critical_files", [])),
                auth_patterns=tuple(sec_raw.get("auth_patterns", [])),
            ),
            performance=PerformanceProfile(
                critical_areas=tuple(perf_raw.get("critical_areas", [])),
            ),
        )


@dataclass(frozen=True)
class ReviewContext:
    """Immutable bundle handed to every analyzer."""

    pull_request: PullRequestInfo
    changed_files: tuple[ChangedFile, ...]
    project_context: ProjectContext
    config: "ReviewConfig"

    def to_prompt_context(self) -> str:
        """Format the context for inclusion in analyzer prompts."""
        frameworks = ", ".join(self.project_context.frameworks) or "Unknown"
        return (
            self.pull_request.to_prompt_context()
            + f"\n- Frameworks: {frameworks}\n- Changed files: {len(self.changed_files)}\n"
        )

"""Architecture and testing focused analyzers."""

import re
from pathlib import PurePosixPath

from argus.agents.base import CODE_EXTENSIONS, LLMAnalyzer
from argus.config import AnalyzerKind
from argus.models.context import ChangedFile, ReviewContext
from argus.models.findings import CoachingInfo, Issue, Severity, SuggestedFix

TEST_FILE_PATTERN = re.compile(r"(\.(test|spec)\.[jt]sx?$|__tests__|(^|/)test_[^/]+\.py$|_test\.(py|go)$)")
LAYER_DIR_PATTERN = re.compile(r"/(components|services|models|controllers|middleware)/", re.IGNORECASE)
GENERATED_MARKERS = (".generated.", ".min.", ".bundle.")

EXPECTED_LOCATIONS = (
    ("component", "src/components/"),
    ("service", "src/services/"),
    ("model", "src/models/"),
    ("controller", "src/controllers/"),
)

NAMING_PATTERNS = (
    (re.compile(r"\.component\.[jt]sx?$"), "component"),
    (re.compile(r"\.service\.[jt]s$"), "service"),
    (re.compile(r"\.model\.[jt]s$"), "model"),
    (re.compile(r"\.controller\.[jt]s$"), "controller"),
    (re.compile(r"\.test\.[jt]sx?$"), "test"),
    (re.compile(r"\.spec\.[jt]sx?$"), "spec"),
)


def is_test_file(filename: str) -> bool:
    return bool(TEST_FILE_PATTERN.search(filename))


def expected_location(filename: str) -> str | None:
    """Directory a new file of this kind conventionally lives in."""
    name = filename.lower()
    for marker, location in EXPECTED_LOCATIONS:
        if marker in name:
            return location
    return None


def naming_pattern(filename: str) -> str:
    for pattern, name in NAMING_PATTERNS:
        if pattern.search(filename):
            return name
    return "general"


class ArchitectureAnalyzer(LLMAnalyzer):
    """Analyzer specialized in design and structure."""

    KIND = AnalyzerKind.ARCHITECTURE
    CAPABILITIES = [
        "Design pattern review",
        "Code organization",
        "Dependency management",
        "SOLID principles",
    ]
    BASE_CONFIDENCE = 0.75
    ISSUE_CATEGORIES = "design-patterns|code-organization|dependency-management|solid|coupling"

    SYSTEM_PROMPT = """You are an expert reviewer focused on software architecture.

Focus on:
- Layer violations and inappropriate coupling
- Circular dependencies and missing abstractions
- Violations of SOLID principles
- Inconsistent module organization

Suggest refactoring only where it clearly improves maintainability.
"""

    def should_analyze_file(self, file: ChangedFile) -> bool:
        name = file.filename
        return (
            name.endswith(CODE_EXTENSIONS)
            and not is_test_file(name)
            and not any(m in name for m in GENERATED_MARKERS)
        )

    def local_checks(self, context: ReviewContext) -> list[Issue]:
        """Check new and renamed files against project structure conventions."""
        issues = []

        for file in context.changed_files:
            if file.status == "added":
                location = expected_location(file.filename)
                if location and not file.filename.startswith(location):
                    issues.append(
                        Issue(
                            severity=Severity.WARNING,
                            category="architecture-code-organization",
                            title="File location convention",
                            description=(
                                "New file may not follow project structure conventions. "
                                f"Expected location: {location}"
                            ),
                            file=file.filename,
                            suggestion=SuggestedFix(
                                comment=f"Consider moving to {location} to maintain consistency"
                            ),
                            coaching=CoachingInfo(
                                rationale="Consistent file organization improves maintainability",
                                best_practice=(
                                    "Group related files by feature or layer, not by file type"
                                ),
                                resources=["Clean Architecture"],
                                level="intermediate",
                            ),
                        )
                    )

            elif file.status == "renamed" and file.previous_filename:
                if naming_pattern(file.previous_filename) != naming_pattern(file.filename):
                    issues.append(
                        Issue(
                            severity=Severity.INFO,
                            category="architecture-code-organization",
                            title="Naming pattern change",
                            description=(
                                "File rename changes established naming pattern: "
                                f"{file.previous_filename} → {file.filename}"
                            ),
                            file=file.filename,
                            suggestion=SuggestedFix(
                                comment="Ensure the new name follows project conventions"
                            ),
                            coaching=CoachingInfo(
                                rationale="Consistent naming helps developers navigate the codebase",
                                best_practice=(
                                    "Use descriptive names that clearly indicate the file's purpose"
                                ),
                                resources=["Naming Conventions Guide"],
                                level="beginner",
                            ),
                        )
                    )

        return issues

    def calculate_confidence(self, issues: list[Issue], context: ReviewContext) -> float:
        confidence = self.BASE_CONFIDENCE
        if issues:
            confidence += 0.15
        if any(LAYER_DIR_PATTERN.search(f.filename) for f in context.changed_files):
            confidence += 0.1
        return max(0.1, min(1.0, confidence))


class TestingAnalyzer(LLMAnalyzer):
    """Analyzer focused on test quality and coverage."""

    KIND = AnalyzerKind.TESTING
    CAPABILITIES = [
        "Test coverage analysis",
        "Test quality review",
        "Edge case identification",
    ]
    BASE_CONFIDENCE = 0.6
    ISSUE_CATEGORIES = "coverage|test-quality|assertions|mocking|flakiness"

    SYSTEM_PROMPT = """You are a reviewer focused on automated tests.

Focus on:
- Changed behaviour without tests
- Weak or missing assertions
- Over-mocking and brittle tests
- Flaky timing or ordering assumptions
"""

    def should_analyze_file(self, file: ChangedFile) -> bool:
        return file.filename.endswith(CODE_EXTENSIONS)

    def local_checks(self, context: ReviewContext) -> list[Issue]:
        """Flag source files changed without any matching test change."""
        test_files = [f.filename for f in context.changed_files if is_test_file(f.filename)]
        issues = []

        for file in context.changed_files:
            name = file.filename
            if (
                file.status == "removed"
                or not name.endswith(CODE_EXTENSIONS)
                or is_test_file(name)
                or ".config." in name
            ):
                continue

            stem = PurePosixPath(name).stem
            if any(stem in PurePosixPath(t).name for t in test_files):
                continue

            issues.append(
                Issue(
                    severity=Severity.INFO,
                    category="testing-coverage",
                    title="Missing test coverage",
                    description="New or modified source file may need corresponding tests",
                    file=name,
                    suggestion=SuggestedFix(
                        comment="Consider adding unit tests for the new functionality"
                    ),
                    coaching=CoachingInfo(
                        rationale="Tests help ensure code reliability and catch regressions",
                        best_practice="Aim for high test coverage on business logic",
                        resources=["Unit Testing Guide"],
                        level="intermediate",
                    ),
                )
            )

        return issues

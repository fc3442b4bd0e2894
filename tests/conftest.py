"""Pytest configuration and shared fixtures."""

import asyncio

import pytest

from argus.agents.base import Analyzer
from argus.config import AnalyzerKind, ReviewConfig
from argus.models.context import ChangedFile, ProjectContext, PullRequestInfo, ReviewContext
from argus.models.findings import CoachingInfo, Issue, Severity
from argus.models.review import AnalysisResult

SAMPLE_VULNERABLE_PATCH = """\
@@ -10,6 +10,12 @@ def authenticate(username: str, password: str) -> bool:
     hashed = hash_password(password)
     return db.verify_user(username, hashed)
+
+def get_user(username: str) -> dict:
+    \"\"\"Fetch user by username.\"\"\"
+    query = f"SELECT * FROM users WHERE username = '{username}'"
+    return db.execute(query)
"""

SAMPLE_PERFORMANCE_PATCH = """\
@@ -5,6 +5,15 @@ def process_items(items: list) -> list:
     return [transform(item) for item in items]
+
+def find_duplicates(items: list) -> list:
+    duplicates = []
+    for i in range(len(items)):
+        for j in range(len(items)):
+            if i != j and items[i] == items[j] and items[i] not in duplicates:
+                duplicates.append(items[i])
+    return duplicates
"""


def make_issue(
    file: str = "src/app.py",
    line: int | None = 10,
    category: str = "logic-edge-case",
    severity: Severity | str = Severity.WARNING,
    title: str = "Possible issue",
    best_practice: str | None = None,
) -> Issue:
    """Build an issue with sensible defaults."""
    coaching = None
    if best_practice:
        coaching = CoachingInfo(rationale="Because", best_practice=best_practice)
    return Issue(
        severity=severity,
        category=category,
        title=title,
        description="Something looks off here",
        file=file,
        line=line,
        coaching=coaching,
    )


def make_result(
    agent: str,
    confidence: float = 0.9,
    issues: list[Issue] | None = None,
    execution_time_ms: int = 100,
) -> AnalysisResult:
    return AnalysisResult(
        agent=agent,
        confidence=confidence,
        issues=issues or [],
        summary=f"{agent} done",
        execution_time_ms=execution_time_ms,
    )


SUCCESS = object()


class FakeAnalyzer(Analyzer):
    """Scripted analyzer for orchestrator tests.

    ``outcomes`` is consumed one entry per call: ``SUCCESS`` yields a clean
    result, an exception instance is raised, anything else is returned
    as-is. The last entry repeats.
    """

    CAPABILITIES = ["Scripted analysis"]

    def __init__(self, kind: AnalyzerKind, outcomes=None, delay: float = 0.0, tracker=None):
        self.KIND = kind
        self.outcomes = list(outcomes) if outcomes else [SUCCESS]
        self.delay = delay
        self.tracker = tracker
        self.calls = 0

    async def execute(self, context: ReviewContext) -> AnalysisResult:
        index = min(self.calls, len(self.outcomes) - 1)
        self.calls += 1

        if self.tracker is not None:
            self.tracker.enter()
        try:
            if self.delay:
                await asyncio.sleep(self.delay)
            outcome = self.outcomes[index]
        finally:
            if self.tracker is not None:
                self.tracker.exit()

        if outcome is SUCCESS:
            return make_result(self.agent_id)
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome


class ConcurrencyTracker:
    """Records the highest number of analyzers running at once."""

    def __init__(self):
        self.current = 0
        self.peak = 0

    def enter(self):
        self.current += 1
        self.peak = max(self.peak, self.current)

    def exit(self):
        self.current -= 1


class RecordingSleep:
    """Fake sleep that records requested delays without waiting."""

    def __init__(self):
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


@pytest.fixture
def pull_request() -> PullRequestInfo:
    """Metadata of a sample pull request."""
    return PullRequestInfo(
        repo_name="test-org/test-repo",
        number=42,
        title="Add user authentication",
        description="This PR adds basic user authentication.",
        base_ref="main",
        head_ref="feature/auth",
        head_sha="abc123",
        author="testuser",
        labels=("enhancement",),
    )


@pytest.fixture
def changed_files() -> list[ChangedFile]:
    """A small mixed set of changed files."""
    return [
        ChangedFile(
            filename="src/auth/login.py",
            status="modified",
            additions=6,
            deletions=0,
            patch=SAMPLE_VULNERABLE_PATCH,
        ),
        ChangedFile(
            filename="utils/processor.py",
            status="modified",
            additions=9,
            deletions=0,
            patch=SAMPLE_PERFORMANCE_PATCH,
        ),
        ChangedFile(filename="README.md", status="modified", additions=2, deletions=1),
    ]


@pytest.fixture
def review_config() -> ReviewConfig:
    """Default configuration with the three default focus areas."""
    return ReviewConfig()


@pytest.fixture
def review_context(pull_request, changed_files, review_config) -> ReviewContext:
    """Review context built from the sample PR and files."""
    return ReviewContext(
        pull_request=pull_request,
        changed_files=tuple(changed_files),
        project_context=ProjectContext(),
        config=review_config,
    )


@pytest.fixture
def recording_sleep() -> RecordingSleep:
    return RecordingSleep()

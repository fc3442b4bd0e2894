"""Performance and logic focused analyzers."""

from argus.agents.base import LLMAnalyzer
from argus.config import AnalyzerKind
from argus.models.context import ChangedFile, ReviewContext
from argus.models.findings import Issue, Severity

TEST_MARKERS = (".test.", ".spec.", "__tests__", "test_", "_test.")


class PerformanceAnalyzer(LLMAnalyzer):
    """Analyzer specialized in performance optimization."""

    KIND = AnalyzerKind.PERFORMANCE
    CAPABILITIES = [
        "Algorithmic complexity review",
        "Resource and memory usage",
        "Database query efficiency",
        "Caching opportunities",
    ]
    BASE_CONFIDENCE = 0.7
    ISSUE_CATEGORIES = "complexity|memory|database|network|caching|concurrency"

    SYSTEM_PROMPT = """You are a performance engineer reviewing code changes.

Focus on:
- Algorithm complexity (O(n²) where O(n) is possible)
- Memory leaks and resource management
- N+1 queries and unnecessary allocations
- Blocking calls in async code

Ignore security and style issues.
"""

    def should_analyze_file(self, file: ChangedFile) -> bool:
        name = file.filename.lower()
        return super().should_analyze_file(file) and not any(m in name for m in TEST_MARKERS)


class LogicAnalyzer(LLMAnalyzer):
    """Analyzer focused on correctness and edge cases."""

    KIND = AnalyzerKind.LOGIC
    CAPABILITIES = [
        "Logic error detection",
        "Edge case analysis",
        "Error handling review",
        "State management review",
    ]
    BASE_CONFIDENCE = 0.8
    ISSUE_CATEGORIES = "logic-error|edge-case|error-handling|null-safety|state|race-condition"

    SYSTEM_PROMPT = """You are a code reviewer focused on correctness.

Focus on:
- Logic errors and off-by-one mistakes
- Unhandled edge cases and null values
- Missing or swallowed error handling
- Race conditions and inconsistent state

Ignore style and formatting.
"""

    def calculate_confidence(self, issues: list[Issue], context: ReviewContext) -> float:
        confidence = self.BASE_CONFIDENCE
        if issues:
            confidence += 0.1
        if any(i.severity in (Severity.CRITICAL, Severity.ERROR) for i in issues):
            confidence += 0.05
        return max(0.1, min(1.0, confidence))

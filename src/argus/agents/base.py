"""Base classes for review analyzers."""

import logging
import time
from typing import Any

from argus.agents.llm_client import LLMClient
from argus.config import AnalyzerKind
from argus.models.context import ChangedFile, ReviewContext
from argus.models.findings import CoachingInfo, Issue, Severity, SuggestedFix
from argus.models.review import AnalysisResult

logger = logging.getLogger(__name__)

CODE_EXTENSIONS = (".js", ".ts", ".jsx", ".tsx", ".py", ".java", ".php", ".rb", ".go", ".cs")


class Analyzer:
    """Interface shared by every analyzer kind.

    ``execute`` may suspend on I/O, must not mutate the context, and must
    return a result whose ``agent`` equals ``agent_id``.
    """

    KIND: AnalyzerKind
    CAPABILITIES: list[str] = []

    @property
    def agent_id(self) -> str:
        """Identifier reported in results; the kind's value."""
        return self.KIND.value

    @property
    def capabilities(self) -> list[str]:
        return self.CAPABILITIES

    async def execute(self, context: ReviewContext) -> AnalysisResult:
        raise NotImplementedError


class LLMAnalyzer(Analyzer):
    """Analyzer that asks an LLM about each relevant changed file."""

    SYSTEM_PROMPT: str = "You are a code reviewer."
    BASE_CONFIDENCE: float = 0.7
    ISSUE_CATEGORIES: str = "general"

    def __init__(self, client: LLMClient) -> None:
        """Initialize the analyzer.

        Args:
            client: LLM client used for every request
        """
        self.client = client

    async def execute(self, context: ReviewContext) -> AnalysisResult:
        """Analyze every relevant changed file and add local checks.

        Errors from the LLM client propagate so the orchestrator can retry.
        """
        start_time = time.monotonic()
        logger.info(f"{self.agent_id} analyzer: starting analysis")

        issues: list[Issue] = []
        for file in context.changed_files:
            if file.status == "removed" or not file.patch:
                continue
            if self.should_analyze_file(file):
                issues.extend(await self.analyze_file(file, context))

        issues.extend(self.local_checks(context))

        elapsed_ms = int((time.monotonic() - start_time) * 1000)
        logger.info(f"{self.agent_id} analyzer: found {len(issues)} issues")

        return AnalysisResult(
            agent=self.agent_id,
            confidence=self.calculate_confidence(issues, context),
            issues=issues,
            summary=self.generate_summary(issues),
            execution_time_ms=elapsed_ms,
        )

    async def analyze_file(self, file: ChangedFile, context: ReviewContext) -> list[Issue]:
        response = await self.client.complete_json(
            system_prompt=self._get_system_prompt(),
            user_prompt=self._build_file_prompt(file, context),
        )
        return self.parse_issues(response, file.filename)

    def should_analyze_file(self, file: ChangedFile) -> bool:
        return file.filename.endswith(CODE_EXTENSIONS)

    def local_checks(self, context: ReviewContext) -> list[Issue]:
        """Deterministic checks that need no LLM call."""
        return []

    def calculate_confidence(self, issues: list[Issue], context: ReviewContext) -> float:
        return self.BASE_CONFIDENCE

    def generate_summary(self, issues: list[Issue]) -> str:
        if not issues:
            return f"No {self.agent_id} issues detected in the code changes."

        counts = {s: 0 for s in Severity}
        for issue in issues:
            counts[issue.severity] += 1
        parts = [
            f"{counts[s]} {s.value}"
            for s in sorted(Severity, key=lambda s: s.rank, reverse=True)
            if counts[s]
        ]
        return f"Found {len(issues)} {self.agent_id} issue(s): {', '.join(parts)}"

    def _get_system_prompt(self) -> str:
        """Get the system prompt for this analyzer."""
        return f"""{self.SYSTEM_PROMPT}

Respond ONLY with a JSON object in this exact format:
{{
    "issues": [
        {{
            "severity": "critical|error|warning|info",
            "category": "{self.ISSUE_CATEGORIES}",
            "title": "Brief, actionable title",
            "description": "What is wrong and why it matters",
            "line": 10,
            "endLine": 12,
            "snippet": "relevant code",
            "suggestion": {{"comment": "How to fix it", "diff": "optional code change"}},
            "rationale": "Why this matters",
            "bestPractice": "The practice to follow"
        }}
    ]
}}

Only report issues you can clearly identify. Return an empty list if the code is fine.
"""

    def _build_file_prompt(self, file: ChangedFile, context: ReviewContext) -> str:
        """Build the user prompt for one file."""
        return f"""{context.to_prompt_context()}

## File: {file.filename} (priority: {file.priority.value})

## Code Changes (Diff)
```diff
{file.patch}
```

## Full File Content
```
{file.content or 'Content not available'}
```
"""

    def parse_issues(self, response: Any, filename: str) -> list[Issue]:
        """Parse issues from an LLM response, skipping malformed entries."""
        if isinstance(response, list):
            raw_issues = response
        elif isinstance(response, dict):
            raw_issues = response.get("issues", [])
        else:
            raw_issues = []

        if not isinstance(raw_issues, list):
            logger.warning(f"Invalid {self.agent_id} response for {filename}: issues is not a list")
            return []

        issues = []
        for raw in raw_issues:
            if not isinstance(raw, dict):
                logger.warning(f"Skipping non-object issue from {self.agent_id}: {raw}")
                continue
            try:
                issues.append(self._parse_issue(raw, filename))
            except (KeyError, TypeError, ValueError) as e:
                logger.warning(f"Failed to parse issue: {e}, raw: {raw}")
        return issues

    def _parse_issue(self, raw: dict[str, Any], filename: str) -> Issue:
        for key in ("title", "description"):
            value = raw.get(key)
            if not isinstance(value, str) or not value.strip():
                raise ValueError(f"missing {key}")

        category = raw.get("category") or "general"
        suggestion = raw.get("suggestion")
        if isinstance(suggestion, str):
            suggestion = SuggestedFix(comment=suggestion)
        elif isinstance(suggestion, dict) and suggestion.get("comment"):
            suggestion = SuggestedFix(comment=suggestion["comment"], diff=suggestion.get("diff"))
        else:
            suggestion = None

        coaching = None
        if raw.get("bestPractice"):
            coaching = CoachingInfo(
                rationale=raw.get("rationale", ""),
                best_practice=raw["bestPractice"],
                resources=self.get_resources(category),
                level=self.get_level(category),
            )

        return Issue(
            severity=Severity(str(raw.get("severity", "warning")).lower()),
            category=f"{self.agent_id}-{category}",
            title=raw["title"],
            description=raw["description"],
            file=filename,
            line=int(raw["line"]) if raw.get("line") else None,
            end_line=int(raw["endLine"]) if raw.get("endLine") else None,
            snippet=raw.get("snippet"),
            suggestion=suggestion,
            coaching=coaching,
        )

    def get_resources(self, category: str) -> list[str]:
        return []

    def get_level(self, category: str) -> str:
        return "beginner"

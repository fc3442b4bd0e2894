"""Review synthesizer for combining analyzer results into one review."""

import logging
from dataclasses import replace

from argus.config import ReviewConfig, StrictnessPolicy, ensure_valid, get_strictness_policy
from argus.models.context import ReviewContext
from argus.models.findings import CoachingInfo, Issue, IssueSource
from argus.models.review import (
    AgentPerformance,
    AnalysisResult,
    FinalReview,
    LintResult,
    ReviewMetrics,
)

logger = logging.getLogger(__name__)

MAX_COACHING_ENTRIES = 5


class ReviewSynthesizer:
    """Merges analyzer results into a gated FinalReview."""

    def __init__(self, config: ReviewConfig) -> None:
        """Initialize the synthesizer.

        Args:
            config: Review configuration

        Raises:
            ConfigurationError: If the configuration is invalid
        """
        ensure_valid(config)
        self.config = config

    def synthesize(
        self,
        results: list[AnalysisResult],
        lint_result: LintResult,
        context: ReviewContext,
        total_execution_time_ms: int | None = None,
    ) -> FinalReview:
        """Synthesize analyzer results and linting into the final review.

        Algorithm:
        1. Tag every issue with its analyzer and weighted confidence
        2. Keep one issue per (file, line, category)
        3. Split into blocking issues and recommendations by strictness
        4. Collect coaching, summary and metrics

        Args:
            results: One result per analyzer, in registration order
            lint_result: Linter output, passed through untouched
            context: Review context
            total_execution_time_ms: Wall-clock time of the whole run, if known

        Returns:
            The final review
        """
        policy = get_strictness_policy(context.config.strictness_level)

        tagged = self._aggregate_issues(results)
        deduplicated = self._deduplicate_issues(tagged)
        blocking, recommendations = self._categorize_issues(deduplicated, policy)
        coaching = self._generate_coaching(deduplicated, context.config)
        summary = self._generate_summary(results, blocking, recommendations, context)
        metrics = self._calculate_metrics(results, deduplicated, total_execution_time_ms)

        logger.info(
            f"Synthesis complete: {len(blocking)} blocking, "
            f"{len(recommendations)} recommendations"
        )

        return FinalReview(
            summary=summary,
            blocking_issues=blocking,
            recommendations=recommendations,
            linting_summary=lint_result,
            coaching=coaching,
            metrics=metrics,
            failed_agents=[r.agent for r in results if r.degraded],
        )

    def _aggregate_issues(self, results: list[AnalysisResult]) -> list[Issue]:
        """Flatten all issues, tagging each with its source analyzer."""
        tagged = []
        for result in results:
            source = IssueSource(agent=result.agent, confidence=result.confidence)
            for issue in result.issues:
                tagged.append(replace(issue, source=source))
        return tagged

    def _deduplicate_issues(self, issues: list[Issue]) -> list[Issue]:
        """Keep one issue per (file, line, category), in first-seen key order."""
        retained: dict[tuple, Issue] = {}

        for issue in issues:
            key = issue.dedup_key
            existing = retained.get(key)
            if existing is None or self._should_replace(existing, issue):
                retained[key] = issue

        if len(retained) < len(issues):
            logger.debug(f"Merged {len(issues) - len(retained)} duplicate issues")

        return list(retained.values())

    def _should_replace(self, existing: Issue, candidate: Issue) -> bool:
        """Higher severity wins; on equal severity, higher confidence wins."""
        if candidate.severity.rank != existing.severity.rank:
            return candidate.severity.rank > existing.severity.rank
        return _confidence(candidate) > _confidence(existing)

    def _categorize_issues(
        self, issues: list[Issue], policy: StrictnessPolicy
    ) -> tuple[list[Issue], list[Issue]]:
        """Split issues into blocking issues and recommendations."""
        blocking = []
        recommendations = []

        for issue in issues:
            if self._is_blocking(issue, policy):
                blocking.append(issue)
            else:
                recommendations.append(issue)

        # sort() is stable, so equal severities keep dedup order
        blocking.sort(key=lambda i: i.severity.rank, reverse=True)
        recommendations.sort(key=lambda i: i.severity.rank, reverse=True)

        return blocking, recommendations

    def _is_blocking(self, issue: Issue, policy: StrictnessPolicy) -> bool:
        if not policy.block_on_issues:
            return False
        return issue.severity.rank >= policy.severity_threshold.rank

    def _generate_coaching(self, issues: list[Issue], config: ReviewConfig) -> list[CoachingInfo]:
        """Collect the first coaching payload for each distinct best practice."""
        if not config.enable_coaching:
            return []

        coaching: dict[str, CoachingInfo] = {}
        for issue in issues:
            if issue.coaching and issue.coaching.best_practice not in coaching:
                coaching[issue.coaching.best_practice] = issue.coaching

        return list(coaching.values())[:MAX_COACHING_ENTRIES]

    def _generate_summary(
        self,
        results: list[AnalysisResult],
        blocking: list[Issue],
        recommendations: list[Issue],
        context: ReviewContext,
    ) -> str:
        """Generate a short human-readable summary of the review."""
        header = (
            f"Reviewed {len(context.changed_files)} changed files "
            f"with {len(results)} analyzers."
        )

        if not blocking and not recommendations:
            return f"{header} ✅ All clear: no significant issues detected."

        parts = [header]
        if blocking:
            parts.append(f"🚫 {len(blocking)} blocking issue(s) must be resolved before merging.")
        parts.append(f"💡 {len(recommendations)} recommendation(s).")

        contributors = [r for r in results if r.issues]
        if contributors:
            breakdown = ", ".join(
                f"{r.agent}: {len(r.issues)} issues ({round(r.confidence * 100)}% confidence)"
                for r in contributors
            )
            parts.append(f"Findings by analyzer: {breakdown}")

        return " ".join(parts)

    def _calculate_metrics(
        self,
        results: list[AnalysisResult],
        issues: list[Issue],
        total_execution_time_ms: int | None,
    ) -> ReviewMetrics:
        """Calculate performance and quality metrics."""
        if total_execution_time_ms is None:
            total_execution_time_ms = sum(r.execution_time_ms for r in results)

        agent_performance = {
            r.agent: AgentPerformance(
                issues_found=len(r.issues),
                execution_time_ms=r.execution_time_ms,
                average_confidence=r.confidence,
            )
            for r in results
        }

        return ReviewMetrics(
            files_reviewed=len({i.file for i in issues}),
            issues_found=len(issues),
            execution_time_ms=total_execution_time_ms,
            agent_performance=agent_performance,
        )


def _confidence(issue: Issue) -> float:
    return issue.source.confidence if issue.source else 0.0

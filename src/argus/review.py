"""End-to-end review flow: prioritize, analyze, synthesize."""

import logging
import time
from collections.abc import Mapping
from dataclasses import dataclass

from argus.agents.llm_client import LLMClient, LLMConfig
from argus.agents.registry import build_factories
from argus.config import AnalyzerKind, ReviewConfig, ensure_valid
from argus.github.client import GitHubClient
from argus.models.context import ChangedFile, ProjectContext, PullRequestInfo, ReviewContext
from argus.models.review import FinalReview, LintResult
from argus.orchestrator.orchestrator import (
    AnalyzerFactory,
    AnalyzerOrchestrator,
    SleepFn,
)
from argus.orchestrator.prioritizer import FilePrioritizer, glob_match
from argus.orchestrator.synthesizer import ReviewSynthesizer

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReviewOutcome:
    """Result of one review run."""

    final_review: FinalReview
    # Weights to use for the next run; unchanged when learning mode is off
    agent_weights: dict[str, float]


def is_excluded(filename: str, exclude_paths: list[str]) -> bool:
    return any(glob_match(filename, pattern) for pattern in exclude_paths)


def select_files(
    files: list[ChangedFile],
    config: ReviewConfig,
    project_context: ProjectContext | None = None,
) -> list[ChangedFile]:
    """Drop excluded paths, prioritize, and cap to ``max_files``.

    Args:
        files: Changed files as reported by the host
        config: Review configuration
        project_context: Context whose critical files and areas drive
            prioritization (default: the one in config)

    Returns:
        Files to review, most critical first
    """
    kept = [f for f in files if not is_excluded(f.filename, config.exclude_paths)]
    if len(kept) < len(files):
        logger.info(f"Excluded {len(files) - len(kept)} files by exclude_paths")

    if project_context is None:
        project_context = config.project

    prioritized = FilePrioritizer().prioritize_files(kept, project_context)

    if config.max_files and len(prioritized) > config.max_files:
        logger.warning(
            f"Reviewing {config.max_files} of {len(prioritized)} files (max_files limit)"
        )
        prioritized = prioritized[: config.max_files]

    return prioritized


async def run_review(
    config: ReviewConfig,
    pull_request: PullRequestInfo,
    changed_files: list[ChangedFile],
    project_context: ProjectContext | None,
    factories: Mapping[AnalyzerKind, AnalyzerFactory],
    lint_result: LintResult | None = None,
    sleep: SleepFn | None = None,
) -> ReviewOutcome:
    """Review a set of changed files with every active analyzer.

    Args:
        config: Review configuration
        pull_request: Metadata of the pull request under review
        changed_files: Files changed by the pull request
        project_context: Project context (default: the one in config)
        factories: Analyzer factories keyed by AnalyzerKind
        lint_result: Linter output to pass through (default: empty)
        sleep: Backoff sleep override, mainly for tests

    Returns:
        ReviewOutcome with the final review and next-run agent weights

    Raises:
        ConfigurationError: If the configuration is invalid or a required
            analyzer is unavailable
    """
    ensure_valid(config)
    start_time = time.monotonic()

    if project_context is None:
        project_context = config.project

    files = select_files(changed_files, config, project_context)
    context = ReviewContext(
        pull_request=pull_request,
        changed_files=tuple(files),
        project_context=project_context,
        config=config,
    )

    logger.info(f"Reviewing {pull_request.repo_name}#{pull_request.number}: {pull_request.title}")

    orchestrator = AnalyzerOrchestrator(config, factories, sleep=sleep)
    orchestrator.validate_availability()

    results = await orchestrator.execute_review(context)

    total_ms = int((time.monotonic() - start_time) * 1000)
    final_review = ReviewSynthesizer(config).synthesize(
        results,
        lint_result or LintResult.empty(),
        context,
        total_execution_time_ms=total_ms,
    )

    # Learning reads pre-weight confidence
    performance = {
        r.agent: r.confidence if r.raw_confidence is None else r.raw_confidence
        for r in results
    }
    agent_weights = orchestrator.adjust_agent_weights(performance)

    return ReviewOutcome(final_review=final_review, agent_weights=agent_weights)


async def review_pull_request(repo: str, pr_number: int, config: ReviewConfig) -> ReviewOutcome:
    """Fetch a pull request from GitHub and review it.

    Args:
        repo: Repository in "owner/name" format
        pr_number: Pull request number
        config: Review configuration, including credentials

    Returns:
        ReviewOutcome for the pull request
    """
    ensure_valid(config)

    gh = GitHubClient.from_settings(config.github)
    pull_request = gh.get_pull_request_info(repo, pr_number)
    changed_files = gh.get_changed_files(repo, pr_number)

    async with LLMClient(LLMConfig.from_settings(config.model)) as client:
        factories = build_factories(client, config)
        return await run_review(
            config,
            pull_request,
            changed_files,
            config.project,
            factories,
        )

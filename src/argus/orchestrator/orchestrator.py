"""Analyzer orchestrator for bounded-concurrency review execution."""

import asyncio
import contextlib
import logging
import math
import time
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass, replace
from enum import Enum

from argus.agents.base import Analyzer
from argus.config import (
    MAX_WEIGHT,
    MIN_WEIGHT,
    AnalyzerDescriptor,
    AnalyzerKind,
    ArgusError,
    ConfigurationError,
    ReviewConfig,
    ensure_valid,
)
from argus.models.context import ReviewContext
from argus.models.review import AnalysisResult

logger = logging.getLogger(__name__)

AnalyzerFactory = Callable[[], Analyzer]
SleepFn = Callable[[float], Awaitable[None]]

HIGH_PERFORMANCE = 0.8
LOW_PERFORMANCE = 0.4
WEIGHT_STEP = 0.1


class AnalyzerExecutionError(ArgusError):
    """Raised when an analyzer's execute call fails."""


class AnalyzerValidationError(ArgusError):
    """Raised when an analyzer returns a malformed result."""


class RunState(Enum):
    """Lifecycle of a single analyzer invocation."""

    PENDING = "pending"
    RUNNING = "running"
    RETRY_SCHEDULED = "retry_scheduled"
    SUCCEEDED = "succeeded"
    EXHAUSTED = "exhausted"


@dataclass
class AnalyzerRun:
    """Bookkeeping for one analyzer across its attempts."""

    agent_id: str
    max_attempts: int
    state: RunState = RunState.PENDING
    attempts: int = 0
    last_error: str = ""

    @property
    def has_attempts_left(self) -> bool:
        return self.attempts < self.max_attempts

    def transition(self, state: RunState) -> None:
        logger.debug(
            f"{self.agent_id}: {self.state.value} -> {state.value} (attempt {self.attempts})"
        )
        self.state = state


def validate_result(result: AnalysisResult | None, expected_agent_id: str) -> None:
    """Validate an analyzer result format and content.

    Raises:
        AnalyzerValidationError: If the result is malformed
    """
    if result is None:
        raise AnalyzerValidationError("Agent returned no result")

    if not isinstance(result, AnalysisResult):
        raise AnalyzerValidationError(
            f"Agent returned {type(result).__name__} instead of AnalysisResult"
        )

    if result.agent != expected_agent_id:
        raise AnalyzerValidationError(
            f"Agent type mismatch: expected {expected_agent_id}, got {result.agent}"
        )

    confidence = result.confidence
    if (
        isinstance(confidence, bool)
        or not isinstance(confidence, (int, float))
        or math.isnan(confidence)
        or not 0.0 <= confidence <= 1.0
    ):
        raise AnalyzerValidationError(f"Invalid confidence score: {confidence}")

    if not isinstance(result.issues, list):
        raise AnalyzerValidationError("Issues must be a list")

    if not isinstance(result.summary, str):
        raise AnalyzerValidationError("Summary must be a string")

    for issue in result.issues:
        for name in ("severity", "title", "description", "file"):
            if not getattr(issue, name, None):
                raise AnalyzerValidationError(f"Invalid issue format: missing {name}")


def weighted_confidence(raw_confidence: float, weight: float) -> float:
    """Apply an analyzer weight, then cap at 1.0."""
    return min(1.0, raw_confidence * weight)


def adjust_agent_weights(
    current_weights: Mapping[str, float], performance: Mapping[str, float]
) -> dict[str, float]:
    """Compute new agent weights from observed performance.

    High performers (> 0.8) gain 0.1, low performers (< 0.4) lose 0.1, and
    the result is clamped to [0, 2]. Agents without a performance entry
    keep their weight.
    """
    new_weights = dict(current_weights)

    for agent, score in performance.items():
        current = current_weights.get(agent, 0.0)
        if score > HIGH_PERFORMANCE:
            adjustment = WEIGHT_STEP
        elif score < LOW_PERFORMANCE:
            adjustment = -WEIGHT_STEP
        else:
            adjustment = 0.0

        new_weight = round(max(MIN_WEIGHT, min(MAX_WEIGHT, current + adjustment)), 4)
        new_weights[agent] = new_weight

        if new_weight != current:
            logger.info(f"Adjusted {agent} weight: {current} -> {new_weight}")

    return new_weights


class AnalyzerOrchestrator:
    """Runs the active analyzers concurrently and never fails because of one."""

    def __init__(
        self,
        config: ReviewConfig,
        factories: Mapping[AnalyzerKind, AnalyzerFactory],
        sleep: SleepFn | None = None,
        clock: Callable[[], float] | None = None,
    ) -> None:
        """Initialize the orchestrator.

        Args:
            config: Review configuration (validated here)
            factories: Constructors for each analyzer kind
            sleep: Coroutine used for retry backoff (default: asyncio.sleep)
            clock: Monotonic clock in seconds (default: time.monotonic)

        Raises:
            ConfigurationError: If the configuration is invalid
        """
        ensure_valid(config)
        self.config = config
        self._sleep = sleep or asyncio.sleep
        self._clock = clock or time.monotonic
        self._in_flight = 0
        self.analyzers: dict[AnalyzerKind, Analyzer] = {}
        self._initialize_analyzers(factories)

    def _initialize_analyzers(self, factories: Mapping[AnalyzerKind, AnalyzerFactory]) -> None:
        """Instantiate every enabled analyzer kind, in registration order."""
        for kind in AnalyzerKind:
            if not self.config.is_enabled(kind):
                logger.info(f"Skipping {kind.value} analyzer (not in focus or zero weight)")
                continue

            factory = factories.get(kind)
            if factory is None:
                logger.warning(f"No factory registered for {kind.value} analyzer")
                continue

            try:
                self.analyzers[kind] = factory()
                logger.info(f"Initialized {kind.value} analyzer")
            except Exception as e:
                logger.warning(f"Failed to initialize {kind.value} analyzer: {e}")

        logger.info(f"Initialized {len(self.analyzers)} analyzers")

    @property
    def descriptors(self) -> list[AnalyzerDescriptor]:
        """Descriptors of the active analyzers."""
        return [
            AnalyzerDescriptor(
                kind=kind,
                capabilities=tuple(analyzer.capabilities),
                weight=self.config.weight_for(kind),
            )
            for kind, analyzer in self.analyzers.items()
        ]

    def get_agent_capabilities(self) -> dict[str, list[str]]:
        return {kind.value: list(a.capabilities) for kind, a in self.analyzers.items()}

    def validate_availability(self) -> None:
        """Check that every required analyzer is active.

        Raises:
            ConfigurationError: If a focus area with positive weight has no
                active analyzer
        """
        required = [
            area for area in self.config.focus_areas if self.config.weight_for(area) > 0
        ]
        active = {kind.value for kind in self.analyzers}
        missing = [area for area in required if area not in active]

        if missing:
            raise ConfigurationError(f"Missing required agents: {', '.join(missing)}")

        logger.info(f"All required agents are available: {', '.join(required)}")

    async def execute_review(self, context: ReviewContext) -> list[AnalysisResult]:
        """Execute every active analyzer under the concurrency limit.

        Args:
            context: Review context shared by all analyzers

        Returns:
            One result per active analyzer, in registration order
        """
        logger.info(
            f"Starting review with {len(self.analyzers)} analyzers "
            f"(concurrency {self.config.orchestrator.concurrency})"
        )
        start = self._clock()
        semaphore = asyncio.Semaphore(self.config.orchestrator.concurrency)

        self._in_flight += 1
        try:
            tasks = [
                asyncio.create_task(
                    self.execute_with_retry(analyzer, context, limiter=semaphore),
                    name=f"analyzer-{kind.value}",
                )
                for kind, analyzer in self.analyzers.items()
            ]
            results = list(await asyncio.gather(*tasks))
        finally:
            self._in_flight -= 1

        failed = [r.agent for r in results if r.degraded]
        elapsed_ms = int((self._clock() - start) * 1000)
        logger.info(
            f"Review complete in {elapsed_ms}ms: "
            f"{len(results) - len(failed)}/{len(results)} analyzers succeeded"
        )
        if failed:
            logger.warning(f"Degraded analyzers: {', '.join(failed)}")

        return results

    async def execute_with_retry(
        self,
        analyzer: Analyzer,
        context: ReviewContext,
        max_retries: int | None = None,
        limiter: asyncio.Semaphore | None = None,
    ) -> AnalysisResult:
        """Run one analyzer, retrying with exponential backoff.

        Args:
            analyzer: Analyzer to run
            context: Review context
            max_retries: Retries after the first attempt (default from config)
            limiter: Semaphore held for each attempt and released during
                backoff

        Returns:
            The weighted result, or a degraded result once retries are
            exhausted. Never raises for analyzer failures.
        """
        if max_retries is None:
            max_retries = self.config.orchestrator.max_retries

        agent_id = analyzer.agent_id
        weight = self.config.weight_for(agent_id)
        run = AnalyzerRun(agent_id=agent_id, max_attempts=max_retries + 1)
        start = self._clock()

        while True:
            run.attempts += 1
            run.transition(RunState.RUNNING)

            try:
                async with limiter or contextlib.nullcontext():
                    result = await self._attempt(analyzer, context)
            except (AnalyzerExecutionError, AnalyzerValidationError) as e:
                run.last_error = str(e)
            else:
                run.transition(RunState.SUCCEEDED)
                elapsed_ms = self._elapsed_ms(start)
                logger.debug(f"{agent_id} analyzer completed in {elapsed_ms}ms")
                return replace(
                    result,
                    confidence=weighted_confidence(result.confidence, weight),
                    raw_confidence=result.confidence,
                    execution_time_ms=elapsed_ms,
                )

            if run.has_attempts_left:
                run.transition(RunState.RETRY_SCHEDULED)
                delay = self.backoff_delay(run.attempts)
                logger.warning(
                    f"{agent_id} analyzer attempt {run.attempts} failed: {run.last_error}. "
                    f"Retrying in {delay:g}s"
                )
                await self._sleep(delay)
                continue

            run.transition(RunState.EXHAUSTED)
            logger.error(
                f"{agent_id} analyzer failed after {run.attempts} attempts: {run.last_error}"
            )
            return AnalysisResult(
                agent=agent_id,
                confidence=0.0,
                issues=[],
                summary=f"Agent failed: {run.last_error}",
                execution_time_ms=self._elapsed_ms(start),
                degraded=True,
            )

    async def _attempt(self, analyzer: Analyzer, context: ReviewContext) -> AnalysisResult:
        try:
            result = await analyzer.execute(context)
        except Exception as e:
            raise AnalyzerExecutionError(str(e) or type(e).__name__) from e
        validate_result(result, analyzer.agent_id)
        return result

    def backoff_delay(self, attempt: int) -> float:
        """Delay in seconds before the retry that follows ``attempt``."""
        return self.config.orchestrator.backoff_base_seconds * 2 ** (attempt - 1)

    def adjust_agent_weights(self, performance: Mapping[str, float]) -> dict[str, float]:
        """Compute learning-mode weights once a run has fully settled.

        Returns the current weights unchanged when learning mode is off. The
        caller threads the result back into configuration.

        Raises:
            RuntimeError: If a review is still in flight
        """
        if self._in_flight:
            raise RuntimeError("Cannot adjust agent weights while a review is running")

        if not self.config.learning_mode:
            return dict(self.config.agent_weights)

        logger.info("Adjusting agent weights based on performance")
        return adjust_agent_weights(self.config.agent_weights, performance)

    def _elapsed_ms(self, start: float) -> int:
        return int((self._clock() - start) * 1000)

"""Mapping from analyzer kinds to their implementations."""

from collections.abc import Callable
from functools import partial

from argus.agents.architecture import ArchitectureAnalyzer, TestingAnalyzer
from argus.agents.base import Analyzer, LLMAnalyzer
from argus.agents.llm_client import LLMClient
from argus.agents.performance import LogicAnalyzer, PerformanceAnalyzer
from argus.agents.security import SecurityAnalyzer
from argus.config import AnalyzerKind, ReviewConfig

ANALYZER_CLASSES: dict[AnalyzerKind, type[LLMAnalyzer]] = {
    AnalyzerKind.SECURITY: SecurityAnalyzer,
    AnalyzerKind.ARCHITECTURE: ArchitectureAnalyzer,
    AnalyzerKind.LOGIC: LogicAnalyzer,
    AnalyzerKind.PERFORMANCE: PerformanceAnalyzer,
    AnalyzerKind.TESTING: TestingAnalyzer,
}


def build_factories(
    client: LLMClient, config: ReviewConfig
) -> dict[AnalyzerKind, Callable[[], Analyzer]]:
    """Build analyzer factories for every enabled kind.

    Args:
        client: Shared LLM client passed to each analyzer
        config: Review configuration deciding which kinds are enabled

    Returns:
        Factories keyed by kind, in registration order
    """
    return {
        kind: partial(cls, client)
        for kind, cls in ANALYZER_CLASSES.items()
        if config.is_enabled(kind)
    }

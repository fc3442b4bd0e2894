"""Review analyzers for Argus."""

from argus.agents.architecture import ArchitectureAnalyzer, TestingAnalyzer
from argus.agents.base import Analyzer, LLMAnalyzer
from argus.agents.llm_client import LLMClient, LLMConfig
from argus.agents.performance import LogicAnalyzer, PerformanceAnalyzer
from argus.agents.registry import ANALYZER_CLASSES, build_factories
from argus.agents.security import SecurityAnalyzer

__all__ = [
    "ANALYZER_CLASSES",
    "Analyzer",
    "ArchitectureAnalyzer",
    "LLMAnalyzer",
    "LLMClient",
    "LLMConfig",
    "LogicAnalyzer",
    "PerformanceAnalyzer",
    "SecurityAnalyzer",
    "TestingAnalyzer",
    "build_factories",
]

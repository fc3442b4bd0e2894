"""Orchestrator components for Argus."""

from argus.orchestrator.orchestrator import (
    AnalyzerExecutionError,
    AnalyzerOrchestrator,
    AnalyzerValidationError,
    adjust_agent_weights,
    validate_result,
)
from argus.orchestrator.prioritizer import FilePrioritizer
from argus.orchestrator.synthesizer import ReviewSynthesizer

__all__ = [
    "AnalyzerExecutionError",
    "AnalyzerOrchestrator",
    "AnalyzerValidationError",
    "FilePrioritizer",
    "ReviewSynthesizer",
    "adjust_agent_weights",
    "validate_result",
]

"""Argus - multi-analyzer code review orchestration."""

__version__ = "0.1.0"

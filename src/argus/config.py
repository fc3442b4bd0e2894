"""Configuration loading and validation for Argus."""

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from enum import Enum
from pathlib import Path
from typing import Any

import yaml

from argus.models.context import ProjectContext
from argus.models.findings import Severity

logger = logging.getLogger(__name__)

MIN_WEIGHT = 0.0
MAX_WEIGHT = 2.0

DEFAULT_CONFIG_PATHS = (Path("argus.yaml"), Path(".github/argus-config.yml"))


class ArgusError(Exception):
    """Base class for Argus errors."""


class ConfigurationError(ArgusError):
    """Raised when configuration is invalid. Always fatal, never retried."""


class StrictnessLevel(Enum):
    """How strictly findings gate a change."""

    COACHING = "coaching"
    STANDARD = "standard"
    STRICT = "strict"
    BLOCKING = "blocking"


class AnalyzerKind(Enum):
    """Closed set of analyzer kinds, in registration order."""

    SECURITY = "security"
    ARCHITECTURE = "architecture"
    LOGIC = "logic"
    PERFORMANCE = "performance"
    TESTING = "testing"


# "documentation" is accepted as a focus area but has no analyzer of its own.
VALID_FOCUS_AREAS = frozenset({kind.value for kind in AnalyzerKind} | {"documentation"})


@dataclass(frozen=True)
class StrictnessPolicy:
    """Blocking behaviour for one strictness level."""

    block_on_issues: bool
    severity_threshold: Severity


STRICTNESS_POLICIES: dict[StrictnessLevel, StrictnessPolicy] = {
    StrictnessLevel.COACHING: StrictnessPolicy(False, Severity.INFO),
    StrictnessLevel.STANDARD: StrictnessPolicy(False, Severity.WARNING),
    StrictnessLevel.STRICT: StrictnessPolicy(True, Severity.WARNING),
    StrictnessLevel.BLOCKING: StrictnessPolicy(True, Severity.ERROR),
}

DEFAULT_AGENT_WEIGHTS: dict[str, float] = {
    "security": 1.0,
    "architecture": 0.8,
    "logic": 1.0,
    "performance": 0.6,
    "testing": 0.4,
}

DEFAULT_EXCLUDE_PATHS = [
    "node_modules/**",
    "dist/**",
    "build/**",
    "coverage/**",
    "**/*.min.js",
    "**/*.bundle.js",
    "**/*.generated.*",
    "**/*.lock",
    "vendor/**",
    ".git/**",
]


def get_strictness_policy(level: str | StrictnessLevel) -> StrictnessPolicy:
    """Look up the policy for a strictness level.

    Raises:
        ConfigurationError: If the level is unknown
    """
    try:
        return STRICTNESS_POLICIES[StrictnessLevel(level)]
    except ValueError as e:
        raise ConfigurationError(f"Invalid strictness level: {level}") from e


@dataclass(frozen=True)
class AnalyzerDescriptor:
    """Static description of one analyzer kind."""

    kind: AnalyzerKind
    capabilities: tuple[str, ...]
    weight: float

    def __post_init__(self) -> None:
        if not MIN_WEIGHT <= self.weight <= MAX_WEIGHT:
            raise ConfigurationError(
                f"Invalid weight for {self.kind.value}: {self.weight} "
                f"(must be {MIN_WEIGHT:g}-{MAX_WEIGHT:g})"
            )

    @property
    def id(self) -> str:
        return self.kind.value


@dataclass
class OrchestratorSettings:
    """Orchestrator configuration."""

    concurrency: int = 3
    max_retries: int = 2
    backoff_base_seconds: float = 1.0


@dataclass
class ModelSettings:
    """LLM configuration shared by the analyzers."""

    api_key: str = ""
    model: str = "claude-sonnet-4-20250514"
    base_url: str = "https://api.anthropic.com/v1"
    temperature: float = 0.1
    max_tokens: int = 4000
    timeout_seconds: int = 120


@dataclass
class GitHubSettings:
    """GitHub integration configuration."""

    token: str = ""
    base_url: str | None = None


@dataclass
class ReviewConfig:
    """Complete review configuration."""

    strictness_level: str = StrictnessLevel.STANDARD.value
    focus_areas: list[str] = field(
        default_factory=lambda: ["security", "architecture", "logic"]
    )
    agent_weights: dict[str, float] = field(
        default_factory=lambda: dict(DEFAULT_AGENT_WEIGHTS)
    )
    learning_mode: bool = True
    enable_coaching: bool = True
    max_files: int = 50
    exclude_paths: list[str] = field(default_factory=lambda: list(DEFAULT_EXCLUDE_PATHS))
    orchestrator: OrchestratorSettings = field(default_factory=OrchestratorSettings)
    model: ModelSettings = field(default_factory=ModelSettings)
    github: GitHubSettings = field(default_factory=GitHubSettings)
    project: ProjectContext = field(default_factory=ProjectContext)

    def weight_for(self, kind: AnalyzerKind | str) -> float:
        key = kind.value if isinstance(kind, AnalyzerKind) else kind
        return self.agent_weights.get(key, 0.0)

    def is_enabled(self, kind: AnalyzerKind) -> bool:
        """An analyzer runs when its area is in focus and its weight is positive."""
        return kind.value in self.focus_areas and self.weight_for(kind) > 0

    def with_weights(self, weights: Mapping[str, float]) -> "ReviewConfig":
        """Return a copy carrying the given agent weights."""
        return replace(self, agent_weights=dict(weights))


def load_config(config_path: Path | None = None) -> ReviewConfig:
    """Load configuration from file and environment.

    Args:
        config_path: Path to config file (default: argus.yaml, then
            .github/argus-config.yml)

    Returns:
        Loaded configuration
    """
    if config_path is None:
        config_path = next((p for p in DEFAULT_CONFIG_PATHS if p.exists()), None)

    raw_config: dict[str, Any] = {}
    if config_path is not None and config_path.exists():
        with open(config_path) as f:
            raw_config = yaml.safe_load(f) or {}
        logger.debug(f"Configuration loaded from {config_path}")
    else:
        logger.debug("No configuration file found, using defaults")

    raw_config = _expand_env_vars(raw_config)
    config = _parse_config(raw_config)
    return _apply_env_overrides(config)


def _expand_env_vars(obj: Any) -> Any:
    """Recursively expand environment variables in config."""
    if isinstance(obj, str):
        if obj.startswith("${") and obj.endswith("}"):
            env_var = obj[2:-1]
            return os.environ.get(env_var, "")
        return obj
    elif isinstance(obj, dict):
        return {k: _expand_env_vars(v) for k, v in obj.items()}
    elif isinstance(obj, list):
        return [_expand_env_vars(v) for v in obj]
    return obj


def _parse_bool(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


def _parse_config(raw: dict[str, Any]) -> ReviewConfig:
    """Parse raw config dict into a ReviewConfig."""
    defaults = ReviewConfig()

    # Weights in the file override the defaults key by key
    weights = dict(DEFAULT_AGENT_WEIGHTS)
    weights.update({k: float(v) for k, v in (raw.get("agent_weights") or {}).items()})

    orch_raw = raw.get("orchestrator", {}) or {}
    orchestrator = OrchestratorSettings(
        concurrency=orch_raw.get("concurrency", 3),
        max_retries=orch_raw.get("max_retries", 2),
        backoff_base_seconds=orch_raw.get("backoff_base_seconds", 1.0),
    )

    model_raw = raw.get("model", {}) or {}
    model = ModelSettings(
        api_key=model_raw.get("api_key") or os.environ.get("ANTHROPIC_API_KEY", ""),
        model=model_raw.get("name", ModelSettings.model),
        base_url=model_raw.get("base_url", ModelSettings.base_url),
        temperature=model_raw.get("temperature", 0.1),
        max_tokens=model_raw.get("max_tokens", 4000),
        timeout_seconds=model_raw.get("timeout_seconds", 120),
    )

    github_raw = raw.get("github", {}) or {}
    github = GitHubSettings(
        token=github_raw.get("token") or os.environ.get("GITHUB_TOKEN", ""),
        base_url=github_raw.get("base_url"),
    )

    return ReviewConfig(
        strictness_level=raw.get("strictness_level", defaults.strictness_level),
        focus_areas=list(raw.get("focus_areas", defaults.focus_areas)),
        agent_weights=weights,
        learning_mode=raw.get("learning_mode", True),
        enable_coaching=raw.get("enable_coaching", True),
        max_files=raw.get("max_files", 50),
        exclude_paths=list(raw.get("exclude_paths", defaults.exclude_paths)),
        orchestrator=orchestrator,
        model=model,
        github=github,
        project=ProjectContext.from_dict(raw.get("project", {}) or {}),
    )


def _apply_env_overrides(config: ReviewConfig) -> ReviewConfig:
    """Apply ARGUS_* environment variables on top of the file configuration."""
    env = os.environ

    level = env.get("ARGUS_STRICTNESS_LEVEL")
    if level:
        config.strictness_level = level.strip().lower()

    areas = env.get("ARGUS_FOCUS_AREAS")
    if areas:
        config.focus_areas = [a.strip() for a in areas.split(",") if a.strip()]

    learning = env.get("ARGUS_LEARNING_MODE")
    if learning:
        config.learning_mode = _parse_bool(learning)

    coaching = env.get("ARGUS_ENABLE_COACHING")
    if coaching:
        config.enable_coaching = _parse_bool(coaching)

    max_files = env.get("ARGUS_MAX_FILES")
    if max_files:
        config.max_files = int(max_files)

    concurrency = env.get("ARGUS_CONCURRENCY")
    if concurrency:
        config.orchestrator.concurrency = int(concurrency)

    retries = env.get("ARGUS_MAX_RETRIES")
    if retries:
        config.orchestrator.max_retries = int(retries)

    return config


def validate_config(config: ReviewConfig) -> list[str]:
    """Validate configuration and return list of errors.

    Args:
        config: Configuration to validate

    Returns:
        List of validation error messages (empty if valid)
    """
    errors = []

    valid_levels = [level.value for level in StrictnessLevel]
    if config.strictness_level not in valid_levels:
        errors.append(
            f"Invalid strictness level: {config.strictness_level} "
            f"(expected one of {', '.join(valid_levels)})"
        )

    for area in config.focus_areas:
        if area not in VALID_FOCUS_AREAS:
            errors.append(f"Invalid focus area: {area}")

    for agent, weight in config.agent_weights.items():
        if not isinstance(weight, (int, float)) or not MIN_WEIGHT <= weight <= MAX_WEIGHT:
            errors.append(f"Invalid agent weight for {agent}: {weight} (must be 0-2)")

    if config.max_files < 0:
        errors.append("max_files cannot be negative")

    if config.orchestrator.concurrency < 1:
        errors.append(
            f"orchestrator.concurrency must be at least 1, got {config.orchestrator.concurrency}"
        )

    if config.orchestrator.max_retries < 0:
        errors.append(
            f"orchestrator.max_retries cannot be negative, got {config.orchestrator.max_retries}"
        )

    return errors


def ensure_valid(config: ReviewConfig) -> None:
    """Raise ConfigurationError if the configuration has any errors."""
    errors = validate_config(config)
    if errors:
        raise ConfigurationError("; ".join(errors))

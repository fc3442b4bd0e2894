"""File prioritizer: ranks changed files by review risk."""

import logging
import re
from collections import Counter
from dataclasses import replace
from functools import lru_cache

from argus.models.context import ChangedFile, FilePriority, ProjectContext

logger = logging.getLogger(__name__)

SECURITY_SCORE = 10
BUSINESS_LOGIC_SCORE = 8
API_ENDPOINT_SCORE = 7
ARCHITECTURE_SCORE = 6
DATABASE_SCORE = 6
CONFIGURATION_SCORE = 5
ADDED_FILE_SCORE = 3
LARGE_CHANGE_SCORE = 2
CRITICAL_AREA_SCORE = 4

LARGE_CHANGE_LINES = 100


def _compile_all(*patterns: str) -> tuple[re.Pattern[str], ...]:
    return tuple(re.compile(p, re.IGNORECASE) for p in patterns)


SECURITY_PATTERNS = _compile_all(
    "auth", "security", "crypto", "password", "token", "jwt",
    "oauth", "session", "login", "permission", "role",
)
BUSINESS_LOGIC_PATTERNS = _compile_all(
    "service", "business", "logic", "domain", "model",
    "entity", "repository", "manager", "handler", "processor",
)
API_PATTERNS = _compile_all("api", "controller", "route", "endpoint", "middleware", "handler")
ARCHITECTURE_PATTERNS = _compile_all(
    "config", "setup", "bootstrap", "infrastructure", "core",
    "base", "abstract", "interface", "factory", "builder",
)
DATABASE_PATTERNS = _compile_all(
    "database", "db", "migration", "schema", "query",
    "repository", "dao", "entity", "model",
)
CONFIG_EXTENSIONS = (".config.js", ".config.ts", ".json", ".yml", ".yaml", ".toml", ".env")
CONFIG_PATTERNS = _compile_all(
    "dockerfile", "docker-compose", r"package\.json", "tsconfig",
    "webpack", "babel", "eslint", "prettier",
)


@lru_cache(maxsize=256)
def compile_glob(pattern: str) -> re.Pattern[str]:
    """Compile a glob-like pattern into a case-insensitive regex.

    ``**`` matches across directories (``**/`` also matches none), ``*``
    matches within one path segment and ``?`` matches a single character.
    """
    parts = []
    i = 0
    while i < len(pattern):
        if pattern.startswith("**/", i):
            parts.append("(?:.*/)?")
            i += 3
        elif pattern.startswith("**", i):
            parts.append(".*")
            i += 2
        elif pattern[i] == "*":
            parts.append("[^/]*")
            i += 1
        elif pattern[i] == "?":
            parts.append(".")
            i += 1
        else:
            parts.append(re.escape(pattern[i]))
            i += 1
    return re.compile("".join(parts), re.IGNORECASE)


def glob_search(filename: str, pattern: str) -> bool:
    """Check whether a glob occurs anywhere in the filename."""
    return compile_glob(pattern).search(filename) is not None


def glob_match(filename: str, pattern: str) -> bool:
    """Check whether a glob matches the whole filename."""
    return compile_glob(pattern).fullmatch(filename) is not None


def _any_match(patterns: tuple[re.Pattern[str], ...], filename: str) -> bool:
    return any(p.search(filename) for p in patterns)


def priority_for_score(score: int) -> FilePriority:
    """Threshold a risk score into a priority level."""
    if score >= 15:
        return FilePriority.CRITICAL
    if score >= 10:
        return FilePriority.HIGH
    if score >= 5:
        return FilePriority.MEDIUM
    return FilePriority.LOW


class FilePrioritizer:
    """Assigns review priorities from filename signals and project context.

    Every check is a pure function of the file and the project context, so
    the same input always yields the same ordering.
    """

    def prioritize_files(
        self, files: list[ChangedFile], project_context: ProjectContext
    ) -> list[ChangedFile]:
        """Assign priorities and sort files, most critical first.

        Args:
            files: Changed files in input order
            project_context: Project-level context

        Returns:
            New ChangedFile objects sorted by priority; ties keep input order
        """
        prioritized = [
            replace(f, priority=self.calculate_priority(f, project_context)) for f in files
        ]
        prioritized.sort(key=lambda f: f.priority.rank, reverse=True)

        breakdown = Counter(f.priority.value for f in prioritized)
        logger.info(f"Prioritized {len(prioritized)} files: {dict(breakdown)}")

        return prioritized

    def calculate_priority(
        self, file: ChangedFile, project_context: ProjectContext
    ) -> FilePriority:
        return priority_for_score(self.calculate_score(file, project_context))

    def calculate_score(self, file: ChangedFile, project_context: ProjectContext) -> int:
        """Sum the points of every signal that applies to the file."""
        score = 0

        if self.is_security_critical(file, project_context):
            score += SECURITY_SCORE
        if _any_match(BUSINESS_LOGIC_PATTERNS, file.filename):
            score += BUSINESS_LOGIC_SCORE
        if _any_match(API_PATTERNS, file.filename):
            score += API_ENDPOINT_SCORE
        if _any_match(ARCHITECTURE_PATTERNS, file.filename):
            score += ARCHITECTURE_SCORE
        if _any_match(DATABASE_PATTERNS, file.filename):
            score += DATABASE_SCORE
        if self.is_configuration_file(file):
            score += CONFIGURATION_SCORE
        if file.status == "added":
            score += ADDED_FILE_SCORE
        if file.changes > LARGE_CHANGE_LINES:
            score += LARGE_CHANGE_SCORE
        if self.is_in_critical_area(file, project_context):
            score += CRITICAL_AREA_SCORE

        return score

    def is_security_critical(self, file: ChangedFile, project_context: ProjectContext) -> bool:
        if _any_match(SECURITY_PATTERNS, file.filename):
            return True
        return any(
            glob_search(file.filename, pattern)
            for pattern in project_context.security.critical_files
        )

    def is_configuration_file(self, file: ChangedFile) -> bool:
        name = file.filename.lower()
        return name.endswith(CONFIG_EXTENSIONS) or _any_match(CONFIG_PATTERNS, name)

    def is_in_critical_area(self, file: ChangedFile, project_context: ProjectContext) -> bool:
        if any(
            glob_search(file.filename, area)
            for area in project_context.performance.critical_areas
        ):
            return True
        return any(
            file.filename.startswith(directory.rstrip("/") + "/")
            for directory in project_context.architecture.source_directories
        )

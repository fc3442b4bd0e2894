"""Security-focused analyzer."""

import re

from argus.agents.base import LLMAnalyzer
from argus.config import AnalyzerKind
from argus.models.context import ChangedFile, ReviewContext
from argus.models.findings import CoachingInfo, Issue, Severity, SuggestedFix

CONFIG_FILE_PATTERNS = [
    re.compile(p)
    for p in (
        r"\.env",
        r"config\.(js|ts|json|yaml|yml)$",
        r"\.config\.(js|ts)$",
        r"docker-compose\.ya?ml$",
        r"Dockerfile$",
        r"nginx\.conf$",
        r"apache\.conf$",
    )
]

SECRET_PATTERNS = [
    re.compile(p, re.IGNORECASE)
    for p in (
        r"""password\s*[=:]\s*["'][^"']{8,}["']""",
        r"""api_?key\s*[=:]\s*["'][^"']{20,}["']""",
        r"""secret\s*[=:]\s*["'][^"']{16,}["']""",
        r"""token\s*[=:]\s*["'][^"']{20,}["']""",
        r"""private_?key\s*[=:]\s*["']-----BEGIN""",
    )
]

SECURITY_FILE_PATTERN = re.compile(r"auth|security|crypto|login", re.IGNORECASE)
SECURITY_RELEVANT_PATTERN = re.compile(
    r"auth|login|password|crypto|security|session|jwt|oauth|api|middleware|routes?|controllers?|handlers?",
    re.IGNORECASE,
)

RESOURCES = {
    "authentication": ["OWASP Authentication Cheat Sheet"],
    "authorization": ["OWASP Authorization Cheat Sheet"],
    "input-validation": ["OWASP Input Validation Cheat Sheet"],
    "data-protection": ["OWASP Data Protection Cheat Sheet"],
    "configuration": ["OWASP Configuration Review Guide", "CIS Security Benchmarks"],
    "cryptography": ["OWASP Cryptographic Storage Cheat Sheet"],
}


def is_configuration_file(filename: str) -> bool:
    return any(p.search(filename) for p in CONFIG_FILE_PATTERNS)


def contains_hardcoded_secrets(content: str) -> bool:
    return any(p.search(content) for p in SECRET_PATTERNS)


class SecurityAnalyzer(LLMAnalyzer):
    """Analyzer specialized in security vulnerability detection."""

    KIND = AnalyzerKind.SECURITY
    CAPABILITIES = [
        "Vulnerability detection",
        "Authentication/authorization review",
        "Input validation analysis",
        "Data exposure prevention",
        "Cryptographic review",
        "Configuration security",
    ]
    BASE_CONFIDENCE = 0.85
    ISSUE_CATEGORIES = (
        "input-validation|authentication|authorization|data-protection|"
        "api-security|dependencies|cryptography|configuration"
    )

    SYSTEM_PROMPT = """You are an expert security code reviewer.

Focus on:
- Injection vulnerabilities (SQL, command, XSS)
- Broken authentication, session management and access control
- Sensitive data exposure and weak cryptography
- Insecure API endpoints and configuration

Think like an attacker but avoid false positives.
"""

    def should_analyze_file(self, file: ChangedFile) -> bool:
        return (
            super().should_analyze_file(file)
            or is_configuration_file(file.filename)
            or bool(SECURITY_RELEVANT_PATTERN.search(file.filename))
        )

    def local_checks(self, context: ReviewContext) -> list[Issue]:
        """Scan changed configuration files for insecure settings."""
        issues = []

        for file in context.changed_files:
            if not file.content or not is_configuration_file(file.filename):
                continue

            if contains_hardcoded_secrets(file.content):
                issues.append(
                    Issue(
                        severity=Severity.CRITICAL,
                        category="security-configuration",
                        title="Hardcoded secrets detected",
                        description=(
                            "Configuration file contains what appears to be "
                            "hardcoded credentials or API keys."
                        ),
                        file=file.filename,
                        snippet="Content hidden for security",
                        suggestion=SuggestedFix(
                            comment="Use environment variables or a secret manager instead"
                        ),
                        coaching=CoachingInfo(
                            rationale="Secrets committed to version control can leak",
                            best_practice=(
                                "Store secrets in environment variables or a "
                                "dedicated secret management system"
                            ),
                            resources=["OWASP Secrets Management Cheat Sheet"],
                            level="intermediate",
                        ),
                    )
                )

            if "Access-Control-Allow-Origin: *" in file.content:
                issues.append(
                    Issue(
                        severity=Severity.WARNING,
                        category="security-configuration",
                        title="Permissive CORS configuration",
                        description="Wildcard CORS origin allows requests from any domain",
                        file=file.filename,
                        suggestion=SuggestedFix(
                            comment="Specify allowed origins explicitly instead of a wildcard"
                        ),
                        coaching=CoachingInfo(
                            rationale="Wildcard CORS can enable unauthorized data access",
                            best_practice="Use specific origins and validate them server-side",
                            resources=["OWASP CORS Guide"],
                            level="intermediate",
                        ),
                    )
                )

            if "debug: true" in file.content or "DEBUG=true" in file.content:
                issues.append(
                    Issue(
                        severity=Severity.ERROR,
                        category="security-configuration",
                        title="Debug mode enabled",
                        description="Debug mode may expose sensitive information",
                        file=file.filename,
                        suggestion=SuggestedFix(
                            comment="Ensure debug mode is disabled in production"
                        ),
                        coaching=CoachingInfo(
                            rationale="Debug mode can leak stack traces and internal paths",
                            best_practice=(
                                "Use environment-specific configuration with debug "
                                "disabled in production"
                            ),
                            resources=["OWASP Configuration Guide"],
                            level="beginner",
                        ),
                    )
                )

        return issues

    def calculate_confidence(self, issues: list[Issue], context: ReviewContext) -> float:
        confidence = self.BASE_CONFIDENCE
        if any(SECURITY_FILE_PATTERN.search(f.filename) for f in context.changed_files):
            confidence += 0.1
        if any(i.severity == Severity.CRITICAL for i in issues):
            confidence += 0.05
        return max(0.1, min(1.0, confidence))

    def get_resources(self, category: str) -> list[str]:
        return RESOURCES.get(category, ["OWASP Top 10"])

    def get_level(self, category: str) -> str:
        if category in ("cryptography", "authorization"):
            return "advanced"
        if category in ("authentication", "configuration"):
            return "intermediate"
        return "beginner"

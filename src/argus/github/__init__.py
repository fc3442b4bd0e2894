"""GitHub integration for Argus."""

from argus.github.client import GitHubClient, pull_request_info

__all__ = ["GitHubClient", "pull_request_info"]

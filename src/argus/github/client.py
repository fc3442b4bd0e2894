"""GitHub API client for fetching pull request data."""

import logging

from github import Github
from github.GithubException import GithubException
from github.PullRequest import PullRequest
from github.Repository import Repository

from argus.config import GitHubSettings
from argus.models.context import ChangedFile, PullRequestInfo

logger = logging.getLogger(__name__)


class GitHubClient:
    """Client for the GitHub API operations a review needs."""

    def __init__(self, token: str, base_url: str | None = None) -> None:
        """Initialize the GitHub client.

        Args:
            token: GitHub personal access token or app token
            base_url: Optional base URL for GitHub Enterprise
        """
        if base_url:
            self._gh = Github(token, base_url=base_url)
        else:
            self._gh = Github(token)

    @classmethod
    def from_settings(cls, settings: GitHubSettings) -> "GitHubClient":
        return cls(settings.token, base_url=settings.base_url)

    def get_repo(self, repo_name: str) -> Repository:
        """Get a repository by name.

        Args:
            repo_name: Repository in "owner/name" format

        Returns:
            Repository object
        """
        return self._gh.get_repo(repo_name)

    def get_pull_request(self, repo_name: str, pr_number: int) -> PullRequest:
        """Get a pull request.

        Args:
            repo_name: Repository in "owner/name" format
            pr_number: Pull request number

        Returns:
            PullRequest object
        """
        return self.get_repo(repo_name).get_pull(pr_number)

    def get_pull_request_info(self, repo_name: str, pr_number: int) -> PullRequestInfo:
        """Fetch pull request metadata.

        Args:
            repo_name: Repository in "owner/name" format
            pr_number: Pull request number

        Returns:
            PullRequestInfo describing the PR
        """
        pr = self.get_pull_request(repo_name, pr_number)
        return pull_request_info(repo_name, pr)

    def get_changed_files(
        self, repo_name: str, pr_number: int, include_content: bool = True
    ) -> list[ChangedFile]:
        """Fetch the files changed by a pull request.

        Args:
            repo_name: Repository in "owner/name" format
            pr_number: Pull request number
            include_content: Also fetch full file content at the head commit

        Returns:
            Changed files in the order GitHub lists them
        """
        pr = self.get_pull_request(repo_name, pr_number)
        repo = pr.base.repo
        head_sha = pr.head.sha

        files = []
        for file in pr.get_files():
            content = None
            if include_content and file.status != "removed":
                content = self._fetch_content(repo, file.filename, head_sha)

            files.append(
                ChangedFile(
                    filename=file.filename,
                    status=file.status,
                    additions=file.additions,
                    deletions=file.deletions,
                    patch=file.patch,
                    previous_filename=file.previous_filename,
                    content=content,
                )
            )

        logger.info(f"Fetched {len(files)} changed files for {repo_name}#{pr_number}")
        return files

    def _fetch_content(self, repo: Repository, path: str, ref: str) -> str | None:
        try:
            content = repo.get_contents(path, ref=ref)
            if hasattr(content, "decoded_content"):
                return content.decoded_content.decode("utf-8")
        except (GithubException, UnicodeDecodeError) as e:
            logger.warning(f"Could not fetch {path}: {e}")
        return None


def pull_request_info(repo_name: str, pr: PullRequest) -> PullRequestInfo:
    """Convert a PyGithub pull request into PullRequestInfo."""
    return PullRequestInfo(
        repo_name=repo_name,
        number=pr.number,
        title=pr.title,
        description=pr.body or "",
        base_ref=pr.base.ref,
        head_ref=pr.head.ref,
        head_sha=pr.head.sha,
        author=pr.user.login,
        labels=tuple(label.name for label in pr.get_labels()),
    )

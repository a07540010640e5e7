# hackathons/github.py
"""
GitHub REST client used to verify registered repositories.

Only two questions are asked of GitHub: "is this repo public, and when was
it created?" (registration) and "were there commits after the cutoff?"
(post-cutoff audit).
"""
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Tuple
from urllib.parse import urlparse

import requests
from django.conf import settings
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

logger = logging.getLogger("cos.hackathons")

GITHUB_HOSTS = ("github.com", "www.github.com")


class GitHubAPIError(Exception):
    """GitHub could not be reached or answered with an unexpected status."""
    pass


class RepositoryNotFound(GitHubAPIError):
    """404: the repository does not exist or is private."""
    pass


@dataclass(frozen=True)
class RepositoryInfo:
    owner: str
    name: str
    private: bool
    created_at: Optional[datetime]
    html_url: str = ""


def parse_repo_url(repo_url: str) -> Optional[Tuple[str, str]]:
    """
    'https://github.com/owner/repo(.git)' -> ('owner', 'repo').

    Returns None for anything that is not a github.com repository URL.
    """
    if not repo_url:
        return None
    try:
        parsed = urlparse(repo_url.strip())
    except ValueError:
        return None
    if parsed.scheme not in ("http", "https") or (parsed.hostname or "").lower() not in GITHUB_HOSTS:
        return None

    parts = [p for p in parsed.path.split("/") if p]
    if len(parts) < 2:
        return None

    owner, repo = parts[0], parts[1]
    if repo.endswith(".git"):
        repo = repo[:-4]
    if not owner or not repo:
        return None
    return owner, repo


def _parse_datetime(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    return datetime.fromisoformat(value)


class GitHubClient:
    """Small GitHub API client with retries on transient failures."""

    def __init__(self, token=None, base_url=None, timeout=None, max_retries=None):
        self.base_url = (base_url or getattr(settings, "GITHUB_API_URL", "https://api.github.com")).rstrip("/")
        self.token = token if token is not None else getattr(settings, "GITHUB_TOKEN", "")
        self.timeout = timeout or getattr(settings, "GITHUB_TIMEOUT", 10)
        max_retries = max_retries if max_retries is not None else getattr(settings, "GITHUB_MAX_RETRIES", 2)

        self.session = requests.Session()
        retry_strategy = Retry(
            total=max_retries,
            backoff_factor=1,
            status_forcelist=[500, 502, 503, 504],
            allowed_methods=["GET"],
        )
        adapter = HTTPAdapter(max_retries=retry_strategy)
        self.session.mount("http://", adapter)
        self.session.mount("https://", adapter)

        self.session.headers.update({"Accept": "application/vnd.github.v3+json"})
        if self.token:
            self.session.headers.update({"Authorization": f"Bearer {self.token}"})

    def _get(self, endpoint: str, params=None):
        url = f"{self.base_url}/{endpoint}"
        try:
            response = self.session.get(url, params=params, timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            logger.error(f"GitHub API request failed: {e}")
            raise GitHubAPIError(f"API request failed: {e}") from e

        if response.status_code == 404:
            raise RepositoryNotFound(endpoint)
        if not response.ok:
            logger.error(f"GitHub API returned {response.status_code} for {endpoint}")
            raise GitHubAPIError(f"GitHub returned {response.status_code}")
        return response.json()

    def get_repository(self, owner: str, repo: str) -> RepositoryInfo:
        data = self._get(f"repos/{owner}/{repo}")
        return RepositoryInfo(
            owner=owner,
            name=repo,
            private=bool(data.get("private")),
            created_at=_parse_datetime(data.get("created_at")),
            html_url=data.get("html_url", ""),
        )

    def has_commits_since(self, owner: str, repo: str, since: datetime) -> bool:
        commits = self._get(
            f"repos/{owner}/{repo}/commits",
            params={"since": since.isoformat(), "per_page": 1},
        )
        return isinstance(commits, list) and len(commits) > 0


_client = None


def get_github_client() -> GitHubClient:
    """Process-wide client (one pooled session)."""
    global _client
    if _client is None:
        _client = GitHubClient()
    return _client

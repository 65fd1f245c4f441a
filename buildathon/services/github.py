"""GitHub REST client used to vet repositories at registration time."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from urllib.parse import urlsplit

import httpx

from buildathon.config import Settings, get_settings
from buildathon.core.logging import get_logger
from buildathon.utils.time import iso_millis, just_before

logger = get_logger(__name__)

_GITHUB_HOSTS = {"github.com", "www.github.com"}


class GithubCheckError(Exception):
    """The repository cannot be accepted; ``str(exc)`` is shown to the user."""


@dataclass(frozen=True)
class RepoRef:
    owner: str
    repo: str


def parse_github_repo_url(url: str) -> RepoRef | None:
    """Extract ``owner/repo`` from a github.com URL.

    Accepts trailing slashes, a ``.git`` suffix and deeper paths such as
    ``/tree/main``. Returns ``None`` for anything that is not a GitHub repo URL.
    """

    try:
        parts = urlsplit(url.strip())
    except ValueError:
        return None
    if not parts.scheme or (parts.hostname or "").lower() not in _GITHUB_HOSTS:
        return None

    segments = [segment for segment in parts.path.split("/") if segment]
    if len(segments) < 2:
        return None
    owner = segments[0].strip()
    repo = segments[1].strip()
    if repo.lower().endswith(".git"):
        repo = repo[: -len(".git")]
    if not owner or not repo:
        return None
    return RepoRef(owner=owner, repo=repo)


class GithubClient:
    """Thin wrapper around the GitHub REST API."""

    def __init__(self, settings: Settings, transport: httpx.BaseTransport | None = None) -> None:
        headers = {
            "Accept": "application/vnd.github+json",
            "User-Agent": "buildathon-backend/registration",
        }
        # Optional: lifts the strict unauthenticated rate limit.
        if settings.GITHUB_TOKEN:
            headers["Authorization"] = f"Bearer {settings.GITHUB_TOKEN}"
        self._client = httpx.Client(
            base_url=settings.GITHUB_API_URL,
            headers=headers,
            timeout=settings.GITHUB_TIMEOUT_SECONDS,
            transport=transport,
        )

    @classmethod
    def from_env(cls) -> "GithubClient":
        """Instantiate a client using the cached application settings."""

        return cls(get_settings())

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "GithubClient":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def _get(self, path: str, **params: object) -> httpx.Response:
        try:
            return self._client.get(path, params=params or None)
        except httpx.HTTPError as exc:
            logger.warning("GitHub request failed", extra={"path": path, "error": str(exc)})
            raise GithubCheckError("Could not verify GitHub repo activity. Please try again later.") from exc

    def assert_no_activity_before(self, repo_url: str, start_at: datetime) -> None:
        """Reject repos with commits before ``start_at``.

        Repos created earlier are fine as long as they carry no commits from
        before the start. Non-GitHub URLs are not checked.
        """

        ref = parse_github_repo_url(repo_url)
        if ref is None:
            return

        repo_resp = self._get(f"/repos/{ref.owner}/{ref.repo}")
        if repo_resp.status_code == 404:
            raise GithubCheckError(
                "GitHub repo not found (or private). Please provide a public repo URL, "
                "or leave it blank and add it later."
            )
        if not repo_resp.is_success:
            logger.warning(
                "GitHub repo lookup failed",
                extra={"owner": ref.owner, "repo": ref.repo, "status": repo_resp.status_code},
            )
            raise GithubCheckError("Could not verify GitHub repo activity. Please try again later.")

        commits_resp = self._get(
            f"/repos/{ref.owner}/{ref.repo}/commits",
            per_page=1,
            until=iso_millis(just_before(start_at)),
        )
        # Fail closed so the rule stays enforceable under rate limits.
        if not commits_resp.is_success:
            logger.warning(
                "GitHub commit lookup failed",
                extra={"owner": ref.owner, "repo": ref.repo, "status": commits_resp.status_code},
            )
            raise GithubCheckError(
                "Could not verify GitHub repo commit history. Please provide a public repo URL, "
                "or leave it blank and add it later."
            )

        commits = commits_resp.json()
        if isinstance(commits, list) and commits:
            raise GithubCheckError(
                "GitHub repos should have no activity before the buildathon start date "
                f"({start_at.date().isoformat()})."
            )


__all__ = ["GithubCheckError", "GithubClient", "RepoRef", "parse_github_repo_url"]

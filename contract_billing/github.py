"""GitHub contents API client used to store signed contracts."""
import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional
from urllib.parse import quote

import requests

from contract_billing.config import DEFAULT_HTTP_TIMEOUT, Settings
from contract_billing.errors import ConfigurationError, GitHubAPIError

logger = logging.getLogger(__name__)

GITHUB_API_URL = "https://api.github.com"
RAW_CONTENT_URL = "https://raw.githubusercontent.com"


@dataclass(frozen=True)
class CommitResult:
    download_url: str
    sha: Optional[str]


class GitHubContentsClient:
    def __init__(
        self,
        token: str,
        repo: str,
        branch: str = "main",
        timeout: float = DEFAULT_HTTP_TIMEOUT,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.token = token
        self.repo = repo
        self.branch = branch
        self.timeout = timeout
        self.session = session or requests.Session()

    @classmethod
    def from_settings(cls, settings: Settings, session: Optional[requests.Session] = None) -> "GitHubContentsClient":
        if not settings.github_token or not settings.github_repo:
            raise ConfigurationError("Missing GITHUB_TOKEN or GITHUB_REPO")
        return cls(
            token=settings.github_token,
            repo=settings.github_repo,
            branch=settings.github_branch,
            timeout=settings.http_timeout,
            session=session,
        )

    def _headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"token {self.token}",
            "Content-Type": "application/json",
            "Accept": "application/vnd.github.v3+json",
        }

    def _contents_url(self, path: str) -> str:
        return f"{GITHUB_API_URL}/repos/{self.repo}/contents/{quote(path, safe='/')}"

    def raw_url(self, path: str) -> str:
        return f"{RAW_CONTENT_URL}/{self.repo}/{self.branch}/{path}"

    def existing_sha(self, path: str) -> Optional[str]:
        """Blob sha of ``path`` on the branch, or None when the file is new."""
        try:
            resp = self.session.get(
                self._contents_url(path),
                headers=self._headers(),
                params={"ref": self.branch},
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            raise GitHubAPIError(f"GitHub lookup failed: {exc}") from exc

        if resp.status_code == 404:
            return None
        data = _json_or_empty(resp)
        if not resp.ok:
            raise GitHubAPIError(data.get("message") or "GitHub lookup failed")
        return data.get("sha")

    def put_file(self, path: str, base64_content: str, message: Optional[str] = None) -> CommitResult:
        """Create or update ``path`` with already base64-encoded content."""
        body: Dict[str, Any] = {
            "message": message or f"Add {path}",
            "content": base64_content,
            "branch": self.branch,
        }
        sha = self.existing_sha(path)
        if sha:
            logger.info("Replacing existing file %s", path)
            body["sha"] = sha

        try:
            resp = self.session.put(
                self._contents_url(path),
                headers=self._headers(),
                json=body,
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            raise GitHubAPIError(f"GitHub upload failed: {exc}") from exc

        data = _json_or_empty(resp)
        if not resp.ok:
            raise GitHubAPIError(data.get("message") or "GitHub upload failed")

        content = data.get("content") or {}
        return CommitResult(
            download_url=content.get("download_url") or self.raw_url(path),
            sha=content.get("sha"),
        )


def _json_or_empty(resp: requests.Response) -> Dict[str, Any]:
    try:
        data = resp.json()
    except ValueError:
        return {}
    return data if isinstance(data, dict) else {}

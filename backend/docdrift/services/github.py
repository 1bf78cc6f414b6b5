"""GitHub API service for pull request, commit and content operations."""

import base64
import logging
from datetime import UTC, datetime
from typing import Any

import httpx

from docdrift.core.config import settings

logger = logging.getLogger(__name__)


class GitHubAPIError(Exception):
    """Base exception for GitHub API errors."""

    def __init__(self, message: str, status_code: int = 500):
        self.message = message
        self.status_code = status_code
        super().__init__(message)


class GitHubRateLimitError(GitHubAPIError):
    """Exception raised when GitHub API rate limit is exceeded."""

    def __init__(self, reset_at: datetime | None = None, message: str | None = None):
        self.reset_at = reset_at
        if message is None:
            if reset_at:
                now = datetime.now(UTC)
                diff = reset_at - now
                minutes = max(1, int(diff.total_seconds() / 60))
                message = f"GitHub API rate limit exceeded. Please try again in {minutes} minute{'s' if minutes != 1 else ''}."
            else:
                message = "GitHub API rate limit exceeded. Please try again later."
        super().__init__(message, status_code=403)


class GitHubPermissionError(GitHubAPIError):
    """Exception raised when the token lacks permission to access a resource."""

    def __init__(self, message: str = "The token doesn't have permission to access this resource."):
        super().__init__(message, status_code=403)


class GitHubAuthenticationError(GitHubAPIError):
    """Exception raised when GitHub authentication fails."""

    def __init__(self, message: str = "GitHub authentication failed. Check the token."):
        super().__init__(message, status_code=401)


class GitHubTimeoutError(GitHubAPIError):
    """Exception raised when GitHub API request times out."""

    def __init__(self, message: str = "GitHub API request timed out."):
        super().__init__(message, status_code=504)


def split_repository(full_name: str) -> tuple[str, str]:
    """Split an ``owner/name`` repository identifier.

    Raises:
        ValueError: If the identifier is not of the form ``owner/name``.
    """
    owner, sep, repo = full_name.strip().partition("/")
    if not sep or not owner or not repo or "/" in repo:
        raise ValueError(f"Repository must look like 'owner/name', got '{full_name}'")
    return owner, repo


def decode_content(encoded: str) -> str:
    """Decode a base64 contents-API payload as UTF-8, replacing bad bytes."""
    return base64.b64decode(encoded).decode("utf-8", errors="replace")


class GitHubService:
    """Service for interacting with GitHub API."""

    # Timeout configuration: 30s connect, 60s read
    DEFAULT_TIMEOUT = httpx.Timeout(connect=30.0, read=60.0, write=30.0, pool=30.0)
    PER_PAGE = 100

    def __init__(
        self,
        access_token: str,
        base_url: str | None = None,
        user_agent: str = "docdrift",
    ):
        """Initialize GitHub service with access token.

        Args:
            access_token: GitHub token (Actions ``GITHUB_TOKEN`` or a PAT).
            base_url: API root, defaults to ``settings.github_api_url``.
            user_agent: Value for the User-Agent header.
        """
        self.access_token = access_token.strip()
        self.base_url = (base_url or settings.github_api_url).rstrip("/")
        self.user_agent = user_agent

    def _get_headers(self) -> dict[str, str]:
        """Get headers for GitHub API requests."""
        return {
            "Authorization": f"Bearer {self.access_token}",
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
            "User-Agent": self.user_agent,
        }

    def _handle_response_error(self, response: httpx.Response) -> None:
        """Handle GitHub API error responses.

        Args:
            response: The HTTP response from GitHub API.

        Raises:
            GitHubRateLimitError: When rate limit is exceeded (403 with rate limit headers).
            GitHubAuthenticationError: When authentication fails (401).
            GitHubPermissionError: When the token lacks permission (403 without rate limit).
            GitHubAPIError: For other API errors.
        """
        if response.is_success:
            return

        status_code = response.status_code

        if status_code == 403:
            remaining = response.headers.get("x-ratelimit-remaining")
            reset_timestamp = response.headers.get("x-ratelimit-reset")

            if remaining == "0" or "rate limit" in response.text.lower():
                reset_at = None
                if reset_timestamp:
                    try:
                        reset_at = datetime.fromtimestamp(int(reset_timestamp), tz=UTC)
                    except (ValueError, TypeError):
                        pass
                raise GitHubRateLimitError(reset_at=reset_at)

            raise GitHubPermissionError()

        if status_code == 401:
            raise GitHubAuthenticationError()

        if status_code == 404:
            raise GitHubAPIError("Resource not found or access denied.", status_code=404)

        try:
            error_data = response.json()
            message = error_data.get("message", response.text)
        except Exception:
            message = response.text or f"GitHub API error: {status_code}"

        raise GitHubAPIError(message, status_code=status_code)

    async def _request(
        self,
        method: str,
        path: str,
        params: dict[str, Any] | None = None,
        json: dict[str, Any] | None = None,
    ) -> Any:
        """Send one request and return the decoded JSON body."""
        try:
            async with httpx.AsyncClient(timeout=self.DEFAULT_TIMEOUT) as client:
                response = await client.request(
                    method,
                    f"{self.base_url}{path}",
                    headers=self._get_headers(),
                    params=params,
                    json=json,
                )
                self._handle_response_error(response)
                return response.json()
        except httpx.TimeoutException:
            raise GitHubTimeoutError()

    async def get_pull_request(self, owner: str, repo: str, pull_number: int) -> dict[str, Any]:
        """Get a pull request.

        Returns:
            Pull request data dict (``head.ref``, ``head.sha``, ``base.ref``, ...).
        """
        return await self._request("GET", f"/repos/{owner}/{repo}/pulls/{pull_number}")

    async def list_pull_request_files(
        self,
        owner: str,
        repo: str,
        pull_number: int,
        max_pages: int = 30,
    ) -> list[dict[str, Any]]:
        """List all files changed in a pull request.

        Follows pagination until a short page is returned. GitHub caps this
        endpoint at 3000 files, which is 30 pages of 100.

        Args:
            owner: Repository owner.
            repo: Repository name.
            pull_number: PR number.
            max_pages: Upper bound on pages fetched.

        Returns:
            List of file dicts with filename, status, additions, deletions,
            changes and (when GitHub includes it) patch.
        """
        files: list[dict[str, Any]] = []
        for page in range(1, max_pages + 1):
            batch = await self._request(
                "GET",
                f"/repos/{owner}/{repo}/pulls/{pull_number}/files",
                params={"per_page": self.PER_PAGE, "page": page},
            )
            files.extend(batch)
            if len(batch) < self.PER_PAGE:
                break
        return files

    async def get_commit(self, owner: str, repo: str, sha: str) -> dict[str, Any]:
        """Get a single commit, including its changed ``files``."""
        return await self._request("GET", f"/repos/{owner}/{repo}/commits/{sha}")

    async def get_repository_contents(
        self,
        owner: str,
        repo: str,
        path: str = "",
        ref: str | None = None,
    ) -> list[dict[str, Any]] | dict[str, Any]:
        """Get contents of a repository path.

        Args:
            owner: Repository owner.
            repo: Repository name.
            path: Path within the repository.
            ref: Git reference (branch, tag, commit).

        Returns:
            List of content items for directories, or single item for files.
        """
        params = {}
        if ref:
            params["ref"] = ref
        return await self._request(
            "GET",
            f"/repos/{owner}/{repo}/contents/{path.lstrip('/')}",
            params=params,
        )

    async def get_file_content(
        self,
        owner: str,
        repo: str,
        path: str,
        ref: str | None = None,
    ) -> str:
        """Get the decoded content of a file.

        Undecodable bytes are replaced rather than raising.

        Raises:
            ValueError: If the path is a directory or not a file.
        """
        result = await self.get_repository_contents(owner, repo, path, ref)

        if isinstance(result, list):
            raise ValueError(f"Path '{path}' is a directory, not a file")

        if result.get("type", "file") != "file":
            raise ValueError(f"Path '{path}' is not a file")

        content = result.get("content", "")
        encoding = result.get("encoding", "base64")

        if encoding == "base64":
            return decode_content(content)
        return content

    async def create_issue_comment(
        self,
        owner: str,
        repo: str,
        issue_number: int,
        body: str,
    ) -> dict[str, Any]:
        """Post a comment on an issue or pull request conversation."""
        return await self._request(
            "POST",
            f"/repos/{owner}/{repo}/issues/{issue_number}/comments",
            json={"body": body},
        )

    async def create_pull_request_review(
        self,
        owner: str,
        repo: str,
        pull_number: int,
        body: str,
        event: str = "COMMENT",
    ) -> dict[str, Any]:
        """Submit a pull request review.

        Args:
            event: Review action (COMMENT, APPROVE, REQUEST_CHANGES).
        """
        return await self._request(
            "POST",
            f"/repos/{owner}/{repo}/pulls/{pull_number}/reviews",
            json={"body": body, "event": event},
        )

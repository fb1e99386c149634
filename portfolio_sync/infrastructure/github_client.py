from __future__ import annotations

import logging
from datetime import datetime
from urllib.parse import quote

import httpx

from portfolio_sync.domain.entities import RemoteRepo
from portfolio_sync.domain.errors import ConfigurationError, UpstreamError
from portfolio_sync.domain.interfaces import IRepoFetcher

log = logging.getLogger(__name__)

GITHUB_API_URL  = "https://api.github.com"
MAX_PAGE_SIZE   = 100
REQUEST_TIMEOUT = 30.0


class GitHubClient(IRepoFetcher):
    """
    Concrete implementation of IRepoFetcher for GitHub's REST API.

    The constructor receives an httpx.AsyncClient (injected) rather than
    creating one internally. This lets callers control the client lifecycle
    and makes testing trivial: pass in a client built on httpx.MockTransport.

    No retries: a failed request is reported once and the caller decides.
    """

    def __init__(self,client: httpx.AsyncClient,token: str | None = None,api_url: str = GITHUB_API_URL,timeout: float = REQUEST_TIMEOUT) -> None:
        self._client  = client
        self._api_url = api_url.rstrip("/")
        self._timeout = timeout
        self._headers = {"Accept": "application/vnd.github+json"}
        # Without a token only public repos are listed, at a lower rate limit
        if token:
            self._headers["Authorization"] = f"Bearer {token}"

    # Anti-Corruption Layer
    @staticmethod
    def _parse_datetime(value: str | None) -> datetime | None:
        """Convert GitHub's ISO datetime string to Python datetime; None if unreadable."""
        if not value or not isinstance(value, str):
            return None
        try:
            return datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            log.debug("Ignoring unparseable updated_at %r", value)
            return None

    @staticmethod
    def _require_str(item: dict, key: str) -> str:
        value = item[key]
        if not isinstance(value, str) or not value:
            raise TypeError(f"{key!r} must be a non-empty string, got {value!r}")
        return value

    def _parse_repo(self, item: dict) -> RemoteRepo | None:
        """
        ANTI-CORRUPTION LAYER — translates one entry of GitHub's
        /users/{user}/repos response into our RemoteRepo.

        GitHub sends:            We store as:
          "stargazers_count"  →  star_count
          "id"                →  repo_id

        If GitHub renames a field, fix it HERE only - nowhere else.
        """
        try:
            return RemoteRepo(
                repo_id     = int(item["id"]),
                name        = self._require_str(item, "name"),
                full_name   = self._require_str(item, "full_name"),
                description = item.get("description"),
                html_url    = self._require_str(item, "html_url"),
                homepage    = item.get("homepage") or None,
                language    = item.get("language"),
                star_count  = int(item.get("stargazers_count") or 0),
                updated_at  = self._parse_datetime(item.get("updated_at")),
                fork        = bool(item.get("fork", False)),
            )
        except (KeyError, TypeError, ValueError) as exc:
            log.warning("Skipping malformed repo entry %s: %s", item.get("id") if isinstance(item, dict) else item, exc)
            return None

    # IRepoFetcher implementation
    async def fetch_repos(self, account: str, limit: int) -> list[RemoteRepo]:
        """
        List the account's repos, most recently updated first.

        Issues exactly one request; per_page is clamped to 1..100 because
        that is all GitHub will return on a single page.
        """
        if not account:
            raise ConfigurationError("GITHUB_USERNAME is not configured")

        per_page = min(max(limit, 1), MAX_PAGE_SIZE)
        params   = {"sort": "updated", "direction": "desc", "per_page": per_page}

        try:
            response = await self._client.get(
                f"{self._api_url}/users/{quote(account, safe='')}/repos",
                headers = self._headers,
                params  = params,
                timeout = self._timeout,
            )
        except httpx.RequestError as exc:
            log.error("GitHub request for %s failed: %s", account, exc)
            raise UpstreamError(None, str(exc) or exc.__class__.__name__) from exc

        if not response.is_success:
            raise UpstreamError(response.status_code, response.text)

        try:
            data = response.json()
        except ValueError as exc:
            raise UpstreamError(response.status_code, f"Invalid JSON in response: {exc}") from exc

        if not isinstance(data, list):
            raise UpstreamError(response.status_code, f"Expected a JSON array, got {type(data).__name__}")

        repos = [parsed for item in data if (parsed := self._parse_repo(item)) is not None]
        log.debug("Fetched %d repos for %s (per_page=%d)", len(repos), account, per_page)
        return repos

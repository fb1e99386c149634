from __future__ import annotations

import logging

from portfolio_sync.config import SyncConfig
from portfolio_sync.domain.entities import SyncSummary
from portfolio_sync.domain.errors import ConfigurationError
from portfolio_sync.domain.interfaces import IRepoFetcher
from .reconciler import ProjectReconciler

log = logging.getLogger(__name__)


class ProjectSyncService:
    """
    The top-level use case: pull the account's repos from GitHub and
    reconcile them into the projects table.

    Receives all dependencies via constructor injection. Knows the order
    of the steps (fetch, then reconcile) but not how either is done.
    """

    def __init__(self, fetcher: IRepoFetcher, reconciler: ProjectReconciler, config: SyncConfig) -> None:
        self._fetcher    = fetcher
        self._reconciler = reconciler
        self._config     = config

    async def execute(self, limit: int | None = None) -> SyncSummary:
        """
        Run one sync. `limit` overrides the configured import cap.

        Raises ConfigurationError, UpstreamError or PersistenceError; never
        returns a partially applied summary. Nothing is written until the
        fetch has completed, so a cancelled run leaves storage untouched.
        """
        if not self._config.github_username:
            raise ConfigurationError("GITHUB_USERNAME is not configured")

        if limit is None:
            limit = self._config.projects_limit
        elif isinstance(limit, bool) or not isinstance(limit, int) or limit < 1:
            raise ConfigurationError(f"Import limit must be a positive integer, got {limit!r}")

        log.info("Project sync | account=%s | limit=%d", self._config.github_username, limit)

        repos = await self._fetcher.fetch_repos(self._config.github_username, limit)
        return self._reconciler.reconcile(repos, limit)

from __future__ import annotations

import logging
from datetime import datetime, timezone

from portfolio_sync.domain.entities import RemoteRepo, SyncSummary
from portfolio_sync.domain.interfaces import IProjectStorage
from .exclusion import should_exclude
from .normalizer import normalize_repo

log = logging.getLogger(__name__)


class ProjectReconciler:
    """
    Brings the projects table in line with a freshly fetched repo listing.

    Stateless between calls: every reconcile() is an independent run.
    Projects that disappeared upstream are left alone, never deleted.
    """

    def __init__(self, storage: IProjectStorage, exclude_patterns: list[str] | None = None) -> None:
        self._storage  = storage
        self._patterns = list(exclude_patterns or [])

    def reconcile(self, repos: list[RemoteRepo], limit: int) -> SyncSummary:
        """
        Filter, truncate to `limit`, normalize and upsert in one transaction.

        `repos` must already be in most-recently-updated-first order; the
        first `limit` survivors win. Storage failures surface as
        PersistenceError with nothing committed.
        """
        survivors = [r for r in repos if not should_exclude(r, self._patterns)][:max(limit, 0)]

        now     = datetime.now(tz=timezone.utc)
        records = [normalize_repo(r, now) for r in survivors]

        self._storage.upsert_projects(records)

        summary = SyncSummary(
            fetched  = len(repos),
            imported = len(records),
            excluded = len(repos) - len(records),
        )
        log.info("Reconciled projects | fetched=%d imported=%d excluded=%d",summary.fetched, summary.imported, summary.excluded)
        return summary

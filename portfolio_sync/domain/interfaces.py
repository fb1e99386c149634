"""
Domain Layer — Interfaces (Abstract Contracts)
-----------------------------------------------
The application layer depends on these, never on the concrete GitHub
client or the PostgreSQL storage. Tests swap in fakes that implement
the same contracts.
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from .entities import ProjectPage, ProjectRecord, RemoteRepo


class IRepoFetcher(ABC):
    """Contract that any repository-listing client must fulfil."""

    @abstractmethod
    async def fetch_repos(self, account: str, limit: int) -> list[RemoteRepo]:
        """
        Return the account's repositories, most recently updated first,
        capped to min(max(limit, 1), 100) entries.
        """
        ...


class IProjectStorage(ABC):
    """
    Contract that any project store must fulfil.
    Swap PostgreSQL for anything else without touching application code.
    """

    @abstractmethod
    def upsert_projects(self, records: list[ProjectRecord]) -> None:
        """
        Create or update every record keyed by slug, all or nothing.
        Raises PersistenceError if the batch could not be applied.
        """
        ...

    @abstractmethod
    def list_projects(self, search: str | None = None, page: int = 1, per_page: int = 9, visible_only: bool = False) -> ProjectPage:
        """Return one page of projects, most recently updated first."""
        ...

    @abstractmethod
    def set_visibility(self, slug: str, visible: bool) -> bool:
        """Hide or show one project. Returns False if the slug is unknown."""
        ...

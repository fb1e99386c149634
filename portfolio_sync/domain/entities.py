from __future__ import annotations
from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class RemoteRepo:
    """
    Immutable descriptor of one repository as listed by the GitHub REST API.

    Lives only for the duration of a single sync run. Field names are OURS,
    not GitHub's: the translation happens in the client's anti-corruption
    layer, not here.
    """
    repo_id:     int
    name:        str
    full_name:   str
    description: str | None
    html_url:    str
    homepage:    str | None
    language:    str | None
    star_count:  int
    updated_at:  datetime | None
    fork:        bool


@dataclass(frozen=True)
class ProjectRecord:
    """
    Field values written to the projects table for one synced repo.

    `slug` is the natural key: the remote numeric id is never stored, so
    the slug is the only identity that survives between runs.
    """
    slug:        str
    name:        str
    description: str
    github_repo: str | None
    homepage:    str | None
    language:    str | None
    stars:       int
    visible:     bool
    synced_at:   datetime


@dataclass(frozen=True)
class StoredProject:
    """A projects row as read back from storage."""
    id:          int
    slug:        str
    name:        str
    description: str
    github_repo: str | None
    homepage:    str | None
    language:    str | None
    stars:       int
    visible:     bool
    synced_at:   datetime | None
    created_at:  datetime
    updated_at:  datetime


@dataclass(frozen=True)
class SyncSummary:
    """
    Immutable value object describing a completed sync run.
    `excluded` is always `fetched - imported`.
    """
    fetched:  int
    imported: int
    excluded: int

    def as_dict(self) -> dict[str, int]:
        return {"fetched": self.fetched, "imported": self.imported, "excluded": self.excluded}


@dataclass(frozen=True)
class ProjectPage:
    """One page of a project listing."""
    items:       list[StoredProject]
    total:       int
    page:        int
    per_page:    int
    total_pages: int

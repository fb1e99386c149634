"""
Shared fixtures: a RemoteRepo factory and an in-memory IProjectStorage.
"""

import math
from datetime import datetime, timezone

import pytest

from portfolio_sync.domain.entities import ProjectPage, ProjectRecord, RemoteRepo, StoredProject
from portfolio_sync.domain.errors import PersistenceError
from portfolio_sync.domain.interfaces import IProjectStorage


class InMemoryProjectStorage(IProjectStorage):
    """Applies each batch atomically; set `fail_on` to a slug to make a batch fail."""

    def __init__(self):
        self.projects: dict[str, ProjectRecord] = {}
        self.batches: list[list[ProjectRecord]] = []
        self.fail_on: str | None = None

    def upsert_projects(self, records):
        staged = dict(self.projects)
        for r in records:
            if r.slug == self.fail_on:
                raise PersistenceError(f"constraint violation on {r.slug}")
            staged[r.slug] = r
        self.projects = staged
        self.batches.append(list(records))

    def list_projects(self, search=None, page=1, per_page=9, visible_only=False):
        now = datetime.now(tz=timezone.utc)
        items = [
            StoredProject(
                id=i, slug=r.slug, name=r.name, description=r.description,
                github_repo=r.github_repo, homepage=r.homepage, language=r.language,
                stars=r.stars, visible=r.visible, synced_at=r.synced_at,
                created_at=now, updated_at=now,
            )
            for i, r in enumerate(self.projects.values(), start=1)
            if r.visible or not visible_only
        ]
        start = (page - 1) * per_page
        return ProjectPage(items[start:start + per_page], len(items), page, per_page, math.ceil(len(items) / per_page) or 1)

    def set_visibility(self, slug, visible):
        if slug not in self.projects:
            return False
        old = self.projects[slug]
        self.projects[slug] = ProjectRecord(**{**old.__dict__, "visible": visible})
        return True


@pytest.fixture
def storage():
    return InMemoryProjectStorage()


@pytest.fixture
def make_repo():
    counter = iter(range(1, 10_000))

    def _make(name, *, fork=False, description="A project", homepage=None, language="Python", stars=0, html_url=None):
        return RemoteRepo(
            repo_id     = next(counter),
            name        = name,
            full_name   = f"octocat/{name}",
            description = description,
            html_url    = html_url or f"https://github.com/octocat/{name}",
            homepage    = homepage,
            language    = language,
            star_count  = stars,
            updated_at  = datetime(2024, 5, 1, tzinfo=timezone.utc),
            fork        = fork,
        )

    return _make

from __future__ import annotations
from datetime import datetime, timezone
from portfolio_sync.domain.entities import ProjectRecord, RemoteRepo

DEFAULT_DESCRIPTION = "No description provided."


def normalize_repo(repo: RemoteRepo, now: datetime | None = None) -> ProjectRecord:
    """
    Map one repo descriptor to the values stored for its project.

    The slug is the lowercased repo name and nothing more: names that
    differ only in case land on the same project. Synced projects are
    always made visible, even if an admin hid them since the last run.
    """
    return ProjectRecord(
        slug        = repo.name.lower(),
        name        = repo.name,
        description = repo.description or DEFAULT_DESCRIPTION,
        github_repo = repo.full_name,
        homepage    = repo.homepage or repo.html_url,
        language    = repo.language,
        stars       = repo.star_count,
        visible     = True,
        synced_at   = now or datetime.now(tz=timezone.utc),
    )

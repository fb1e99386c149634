from __future__ import annotations
from portfolio_sync.domain.entities import RemoteRepo


def parse_exclude_patterns(raw: str | None) -> list[str]:
    """Split a comma-separated pattern list, trimming blanks and dropping empties."""
    if not raw:
        return []
    return [p.strip() for p in raw.split(",") if p.strip()]


def should_exclude(repo: RemoteRepo, patterns: list[str]) -> bool:
    """
    Decide whether a repo stays out of the portfolio.

    Forks are always excluded. Otherwise a repo is excluded when any
    non-empty pattern appears, case-insensitively, anywhere in its name.
    """
    if repo.fork:
        return True
    name = repo.name.lower()
    return any(p and p.lower() in name for p in patterns)

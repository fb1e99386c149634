from __future__ import annotations
import logging
import math

import psycopg2
from psycopg2.extras import execute_values

from portfolio_sync.domain.entities import ProjectPage, ProjectRecord, StoredProject
from portfolio_sync.domain.errors import PersistenceError
from portfolio_sync.domain.interfaces import IProjectStorage

log = logging.getLogger(__name__)

DEFAULT_PAGE      = 1
DEFAULT_PAGE_SIZE = 9

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS projects (
    id          SERIAL PRIMARY KEY,
    slug        TEXT NOT NULL UNIQUE,
    name        TEXT NOT NULL,
    description TEXT NOT NULL,
    github_repo TEXT,
    homepage    TEXT,
    language    TEXT,
    stars       INTEGER NOT NULL DEFAULT 0,
    visible     BOOLEAN NOT NULL DEFAULT TRUE,
    synced_at   TIMESTAMPTZ,
    created_at  TIMESTAMPTZ NOT NULL DEFAULT NOW(),
    updated_at  TIMESTAMPTZ NOT NULL DEFAULT NOW()
)
"""

PROJECT_COLUMNS = (
    "id, slug, name, description, github_repo, homepage, language, "
    "stars, visible, synced_at, created_at, updated_at"
)


class PostgresProjectStorage(IProjectStorage):
    """
    Concrete implementation of IProjectStorage using PostgreSQL.

    Receives an already-connected psycopg2 connection (injected).
    Does not create or manage the connection itself — that's the
    responsibility of the caller (main.py / dependency wiring).
    """

    def __init__(self, conn) -> None:
        self._conn = conn

    def ensure_schema(self) -> None:
        """Create the projects table if it does not exist yet."""
        try:
            with self._conn.cursor() as cur:
                cur.execute(SCHEMA_SQL)
            self._conn.commit()
        except psycopg2.Error as exc:
            self._conn.rollback()
            raise PersistenceError(f"Could not create projects table: {exc}") from exc
        log.debug("Ensured projects table exists")

    def upsert_projects(self, records: list[ProjectRecord]) -> None:
        """
        Insert or update the whole batch in a single statement and commit once.

        ON CONFLICT (slug) DO UPDATE means:
          - New slug      → INSERT
          - Existing slug → UPDATE every synced column, including visible
            (sync re-shows projects an admin hid) and updated_at.

        PostgreSQL refuses to touch the same row twice in one statement, so
        records sharing a slug are collapsed first; the later one wins.
        """
        if not records:
            log.debug("No projects to upsert")
            return

        by_slug: dict[str, ProjectRecord] = {}
        for r in records:
            if r.slug in by_slug:
                log.debug("Slug collision on %r: %s replaces %s", r.slug, r.github_repo, by_slug[r.slug].github_repo)
            by_slug[r.slug] = r

        rows = [
            (
                r.slug,
                r.name,
                r.description,
                r.github_repo,
                r.homepage,
                r.language,
                r.stars,
                r.visible,
                r.synced_at,
            )
            for r in by_slug.values()
        ]

        try:
            with self._conn.cursor() as cur:
                execute_values(
                    cur,
                    """
                    INSERT INTO projects
                        (slug, name, description, github_repo, homepage, language, stars, visible, synced_at)
                    VALUES %s
                    ON CONFLICT (slug) DO UPDATE SET
                        name        = EXCLUDED.name,
                        description = EXCLUDED.description,
                        github_repo = EXCLUDED.github_repo,
                        homepage    = EXCLUDED.homepage,
                        language    = EXCLUDED.language,
                        stars       = EXCLUDED.stars,
                        visible     = EXCLUDED.visible,
                        synced_at   = EXCLUDED.synced_at,
                        updated_at  = NOW()
                    """,
                    rows,
                    page_size=max(len(rows), 1),
                )
            self._conn.commit()
        except psycopg2.Error as exc:
            self._conn.rollback()
            log.error("Project upsert rolled back: %s", exc)
            raise PersistenceError(f"Could not save {len(rows)} projects: {exc}") from exc

        log.debug("Upserted %d projects to PostgreSQL", len(rows))

    def list_projects(self,search: str | None = None,page: int = DEFAULT_PAGE,per_page: int = DEFAULT_PAGE_SIZE,visible_only: bool = False) -> ProjectPage:
        """
        Return one page of projects, most recently updated first.
        Non-positive page numbers or sizes fall back to the defaults.
        """
        page     = page if page and page > 0 else DEFAULT_PAGE
        per_page = per_page if per_page and per_page > 0 else DEFAULT_PAGE_SIZE

        clauses: list[str] = []
        params:  list      = []
        if visible_only:
            clauses.append("visible = TRUE")
        if search and search.strip():
            pattern = f"%{search.strip()}%"
            clauses.append("(name ILIKE %s OR description ILIKE %s)")
            params += [pattern, pattern]
        where = f"WHERE {' AND '.join(clauses)}" if clauses else ""

        try:
            with self._conn.cursor() as cur:
                cur.execute(
                    f"SELECT {PROJECT_COLUMNS} FROM projects {where} "
                    "ORDER BY updated_at DESC LIMIT %s OFFSET %s",
                    (*params, per_page, (page - 1) * per_page),
                )
                rows = cur.fetchall()
                cur.execute(f"SELECT COUNT(*) FROM projects {where}", tuple(params))
                total = cur.fetchone()[0]
        except psycopg2.Error as exc:
            self._conn.rollback()
            raise PersistenceError(f"Could not list projects: {exc}") from exc

        return ProjectPage(
            items       = [StoredProject(*row) for row in rows],
            total       = total,
            page        = page,
            per_page    = per_page,
            total_pages = math.ceil(total / per_page) or 1,
        )

    def set_visibility(self, slug: str, visible: bool) -> bool:
        """
        Hide or show one project. The next sync shows it again regardless.
        """
        try:
            with self._conn.cursor() as cur:
                cur.execute(
                    """
                    UPDATE projects
                    SET visible    = %s,
                        updated_at = NOW()
                    WHERE slug = %s
                    """,
                    (visible, slug),
                )
                updated = cur.rowcount
            self._conn.commit()
        except psycopg2.Error as exc:
            self._conn.rollback()
            raise PersistenceError(f"Could not update project {slug!r}: {exc}") from exc

        log.debug("Set visible=%s on %r (%d row)", visible, slug, updated)
        return updated > 0

"""
main.py — Dependency Wiring (Composition Root)
------------------------------------------------
This file has ONE job: wire all the pieces together and run the
requested operator command.

It does NOT contain any business logic. It just:
  1. Reads configuration from environment variables (SyncConfig)
  2. Creates concrete implementations of each interface
  3. Injects them into the classes that need them
  4. Runs the command (sync, init-db, list, hide, show)
  5. Reports the result and exits

Dependency graph (what depends on what):
                       main.py  (wires everything)
                          │
            ┌─────────────┼───────────────┐
            ▼             ▼               ▼
   ProjectSyncService  GitHubClient  PostgresProjectStorage
            │          (IRepoFetcher)  (IProjectStorage)
            ▼
   ProjectReconciler ── exclusion / normalizer
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys

import httpx
import psycopg2

from portfolio_sync import __version__
from portfolio_sync.config import SyncConfig

# Application layer
from portfolio_sync.application.reconciler import ProjectReconciler
from portfolio_sync.application.sync_service import ProjectSyncService
from portfolio_sync.domain.entities import SyncSummary
from portfolio_sync.domain.errors import PersistenceError, SyncError

# Infrastructure layer
from portfolio_sync.infrastructure.github_client import GitHubClient
from portfolio_sync.infrastructure.postgres_storage import PostgresProjectStorage

log = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s — %(message)s"


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level   = getattr(logging, level, logging.INFO),
        format  = LOG_FORMAT,
        datefmt = "%H:%M:%S",
    )


def _connect(config: SyncConfig):
    if not config.database_url:
        log.error("DATABASE_URL environment variable is required")
        sys.exit(1)
    try:
        return psycopg2.connect(config.database_url)
    except psycopg2.Error as exc:
        raise PersistenceError(f"Could not connect to database: {exc}") from exc


# ---------------------------------------------------------------------------
# Dependency wiring
# ---------------------------------------------------------------------------

async def build_and_sync(config: SyncConfig, conn, limit: int | None = None) -> SyncSummary:
    """
    Wires the sync dependency graph and runs one sync.

    The connection is injected so the caller owns its lifecycle; the HTTP
    client is created and closed here.
    """
    async with httpx.AsyncClient() as client:
        github_client = GitHubClient(
            client  = client,
            token   = config.github_token,
            api_url = config.api_url,
            timeout = config.request_timeout,
        )
        storage    = PostgresProjectStorage(conn=conn)
        reconciler = ProjectReconciler(storage=storage, exclude_patterns=config.exclude_patterns)
        service    = ProjectSyncService(fetcher=github_client, reconciler=reconciler, config=config)

        return await service.execute(limit)


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------

def _cmd_sync(config: SyncConfig, args: argparse.Namespace) -> int:
    conn = _connect(config)
    try:
        summary = asyncio.run(build_and_sync(config, conn, args.limit))
    finally:
        conn.close()

    log.info("✅ Sync complete | fetched=%d imported=%d excluded=%d",summary.fetched, summary.imported, summary.excluded)
    print(f"fetched={summary.fetched} imported={summary.imported} excluded={summary.excluded}")
    return 0


def _cmd_init_db(config: SyncConfig, args: argparse.Namespace) -> int:
    conn = _connect(config)
    try:
        PostgresProjectStorage(conn=conn).ensure_schema()
    finally:
        conn.close()
    log.info("Projects table ready")
    return 0


def _cmd_list(config: SyncConfig, args: argparse.Namespace) -> int:
    conn = _connect(config)
    try:
        page = PostgresProjectStorage(conn=conn).list_projects(
            search       = args.search,
            page         = args.page,
            per_page     = args.per_page,
            visible_only = args.visible_only,
        )
    finally:
        conn.close()

    for p in page.items:
        flag = " " if p.visible else "h"
        print(f"{flag} {p.slug:<30} {p.stars:>6}★  {p.language or '-':<12} {p.homepage or ''}")
    print(f"page {page.page}/{page.total_pages} | {page.total} projects")
    return 0


def _cmd_visibility(config: SyncConfig, args: argparse.Namespace) -> int:
    visible = args.command == "show"
    conn = _connect(config)
    try:
        found = PostgresProjectStorage(conn=conn).set_visibility(args.slug.lower(), visible)
    finally:
        conn.close()

    if not found:
        log.error("No project with slug %r", args.slug)
        return 1
    log.info("Project %r is now %s", args.slug, "visible" if visible else "hidden")
    return 0


COMMANDS = {
    "sync":    _cmd_sync,
    "init-db": _cmd_init_db,
    "list":    _cmd_list,
    "hide":    _cmd_visibility,
    "show":    _cmd_visibility,
}


def _positive_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected a positive integer, got {value!r}") from None
    if number < 1:
        raise argparse.ArgumentTypeError(f"expected a positive integer, got {value!r}")
    return number


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog        = "portfolio-sync",
        description = "Sync GitHub repositories into the portfolio projects table",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    sub = parser.add_subparsers(dest="command", required=True)

    sync = sub.add_parser("sync", help="Fetch repos from GitHub and upsert them as projects")
    sync.add_argument(
        "--limit",
        type    = _positive_int,
        default = None,
        help    = "Maximum number of projects to import (default: GITHUB_PROJECTS_LIMIT or 30)",
    )

    sub.add_parser("init-db", help="Create the projects table if it is missing")

    lst = sub.add_parser("list", help="List stored projects, most recently updated first")
    lst.add_argument("--search", default=None, help="Match name or description (case-insensitive)")
    lst.add_argument("--page", type=_positive_int, default=1)
    lst.add_argument("--per-page", type=_positive_int, default=9)
    lst.add_argument("--visible-only", action="store_true")

    for name, verb in (("hide", "Hide"), ("show", "Show")):
        cmd = sub.add_parser(name, help=f"{verb} one project (the next sync shows it again)")
        cmd.add_argument("slug")

    return parser


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

def cli(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        config = SyncConfig.from_env()
        _configure_logging(config.log_level)
        return COMMANDS[args.command](config, args)
    except SyncError as exc:
        _configure_logging("INFO")
        log.error("❌ %s failed: %s", args.command, exc)
        return 1


if __name__ == "__main__":
    sys.exit(cli())

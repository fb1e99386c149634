"""
Tests for the sync use case wired with fakes and a mocked GitHub API.
"""

import asyncio

import httpx
import pytest

from portfolio_sync.application.normalizer import normalize_repo
from portfolio_sync.application.reconciler import ProjectReconciler
from portfolio_sync.application.sync_service import ProjectSyncService
from portfolio_sync.config import SyncConfig
from portfolio_sync.domain.errors import ConfigurationError, UpstreamError
from portfolio_sync.domain.interfaces import IRepoFetcher
from portfolio_sync.infrastructure.github_client import GitHubClient


class FakeFetcher(IRepoFetcher):

    def __init__(self, repos=None, error=None):
        self.repos = repos or []
        self.error = error
        self.calls = []

    async def fetch_repos(self, account, limit):
        self.calls.append((account, limit))
        if self.error:
            raise self.error
        return self.repos[:min(max(limit, 1), 100)]


def build_service(fetcher, storage, **config):
    cfg = SyncConfig(**{"github_username": "octocat", **config})
    return ProjectSyncService(fetcher, ProjectReconciler(storage, cfg.exclude_patterns), cfg)


class TestExecute:

    @pytest.mark.asyncio
    async def test_uses_configured_limit_and_account(self, storage, make_repo):
        fetcher = FakeFetcher([make_repo("a"), make_repo("b")])

        summary = await build_service(fetcher, storage, projects_limit=12).execute()

        assert fetcher.calls == [("octocat", 12)]
        assert summary.imported == 2

    @pytest.mark.asyncio
    async def test_limit_override(self, storage, make_repo):
        fetcher = FakeFetcher([make_repo(f"r{i}") for i in range(5)])

        summary = await build_service(fetcher, storage).execute(limit=3)

        assert fetcher.calls == [("octocat", 3)]
        assert (summary.fetched, summary.imported) == (3, 3)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("bad", [0, -1, True, "5"])
    async def test_rejects_invalid_limit_override(self, storage, bad):
        fetcher = FakeFetcher()

        with pytest.raises(ConfigurationError):
            await build_service(fetcher, storage).execute(limit=bad)

        assert fetcher.calls == []

    @pytest.mark.asyncio
    async def test_exclude_patterns_from_config(self, storage, make_repo):
        fetcher = FakeFetcher([make_repo("foo"), make_repo("foo-archive"), make_repo("bar")])

        summary = await build_service(fetcher, storage, exclude_patterns=["archive"]).execute()

        assert summary.as_dict() == {"fetched": 3, "imported": 2, "excluded": 1}

    @pytest.mark.asyncio
    async def test_missing_account_fails_before_fetch(self, storage):
        fetcher = FakeFetcher()
        service = build_service(fetcher, storage, github_username="")

        with pytest.raises(ConfigurationError, match="GITHUB_USERNAME"):
            await service.execute()

        assert fetcher.calls == []
        assert storage.batches == []


class TestExecuteAgainstGitHub:

    @pytest.mark.asyncio
    async def test_forbidden_response_leaves_storage_untouched(self, storage, make_repo):
        storage.upsert_projects([normalize_repo(make_repo("kept"))])
        before = dict(storage.projects)
        http = httpx.AsyncClient(transport=httpx.MockTransport(lambda request: httpx.Response(403, text="Forbidden")))
        service = build_service(GitHubClient(client=http), storage)

        async with http:
            with pytest.raises(UpstreamError) as excinfo:
                await service.execute()

        assert excinfo.value.status == 403
        assert excinfo.value.body == "Forbidden"
        assert storage.projects == before
        assert len(storage.batches) == 1

    @pytest.mark.asyncio
    async def test_end_to_end_sync(self, storage):
        payload = [
            {"id": 1, "name": "Blog", "full_name": "octocat/Blog", "description": None,
             "html_url": "https://github.com/octocat/Blog", "homepage": None, "language": "Python",
             "stargazers_count": 3, "updated_at": "2024-05-02T00:00:00Z", "fork": False},
            {"id": 2, "name": "linux", "full_name": "octocat/linux", "description": "fork",
             "html_url": "https://github.com/octocat/linux", "homepage": None, "language": "C",
             "stargazers_count": 0, "updated_at": "2024-05-01T00:00:00Z", "fork": True},
        ]
        http = httpx.AsyncClient(transport=httpx.MockTransport(lambda request: httpx.Response(200, json=payload)))
        service = build_service(GitHubClient(client=http), storage)

        async with http:
            summary = await service.execute()

        assert summary.as_dict() == {"fetched": 2, "imported": 1, "excluded": 1}
        blog = storage.projects["blog"]
        assert blog.description == "No description provided."
        assert blog.homepage == "https://github.com/octocat/Blog"
        assert blog.visible is True


class BlockingFetcher(IRepoFetcher):
    """Never returns until cancelled."""

    def __init__(self):
        self.started = asyncio.Event()

    async def fetch_repos(self, account, limit):
        self.started.set()
        await asyncio.Event().wait()


class TestCancellation:

    @pytest.mark.asyncio
    async def test_cancelled_fetch_writes_nothing(self, storage):
        fetcher = BlockingFetcher()
        task = asyncio.create_task(build_service(fetcher, storage).execute())
        await fetcher.started.wait()

        task.cancel()

        with pytest.raises(asyncio.CancelledError):
            await task
        assert storage.batches == []
        assert storage.projects == {}

    @pytest.mark.asyncio
    async def test_cancelled_http_request_writes_nothing(self, storage):
        started = asyncio.Event()

        async def handler(request):
            started.set()
            await asyncio.sleep(60)
            return httpx.Response(200, json=[])

        http = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        async with http:
            task = asyncio.create_task(build_service(GitHubClient(client=http), storage).execute())
            await started.wait()
            task.cancel()

            with pytest.raises(asyncio.CancelledError):
                await task

        assert storage.batches == []

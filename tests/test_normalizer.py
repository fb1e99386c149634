"""
Tests for mapping repo descriptors to project records.
"""

from datetime import datetime, timezone

from portfolio_sync.application.normalizer import DEFAULT_DESCRIPTION, normalize_repo


class TestNormalizeRepo:

    def test_maps_fields(self, make_repo):
        repo = make_repo("Portfolio-Site", description="My site", homepage="https://me.dev", language="TypeScript", stars=42)
        now = datetime(2024, 6, 1, tzinfo=timezone.utc)

        record = normalize_repo(repo, now)

        assert record.slug == "portfolio-site"
        assert record.name == "Portfolio-Site"
        assert record.description == "My site"
        assert record.github_repo == "octocat/Portfolio-Site"
        assert record.homepage == "https://me.dev"
        assert record.language == "TypeScript"
        assert record.stars == 42
        assert record.visible is True
        assert record.synced_at == now

    def test_missing_description_gets_fallback(self, make_repo):
        assert normalize_repo(make_repo("x", description=None)).description == DEFAULT_DESCRIPTION
        assert normalize_repo(make_repo("x", description="")).description == "No description provided."

    def test_missing_homepage_falls_back_to_repo_url(self, make_repo):
        repo = make_repo("y", homepage=None, html_url="https://x/y")
        assert normalize_repo(repo).homepage == "https://x/y"

    def test_language_passes_through_none(self, make_repo):
        assert normalize_repo(make_repo("z", language=None)).language is None

    def test_slug_is_lowercased_only(self, make_repo):
        assert normalize_repo(make_repo("My_Repo.js")).slug == "my_repo.js"

    def test_same_input_same_fields_except_synced_at(self, make_repo):
        repo = make_repo("stable")
        first = normalize_repo(repo)
        second = normalize_repo(repo)

        assert first.__dict__ | {"synced_at": None} == second.__dict__ | {"synced_at": None}
        assert second.synced_at >= first.synced_at
        assert first.synced_at.tzinfo is not None

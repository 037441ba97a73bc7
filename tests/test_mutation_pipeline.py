"""
Tests for starring and unstarring repositories in bulk.
"""

import pytest

from stars.exceptions import InvalidTargetError, NotFoundError, ServerError
from stars.manager import StarManager
from stars.testing import FakeGitHub, create_repository, create_star_record


def url(full_name: str) -> str:
    return f"https://github.com/{full_name}"


class TestStarFromTargets:
    def test_star_policy(self, fake_github: FakeGitHub, manager: StarManager) -> None:
        """
        Property: Star policy

        A recently pushed, unarchived, unstarred repository is starred; one
        pushed 5 months ago is skipped without error when the limit is 2.
        """
        fake_github.add_repository(create_repository("octo/fresh", pushed_months_ago=1))
        fake_github.add_repository(create_repository("octo/stale", pushed_months_ago=5))

        result = manager.star_from_targets([url("octo/fresh"), url("octo/stale")], 2)

        assert result.count == 1
        assert result.ok
        assert fake_github.is_starred("octo/fresh")
        assert not fake_github.is_starred("octo/stale")

    def test_archived_is_skipped(self, fake_github: FakeGitHub, manager: StarManager) -> None:
        fake_github.add_repository(create_repository("octo/frozen", archived=True))

        result = manager.star_from_targets([url("octo/frozen")], 2)

        assert result.count == 0
        assert result.ok
        assert not fake_github.was_called("activity.star")

    def test_already_starred_is_skipped(self, fake_github: FakeGitHub, manager: StarManager) -> None:
        fake_github.add_repository(create_repository("octo/known"), starred=True)

        result = manager.star_from_targets([url("octo/known")], 2)

        assert result.count == 0
        assert result.ok
        assert not fake_github.was_called("activity.star")

    def test_invalid_target_does_not_stop_others(
        self, fake_github: FakeGitHub, manager: StarManager
    ) -> None:
        """
        Property: Structural skip

        A URL that is not owner/name is recorded as InvalidTargetError and
        the remaining targets are still processed.
        """
        fake_github.add_repository(create_repository("octo/good"))
        bad = "https://github.com/only-owner"

        result = manager.star_from_targets([bad, url("octo/good")], 2)

        assert result.count == 1
        assert len(result.errors) == 1
        assert isinstance(result.errors[0], InvalidTargetError)
        assert result.errors[0].target == bad
        assert fake_github.call_count("repos.get") == 1

    def test_remote_failure_is_not_fatal(self, fake_github: FakeGitHub, manager: StarManager) -> None:
        for name in ("a", "broken", "c"):
            fake_github.add_repository(create_repository(f"octo/{name}"))
        fake_github.fail(
            "repos.get",
            ServerError("HTTP_500", "boom"),
            when=lambda owner, name: name == "broken",
        )

        result = manager.star_from_targets([url(f"octo/{n}") for n in ("a", "broken", "c")], 2)

        assert result.count == 2
        assert len(result.errors) == 1
        assert isinstance(result.errors[0], ServerError)

    def test_unknown_repository(self, fake_github: FakeGitHub, manager: StarManager) -> None:
        result = manager.star_from_targets([url("octo/nope")], 2)

        assert result.count == 0
        assert isinstance(result.errors[0], NotFoundError)

    @pytest.mark.parametrize("concurrency", [0, 1, 3])
    def test_every_target_evaluated(
        self, fake_github: FakeGitHub, manager: StarManager, concurrency: int
    ) -> None:
        names = [f"octo/r{i}" for i in range(12)]
        for name in names:
            fake_github.add_repository(create_repository(name))

        result = manager.star_from_targets([url(n) for n in names], 2, concurrency)

        assert result.count == 12
        assert all(fake_github.is_starred(n) for n in names)


class TestStarFromSources:
    def test_org_with_pagination_and_failed_page(
        self, fake_github: FakeGitHub, manager: StarManager
    ) -> None:
        for i in range(25):
            fake_github.add_repository(create_repository(f"acme/repo-{i:02d}"))
        fake_github.add_repository(create_repository("acme/forked", fork=True))
        fake_github.fail(
            "repos.list_by_org",
            ServerError("HTTP_502", "bad gateway"),
            when=lambda org, page, per_page: page == 2,
        )

        result = manager.star_from_org("acme", 2, max_concurrency=2)

        assert result.count == 15
        assert len(result.errors) == 1
        assert isinstance(result.errors[0], ServerError)
        assert not fake_github.is_starred("acme/forked")

    def test_org_not_found_raises(self, fake_github: FakeGitHub, manager: StarManager) -> None:
        with pytest.raises(NotFoundError):
            manager.star_from_org("ghost", 2)

    def test_from_user(self, fake_github: FakeGitHub, manager: StarManager) -> None:
        fake_github.add_user_stars(
            "alice",
            [
                create_repository("alice/one"),
                create_repository("bob/two"),
                create_repository("bob/old", pushed_months_ago=12),
            ],
        )

        result = manager.star_from_user("alice", 2)

        assert result.count == 2
        assert fake_github.is_starred("alice/one")
        assert fake_github.is_starred("bob/two")
        assert not fake_github.is_starred("bob/old")

    def test_from_url(
        self, fake_github: FakeGitHub, manager: StarManager, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        fake_github.add_repository(create_repository("octo/linked"))
        monkeypatch.setattr(
            "stars.manager.fetch_urls",
            lambda page_url: [
                "https://example.com/blog",
                "https://github.com/trending/python",
                url("octo/linked"),
            ],
        )

        result = manager.star_from_url("https://example.com/list", 2)

        assert result.count == 1
        assert fake_github.is_starred("octo/linked")

    def test_from_url_without_github_links(
        self, fake_github: FakeGitHub, manager: StarManager, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setattr("stars.manager.fetch_urls", lambda page_url: ["https://example.com/"])

        result = manager.star_from_url("https://example.com/list", 2)

        assert result.count == 0
        assert result.ok
        assert not fake_github.was_called("repos.get")


class TestCleanup:
    def cache(self, fake_github: FakeGitHub, manager: StarManager, full_name: str, **kwargs) -> None:
        fake_github.add_repository(create_repository(full_name), starred=True)
        manager.store.upsert(create_star_record(full_name, **kwargs))

    def test_cleanup_exactness(self, fake_github: FakeGitHub, manager: StarManager) -> None:
        """
        Property: Cleanup exactness

        A (pushed 3 months ago, live) goes on the first run; B (pushed 1
        month ago, archived) stays until include_archived=True.
        """
        self.cache(fake_github, manager, "octo/a", pushed_months_ago=3, archived=False)
        self.cache(fake_github, manager, "octo/b", pushed_months_ago=1, archived=True)

        first = manager.cleanup(2, include_archived=False)

        assert first.count == 1
        assert [r.url for r in manager.store.all()] == [url("octo/b")]
        assert not fake_github.is_starred("octo/a")
        assert fake_github.is_starred("octo/b")

        second = manager.cleanup(2, include_archived=True)

        assert second.count == 1
        assert manager.store.count() == 0
        assert not fake_github.is_starred("octo/b")

    def test_failed_unstar_keeps_record(self, fake_github: FakeGitHub, manager: StarManager) -> None:
        self.cache(fake_github, manager, "octo/old", pushed_months_ago=6, archived=True)
        self.cache(fake_github, manager, "octo/older", pushed_months_ago=9, archived=True)
        fake_github.fail(
            "activity.unstar",
            ServerError("HTTP_500", "boom"),
            when=lambda owner, name: name == "older",
        )

        result = manager.cleanup(2, include_archived=False, max_concurrency=2)

        assert result.count == 1
        assert len(result.errors) == 1
        assert [r.url for r in manager.store.all()] == [url("octo/older")]

    def test_nothing_qualifies(self, fake_github: FakeGitHub, manager: StarManager) -> None:
        self.cache(fake_github, manager, "octo/b", pushed_months_ago=1, archived=True)

        result = manager.cleanup(2, include_archived=False)

        assert result.count == 0
        assert result.ok
        assert not fake_github.was_called("activity.unstar")

"""
Pytest fixtures and factories for testing code built on stars.
"""

from collections.abc import Generator
from datetime import datetime, timezone
from pathlib import Path

import pytest
from dateutil.relativedelta import relativedelta

from stars.manager import StarManager
from stars.store import StarStore
from stars.testing.fake import FakeGitHub
from stars.types.repos import Repository
from stars.types.stars import StarRecord


def _months_back(months: float) -> datetime:
    whole = int(months)
    days = round((months - whole) * 30)
    return datetime.now(timezone.utc) - relativedelta(months=whole, days=days)


def create_repository(
    full_name: str,
    pushed_months_ago: float = 1,
    archived: bool = False,
    language: str | None = "Go",
    topics: list[str] | None = None,
    stargazers: int = 10,
    description: str | None = None,
    fork: bool = False,
) -> Repository:
    """
    Create a Repository for "owner/name" with sensible defaults.

    Example:
        ```python
        repo = create_repository("octo/old", pushed_months_ago=5, archived=True)
        ```
    """
    owner, name = full_name.split("/", 1)
    return Repository(
        html_url=f"https://github.com/{full_name}",
        name=name,
        owner=owner,
        language=language,
        description=description if description is not None else f"{name} description",
        topics=list(topics or []),
        stargazers=stargazers,
        pushed_at=_months_back(pushed_months_ago),
        archived=archived,
        fork=fork,
    )


def create_star_record(
    full_name: str,
    pushed_months_ago: float = 1,
    archived: bool = False,
    language: str = "go",
    topics: list[str] | None = None,
    stargazers: int = 10,
    description: str = "",
) -> StarRecord:
    """Create a cached StarRecord for "owner/name"."""
    return StarRecord(
        url=f"https://github.com/{full_name}",
        language=language,
        description=description,
        topics=list(topics or []),
        stargazers=stargazers,
        pushed_at=_months_back(pushed_months_ago),
        starred_at=datetime(2020, 1, 1, tzinfo=timezone.utc),
        archived=archived,
    )


def populate_stars(github: FakeGitHub, count: int, owner: str = "octo") -> list[Repository]:
    """Star `count` repositories named owner/repo-NNN on the fake remote."""
    repos = []
    for i in range(count):
        repo = create_repository(
            f"{owner}/repo-{i:03d}",
            language=["Go", "Python", "Rust"][i % 3],
            topics=[f"topic-{i % 4}"],
            stargazers=i,
        )
        repos.append(github.add_repository(repo, starred=True))
    return repos


@pytest.fixture
def fake_github() -> Generator[FakeGitHub, None, None]:
    """
    Provide an empty FakeGitHub for the user "octocat".

    Example:
        ```python
        def test_my_feature(fake_github, manager):
            fake_github.add_repository(create_repository("octo/a"), starred=True)
            assert manager.save_all(2).count == 1
        ```
    """
    github = FakeGitHub(username="octocat")
    yield github
    github.reset()


@pytest.fixture
def store(tmp_path: Path) -> Generator[StarStore, None, None]:
    """Provide a StarStore backed by a temporary file."""
    with StarStore(tmp_path / "stars.db") as s:
        yield s


@pytest.fixture
def manager(fake_github: FakeGitHub, store: StarStore) -> StarManager:
    """Provide a StarManager wired to fake_github and store, 10 items per page."""
    return StarManager(fake_github, store, page_size=10)

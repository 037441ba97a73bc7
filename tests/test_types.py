"""
Tests for the data models and the aggregate error.
"""

from datetime import datetime, timezone

from hypothesis import given, settings
from hypothesis import strategies as st

from stars.exceptions import AggregateError, ServerError, StarsError
from stars.types import BatchResult, Repository, StarRecord, StarredRepository
from stars.types.repos import EPOCH, parse_timestamp


def test_parse_timestamp() -> None:
    assert parse_timestamp("2024-03-04T05:06:07Z") == datetime(2024, 3, 4, 5, 6, 7, tzinfo=timezone.utc)
    assert parse_timestamp(None) == EPOCH
    assert parse_timestamp("") == EPOCH


def test_parse_timestamp_converts_to_utc() -> None:
    parsed = parse_timestamp("2024-03-04T07:06:07+02:00")

    assert parsed == datetime(2024, 3, 4, 5, 6, 7, tzinfo=timezone.utc)
    assert parsed.tzinfo == timezone.utc


def test_starred_repository_from_plain_repository() -> None:
    star = StarredRepository.from_api({
        "html_url": "https://github.com/psf/requests",
        "name": "requests",
        "owner": {"login": "psf"},
    })

    assert star.starred_at == EPOCH
    assert star.repository.full_name == "psf/requests"
    assert star.repository.topics == []


def test_star_record_from_starred() -> None:
    repo = Repository(
        html_url="https://github.com/psf/requests",
        name="requests",
        owner="psf",
        language="Python",
        description=None,
        topics=["http"],
        stargazers=50_000,
        archived=True,
    )
    at = datetime(2021, 6, 1, tzinfo=timezone.utc)

    record = StarRecord.from_starred(StarredRepository(starred_at=at, repository=repo))

    assert record.url == "https://github.com/psf/requests"
    assert record.language == "python"
    assert record.description == ""
    assert record.starred_at == at
    assert record.archived


def test_star_record_without_language() -> None:
    repo = Repository(html_url="https://github.com/a/b", name="b", owner="a")

    record = StarRecord.from_starred(StarredRepository(starred_at=EPOCH, repository=repo))

    assert record.language == ""


def test_row_format() -> None:
    record = StarRecord(
        url="https://github.com/a/b",
        topics=["x", "y"],
        pushed_at=datetime(2024, 1, 1, tzinfo=timezone.utc),
        archived=True,
    )

    row = record.to_row()

    assert row["topics"] == '["x", "y"]'
    assert row["pushed_at"] == "2024-01-01T00:00:00+00:00"
    assert row["archived"] == 1
    assert StarRecord.from_row(row) == record


@given(n=st.integers(min_value=1, max_value=20))
@settings(max_examples=30)
def test_property_aggregate_error(n: int) -> None:
    """
    Property: Aggregate error

    An AggregateError over N failures holds all N, reports N in its message
    and previews at most three of them.
    """
    errors = [ServerError("HTTP_500", f"failure {i}") for i in range(n)]

    error = AggregateError(errors)

    assert isinstance(error, StarsError)
    assert len(error) == n
    assert list(error) == errors
    assert error.message.startswith(f"{n} operation(s) failed: ")
    assert sum(f"failure {i}" in error.message for i in range(n)) == min(n, 3)
    if n > 3:
        assert error.message.endswith(f"and {n - 3} more")


def test_batch_result() -> None:
    empty = BatchResult(count=3)
    assert empty.ok
    assert empty.error is None

    failed = BatchResult(count=1, errors=[ServerError("HTTP_502", "bad")])
    assert not failed.ok
    assert isinstance(failed.error, AggregateError)

    merged = empty.merge(failed)
    assert merged.count == 4
    assert len(merged.errors) == 1

"""
StarManager: the central object used to manage stars for a GitHub account.

It mirrors the account's stars into the local cache, stars and unstars
repositories in bulk, and answers queries over the cache. Bulk operations
run on a per-operation WorkerPool and never stop at the first failure: each
returns a BatchResult with the success count and every individual error.
"""

import time
from collections import Counter
from collections.abc import Callable, Iterable
from datetime import datetime, timezone
from pathlib import Path
from random import Random
from typing import Any, TypeVar

from dateutil.relativedelta import relativedelta

from stars.client import GitHubClient
from stars.config import DEFAULT_CONCURRENCY, PAGE_SIZE
from stars.exceptions import InvalidTargetError, NoResultsError, StoreError
from stars.logging import get_logger
from stars.pool import WorkerPool
from stars.store import StarStore
from stars.types.repos import Page, StarredRepository
from stars.types.stars import BatchResult, StarRecord
from stars.urls import fetch_urls, filter_github_urls, repository_path

T = TypeVar("T")

logger = get_logger("pipeline")


def months_ago(months: int, now: datetime | None = None) -> datetime:
    """Calendar-month subtraction from now (UTC)."""
    return (now or datetime.now(timezone.utc)) - relativedelta(months=months)


class StarManager:
    """
    Manages the stars of one GitHub account.

    Example:
        ```python
        from stars.manager import StarManager

        with StarManager.create() as manager:
            result = manager.save_all(max_concurrency=10)
            print(result.count, result.error)
            for record in manager.query(5, language="go"):
                print(record.url)
        ```
    """

    def __init__(
        self,
        client: GitHubClient,
        store: StarStore,
        page_size: int = PAGE_SIZE,
    ) -> None:
        """
        Args:
            client: GitHub client (or anything with the same activity/repos
                interface)
            store: Local cache
            page_size: Items requested per page of any remote listing
        """
        self.client = client
        self.store = store
        self.page_size = page_size

    @classmethod
    def create(cls, cache_path: str | Path | None = None, **kwargs: Any) -> "StarManager":
        """
        Build a manager from ~/.netrc (or GITHUB_USER/GITHUB_TOKEN) and the
        default cache.

        Raises:
            ConfigurationError: If no credentials can be resolved
            StoreError: If the cache cannot be opened
        """
        logger.debug("Initializing GitHub client")
        client = GitHubClient.resolve(**kwargs)
        logger.debug("Opening local cache")
        try:
            store = StarStore(cache_path)
        except StoreError:
            client.close()
            raise
        return cls(client, store)

    def close(self) -> None:
        self.store.close()
        self.client.close()

    def __enter__(self) -> "StarManager":
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Fetch pipeline
    # ------------------------------------------------------------------

    def save_starred_repository(self, star: StarredRepository) -> StarRecord:
        """Save a single starred repository to the local cache."""
        record = StarRecord.from_starred(star)
        self.store.upsert(record)
        logger.info("Saved %s (with topics %s)", record.url, record.topics)
        return record

    def save_page(self, page_no: int) -> tuple[Page[StarredRepository], BatchResult]:
        """
        Fetch one page of the user's stars and save every item on it.

        A failed save is recorded in the result; the rest of the page is
        still saved.

        Raises:
            StarsError: If the page itself cannot be fetched
        """
        page = self.client.activity.list_starred(
            self.client.username, page=page_no, per_page=self.page_size
        )
        logger.info("Attempting to save %d starred projects on page %d...", len(page.items), page_no)

        result = BatchResult()
        for star in page.items:
            try:
                self.save_starred_repository(star)
            except StoreError as e:
                logger.error("Could not save %s: %s", star.repository.html_url, e)
                result.errors.append(e)
            else:
                result.count += 1
        return page, result

    def save_all(self, max_concurrency: int = DEFAULT_CONCURRENCY) -> BatchResult:
        """
        Save all of the user's starred repositories.

        The first page is fetched synchronously to learn the last page number
        from the Link header; pages 2..last are then spread across
        max_concurrency workers (one worker per page when 0).

        Returns:
            BatchResult with the number of saved stars and every page or
            item failure

        Raises:
            StarsError: If the first page cannot be fetched
            ValueError: If max_concurrency is negative
        """
        pool = WorkerPool(max_concurrency, name="save")

        logger.info("Attempting to save first page...")
        first_page, result = self.save_page(1)

        if first_page.last_page > 1:
            logger.info(
                "Attempting to save the rest of the pages (2..%d)...", first_page.last_page
            )
            pages = range(2, first_page.last_page + 1)
            for outcome in pool.run(lambda page_no: self.save_page(page_no)[1], pages):
                if outcome.error is not None:
                    logger.error(
                        "An error occurred while fetching page %d of %s's GitHub stars: %s",
                        outcome.item,
                        self.client.username,
                        outcome.error,
                    )
                    result.errors.append(outcome.error)
                else:
                    result.count += outcome.value.count
                    result.errors.extend(outcome.value.errors)

        logger.info("Saved %d stars (%d errors)", result.count, len(result.errors))
        return result

    def save_if_empty(self, max_concurrency: int = DEFAULT_CONCURRENCY) -> BatchResult | None:
        """Save all stars if the local cache is empty; otherwise do nothing."""
        if self.store.count() == 0:
            logger.info("Local cache is empty, fetching stars")
            return self.save_all(max_concurrency)
        return None

    # ------------------------------------------------------------------
    # Bulk mutation pipeline
    # ------------------------------------------------------------------

    def star_repository(self, owner: str, name: str) -> None:
        """Star a given repository by owner and repository name."""
        logger.debug("Starring %s/%s", owner, name)
        self.client.activity.star(owner, name)
        logger.info("Successfully starred %s/%s", owner, name)

    def _star_if_qualifies(self, target: str, not_before: datetime) -> bool:
        owner, name = repository_path(target)

        logger.info("Evaluating %s/%s", owner, name)
        repo = self.client.repos.get(owner, name)
        owner, name = repo.owner or owner, repo.name or name

        if self.client.activity.is_starred(owner, name):
            logger.info("%s/%s already starred - skipping", owner, name)
            return False

        if repo.pushed_at < not_before or repo.archived:
            logger.info(
                "%s/%s does not qualify - archived: %s, pushed: %s",
                owner,
                name,
                repo.archived,
                repo.pushed_at.isoformat(),
            )
            return False

        self.star_repository(owner, name)
        return True

    def star_from_targets(
        self,
        targets: Iterable[str],
        not_older_than_months: int,
        max_concurrency: int = DEFAULT_CONCURRENCY,
    ) -> BatchResult:
        """
        Star each repository in the given list of repository URLs.

        A repository is starred only when it is not starred yet, not archived
        and pushed to within the last not_older_than_months months; others
        are skipped without error. URLs that do not resolve to owner/name
        and failed remote calls are recorded in the result.

        Args:
            targets: Repository URLs
            not_older_than_months: Age limit for the last push
            max_concurrency: Worker threads (0 = one per target)
        """
        targets = [str(target) for target in targets]
        pool = WorkerPool(max_concurrency, name="star")
        not_before = months_ago(not_older_than_months)

        logger.debug("Preparing to star %d repositories", len(targets))

        result = BatchResult()
        for outcome in pool.run(lambda t: self._star_if_qualifies(t, not_before), targets):
            if isinstance(outcome.error, InvalidTargetError):
                logger.error("%s invalid", outcome.item)
                result.errors.append(outcome.error)
            elif outcome.error is not None:
                logger.error("Failed to star %s: %s", outcome.item, outcome.error)
                result.errors.append(outcome.error)
            elif outcome.value:
                result.count += 1

        if result.count == 0:
            logger.warning("Added 0 repos")
        else:
            logger.info("Successfully starred %d repos", result.count)
        return result

    def _collect_pages(
        self,
        fetch: Callable[[int], Page[T]],
        max_concurrency: int,
        what: str,
    ) -> tuple[list[T], list[Exception]]:
        """
        Fetch every page of a collection: page 1 synchronously, the rest on
        the pool. Items are gathered only by the calling thread.

        Raises:
            StarsError: If the first page cannot be fetched
        """
        pool = WorkerPool(max_concurrency, name="list")

        logger.info("Listing first %d of %s", self.page_size, what)
        first = fetch(1)
        items = list(first.items)
        errors: list[Exception] = []

        if first.last_page > 1:
            logger.info("Last page is %d. Fetching the rest of the pages", first.last_page)
            for outcome in pool.run(fetch, range(2, first.last_page + 1)):
                if outcome.error is not None:
                    logger.error(
                        "encountered error fetching page %d of %s: %s",
                        outcome.item,
                        what,
                        outcome.error,
                    )
                    errors.append(outcome.error)
                else:
                    logger.info(
                        "Successfully fetched %d items from page %d of %s",
                        len(outcome.value.items),
                        outcome.item,
                        what,
                    )
                    items.extend(outcome.value.items)

        return items, errors

    def star_from_org(
        self,
        org: str,
        not_older_than_months: int,
        max_concurrency: int = DEFAULT_CONCURRENCY,
    ) -> BatchResult:
        """
        Star a given org's source repositories, given that they are not
        archived and are recently pushed to.

        Raises:
            StarsError: If the first page of the org listing cannot be fetched
        """
        repos, errors = self._collect_pages(
            lambda page_no: self.client.repos.list_by_org(
                org, page=page_no, per_page=self.page_size, type="sources"
            ),
            max_concurrency,
            f"{org} org repos",
        )
        urls = [repo.html_url for repo in repos if not repo.fork]
        logger.info("Found %d source repositories in %s", len(urls), org)

        result = self.star_from_targets(urls, not_older_than_months, max_concurrency)
        return BatchResult(errors=errors).merge(result)

    def star_from_user(
        self,
        user: str,
        not_older_than_months: int,
        max_concurrency: int = DEFAULT_CONCURRENCY,
    ) -> BatchResult:
        """
        Star the repositories another user has starred, subject to the same
        age and archive rules.

        Raises:
            StarsError: If the first page of the user's stars cannot be fetched
        """
        stars, errors = self._collect_pages(
            lambda page_no: self.client.activity.list_starred(
                user, page=page_no, per_page=self.page_size
            ),
            max_concurrency,
            f"{user}'s stars",
        )
        urls = [star.repository.html_url for star in stars]
        logger.info("Found %d stars of %s", len(urls), user)

        result = self.star_from_targets(urls, not_older_than_months, max_concurrency)
        return BatchResult(errors=errors).merge(result)

    def star_from_url(
        self,
        page_url: str,
        not_older_than_months: int,
        max_concurrency: int = DEFAULT_CONCURRENCY,
    ) -> BatchResult:
        """
        Star every GitHub repository linked from a web page.

        Raises:
            StarsError: If the page cannot be fetched or has no URLs
        """
        urls = filter_github_urls(fetch_urls(page_url))
        logger.info("Found %d GitHub URLs", len(urls))

        if not urls:
            logger.info("No GitHub URLs found")
            return BatchResult()

        return self.star_from_targets(urls, not_older_than_months, max_concurrency)

    def remove_star(self, record: StarRecord) -> None:
        """
        Unstar the repository on GitHub and remove it from the local cache.

        The cached record is kept when unstarring fails.
        """
        owner, name = repository_path(record.url)
        self.client.activity.unstar(owner, name)
        self.store.delete(record.url)
        logger.info("Removed %s", record.url)

    def cleanup(
        self,
        older_than_months: int,
        include_archived: bool,
        max_concurrency: int = 0,
    ) -> BatchResult:
        """
        Remove stars older than a specified time in months, and those whose
        archive status equals include_archived.

        Args:
            older_than_months: Age limit for the last push
            include_archived: Archive status that also qualifies a star
            max_concurrency: Worker threads (default 0 = one per star)

        Raises:
            StoreError: If the cache cannot be read
        """
        not_before = months_ago(older_than_months)
        all_stars = self.store.all()

        logger.info("Filtering stars to delete (from %d)...", len(all_stars))
        to_delete = [
            star
            for star in all_stars
            if star.pushed_at < not_before or star.archived == include_archived
        ]
        for star in to_delete:
            logger.info(
                "Queueing %s for deletion (last pushed at %s, archive status: %s)",
                star.url,
                star.pushed_at.isoformat(),
                star.archived,
            )

        result = BatchResult()
        for outcome in WorkerPool(max_concurrency, name="cleanup").run(self.remove_star, to_delete):
            if outcome.error is not None:
                logger.error(
                    "An error occurred while attempting to unstar %s: %s",
                    outcome.item.url,
                    outcome.error,
                )
                result.errors.append(outcome.error)
            else:
                result.count += 1

        logger.info("Removed %d of %d stars", result.count, len(to_delete))
        return result

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def topics(self) -> list[tuple[str, int]]:
        """All topics of the cached stars with occurrence counts, most common first."""
        counts = Counter(topic for star in self.store.all() for topic in star.topics)
        return counts.most_common()

    def query(
        self,
        count: int,
        language: str = "",
        topic: str = "",
        random: bool = False,
    ) -> list[StarRecord]:
        """
        Return cached stars given a count, and an optional language and
        topic to filter by.

        Results are ordered by stargazers (descending) or shuffled when
        random is set.

        Raises:
            NoResultsError: If nothing matches
            ValueError: If count is negative
        """
        if count < 0:
            raise ValueError(f"count must be >= 0, got {count}")

        stars = self.store.find_by("language", language) if language else self.store.all()

        if topic:
            stars = [star for star in stars if topic in star.topics]

        if random:
            Random(time.time_ns()).shuffle(stars)
        else:
            stars.sort(key=lambda star: star.stargazers, reverse=True)

        if not stars:
            raise NoResultsError()

        return stars[:count]

    def clear_cache(self) -> None:
        """Reset the local cache database file."""
        logger.debug("Clearing out cache")
        self.store.clear()

"""
Bounded worker pool for the bulk pipelines.

A feeder thread hands items to the workers through a queue of size one, so
it blocks until a worker is free. Workers never touch shared state: every
outcome, value or exception, goes onto a results queue that the calling
thread drains. The caller is therefore the only writer of any aggregate
built from the outcomes.

Each bulk operation builds its own pool; threads end when the items run out.
"""

import queue
import threading
from collections.abc import Callable, Iterable, Iterator
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from stars.logging import get_logger

T = TypeVar("T")
R = TypeVar("R")

logger = get_logger("pipeline")

_STOP = object()


@dataclass
class Outcome(Generic[T, R]):
    """Result of applying the work function to one item."""

    item: T
    value: R | None = None
    error: Exception | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


class WorkerPool:
    """
    Runs a function over items on a fixed number of threads.

    Example:
        ```python
        pool = WorkerPool(max_workers=4, name="save")
        for outcome in pool.run(fetch_page, range(2, last_page + 1)):
            if outcome.error:
                errors.append(outcome.error)
        ```
    """

    def __init__(self, max_workers: int, name: str = "worker") -> None:
        """
        Args:
            max_workers: Number of worker threads; 0 means one per item

        Raises:
            ValueError: If max_workers is negative
        """
        if max_workers < 0:
            raise ValueError(f"max_workers must be >= 0, got {max_workers}")
        self.max_workers = max_workers
        self.name = name

    def worker_count(self, item_count: int) -> int:
        if self.max_workers == 0:
            return item_count
        return min(self.max_workers, item_count)

    def run(self, fn: Callable[[T], R], items: Iterable[T]) -> Iterator[Outcome[T, R]]:
        """
        Apply fn to every item and yield outcomes in completion order.

        Exceptions raised by fn are captured into the outcome, so one failing
        item never stops the others.
        """
        pending = list(items)
        if not pending:
            return

        workers = self.worker_count(len(pending))
        tasks: queue.Queue[Any] = queue.Queue(maxsize=1)
        results: queue.Queue[Outcome[T, R]] = queue.Queue()

        def feed() -> None:
            for item in pending:
                tasks.put(item)
            for _ in range(workers):
                tasks.put(_STOP)

        def work() -> None:
            stopped: BaseException | None = None
            while True:
                item = tasks.get()
                if item is _STOP:
                    if stopped is not None:
                        raise stopped
                    return
                # after an interrupt, keep draining so every item gets an outcome
                if stopped is not None:
                    results.put(Outcome(item=item, error=RuntimeError(f"worker stopped: {stopped!r}")))
                    continue
                try:
                    results.put(Outcome(item=item, value=fn(item)))
                except Exception as e:
                    results.put(Outcome(item=item, error=e))
                except BaseException as e:
                    stopped = e
                    results.put(Outcome(item=item, error=RuntimeError(f"worker stopped: {e!r}")))

        logger.debug("Starting %d %s worker(s) for %d item(s)", workers, self.name, len(pending))

        threads = [threading.Thread(target=feed, name=f"{self.name}-feeder", daemon=True)]
        threads.extend(
            threading.Thread(target=work, name=f"{self.name}-{i}", daemon=True)
            for i in range(workers)
        )
        for thread in threads:
            thread.start()

        try:
            for _ in range(len(pending)):
                yield results.get()
        finally:
            for thread in threads:
                thread.join()

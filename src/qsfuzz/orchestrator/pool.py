"""Worker pool feeding candidates to the dispatch stage.

This module provides the CandidatePool class, which distributes
deduplicated URLs across concurrent asyncio workers. Each worker enumerates
the injections of one URL and hands every candidate to a consumer callback.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable, Iterable, Sequence
from dataclasses import dataclass
from typing import Union

from qsfuzz.core.constants import DEFAULTS
from qsfuzz.core.exceptions import PoolError, QueryParseError
from qsfuzz.core.models import Injection, ParsedURL
from qsfuzz.injection.enumerator import iter_injections


logger = logging.getLogger(__name__)


Consumer = Callable[[ParsedURL, Injection], Union[Awaitable[None], None]]


@dataclass
class PoolStats:
    """Counters collected over one pool run."""
    urls_processed: int = 0
    urls_failed: int = 0
    candidates: int = 0

    def to_dict(self) -> dict[str, int]:
        """Convert to dictionary."""
        return {
            "urls_processed": self.urls_processed,
            "urls_failed": self.urls_failed,
            "candidates": self.candidates,
        }


class CandidatePool:
    """Async worker pool enumerating candidates for many URLs.

    Example:
        >>> pool = CandidatePool(["'\"><x>"], concurrency=10)
        >>> stats = asyncio.run(pool.run(urls, consumer))
    """

    def __init__(
        self,
        rules: Sequence[str],
        *,
        concurrency: int = DEFAULTS["concurrency"],
        decode_params: bool = False,
    ) -> None:
        """Initialize pool.

        Args:
            rules: Injection templates applied to every URL
            concurrency: Number of workers
            decode_params: Produce percent-decoded queries

        Raises:
            PoolError: If concurrency is lower than 1
        """
        if concurrency < 1:
            raise PoolError(f"Concurrency must be at least 1, got {concurrency}")

        self.rules = list(rules)
        self.concurrency = concurrency
        self.decode_params = decode_params

    async def run(self, urls: Iterable[ParsedURL], consumer: Consumer) -> PoolStats:
        """Enumerate every URL and pass its candidates to ``consumer``.

        URLs whose query cannot be parsed are logged and counted as failed.
        Exceptions raised by ``consumer`` stop the run and propagate.

        Args:
            urls: Deduplicated URLs
            consumer: Callback (sync or async) receiving each candidate

        Returns:
            PoolStats for the run
        """
        queue: asyncio.Queue[ParsedURL] = asyncio.Queue()
        for url in urls:
            queue.put_nowait(url)

        stats = PoolStats()
        worker_count = min(self.concurrency, queue.qsize())
        logger.info(f"Enumerating {queue.qsize()} URLs with {worker_count} workers")

        workers = [
            asyncio.create_task(self._worker(f"worker-{i}", queue, consumer, stats))
            for i in range(worker_count)
        ]

        try:
            await asyncio.gather(*workers)
        finally:
            for worker in workers:
                if not worker.done():
                    worker.cancel()

        return stats

    async def _worker(
        self,
        worker_name: str,
        queue: "asyncio.Queue[ParsedURL]",
        consumer: Consumer,
        stats: PoolStats,
    ) -> None:
        """Worker coroutine that drains URLs from queue.

        Args:
            worker_name: Worker identifier for logging
            queue: Shared URL queue, filled before workers start
            consumer: Candidate callback
            stats: Shared counters
        """
        while True:
            try:
                url = queue.get_nowait()
            except asyncio.QueueEmpty:
                return

            try:
                injections = list(
                    iter_injections(url, self.rules, decode_params=self.decode_params)
                )
            except QueryParseError as e:
                logger.warning(f"{worker_name}: skipping {url}: {e}")
                stats.urls_failed += 1
                continue
            finally:
                queue.task_done()

            for injection in injections:
                result = consumer(url, injection)
                if asyncio.iscoroutine(result):
                    await result
                stats.candidates += 1

            stats.urls_processed += 1
            # Let other workers run between URLs
            await asyncio.sleep(0)

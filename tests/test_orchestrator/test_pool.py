"""Unit tests for CandidatePool.

Tests the pool's ability to spread URLs over workers, hand candidates to
sync and async consumers, and isolate per-URL failures.
"""

import unittest

from qsfuzz.core.exceptions import PoolError
from qsfuzz.injection.enumerator import enumerate_injections
from qsfuzz.intake.deduper import URLDeduper
from qsfuzz.intake.parser import parse_url
from qsfuzz.orchestrator.pool import CandidatePool, PoolStats


class TestCandidatePool(unittest.IsolatedAsyncioTestCase):
    """Test cases for CandidatePool."""

    def setUp(self):
        """Set up test fixtures."""
        self.urls = URLDeduper().deduplicate_parsed([
            "http://a.com/p?x=1&y=2",
            "http://b.com/q?z=1",
            "http://c.com/r?y=1&y=2",
        ])
        self.rules = ["A", "B"]

    async def test_all_candidates_reach_consumer(self):
        """Test that every candidate of every URL is consumed."""
        received = []

        pool = CandidatePool(self.rules, concurrency=3)
        stats = await pool.run(self.urls, lambda url, injection: received.append(injection.url))

        expected = [
            candidate
            for url in self.urls
            for candidate in enumerate_injections(url, self.rules)
        ]
        self.assertEqual(sorted(received), sorted(expected))
        self.assertEqual(stats, PoolStats(urls_processed=3, urls_failed=0, candidates=10))

    async def test_single_worker_keeps_order(self):
        """Test that one worker consumes URLs in input order."""
        received = []

        pool = CandidatePool(self.rules, concurrency=1)
        await pool.run(self.urls, lambda url, injection: received.append(injection.url))

        expected = [
            candidate
            for url in self.urls
            for candidate in enumerate_injections(url, self.rules)
        ]
        self.assertEqual(received, expected)

    async def test_async_consumer(self):
        """Test that coroutine consumers are awaited."""
        received = []

        async def consumer(url, injection):
            received.append((url.host, injection.parameter))

        pool = CandidatePool(["A"], concurrency=2)
        stats = await pool.run(self.urls, consumer)

        self.assertEqual(stats.candidates, 5)
        self.assertIn(("b.com", "z"), received)

    async def test_decode_params_forwarded(self):
        """Test that the decode flag reaches the enumerator."""
        received = []

        pool = CandidatePool(["a b"], concurrency=1, decode_params=True)
        await pool.run([parse_url("http://a.com/p?x=1")], lambda url, injection: received.append(injection.url))

        self.assertEqual(received, ["http://a.com/p?x=a b"])

    async def test_unparseable_url_is_counted_and_skipped(self):
        """Test that a QueryParseError does not stop other URLs."""
        urls = [parse_url("http://a.com/p?x=1&y=%zz")] + self.urls
        received = []

        pool = CandidatePool(["A"], concurrency=2)
        stats = await pool.run(urls, lambda url, injection: received.append(injection.url))

        self.assertEqual(stats.urls_failed, 1)
        self.assertEqual(stats.urls_processed, 3)
        self.assertEqual(len(received), 5)

    async def test_consumer_error_propagates(self):
        """Test that consumer failures stop the run."""
        def consumer(url, injection):
            raise RuntimeError("dispatch failed")

        pool = CandidatePool(self.rules, concurrency=2)

        with self.assertRaises(RuntimeError):
            await pool.run(self.urls, consumer)

    async def test_empty_input(self):
        """Test that no URLs yields empty stats."""
        pool = CandidatePool(self.rules)
        stats = await pool.run([], lambda url, injection: None)

        self.assertEqual(stats.to_dict(), {"urls_processed": 0, "urls_failed": 0, "candidates": 0})

    def test_invalid_concurrency(self):
        """Test that concurrency below 1 is rejected."""
        with self.assertRaises(PoolError):
            CandidatePool(self.rules, concurrency=0)


if __name__ == "__main__":
    unittest.main()

#!/usr/bin/env python3
"""
Tests for the rpnsearch search driver.

The unbounded search is exercised through sample budgets and stop events
so every test terminates.
"""

import math
import multiprocessing
import queue
import random
import threading
import unittest
from rpnsearch import SearchMatch, parse, evaluate, is_valid
from rpnsearch.search import _collect, iter_matches, search


class TestSearchMatch(unittest.TestCase):
    """Test cases for match records."""

    def test_format_line(self):
        """Matches render as ratio,value,expression."""
        match = SearchMatch(0.25, 3.14159, "1 2 +")
        self.assertEqual(match.format_line(), "0.25,3.14159,1 2 +")

    def test_format_line_keeps_ratio_below_one(self):
        """A ratio just under 1 is not rounded up to 1."""
        line = SearchMatch(0.9999996, 3.0, "3").format_line()
        self.assertLess(float(line.split(",")[0]), 1.0)
        self.assertEqual(line, "0.9999996,3,3")

    def test_format_line_keeps_all_digits(self):
        """Values keep the digits a high precision search asks for."""
        line = SearchMatch(0.5, 3.14159265358, "x").format_line()
        self.assertEqual(float(line.split(",")[1]), 3.14159265358)


class TestIterMatches(unittest.TestCase):
    """Test cases for the single-worker search loop."""

    def test_matches_are_within_epsilon(self):
        """Every reported match is closer than epsilon."""
        target, epsilon = 5.0, 0.5
        matches = list(iter_matches(random.Random(3), target, epsilon, 3, 12, 1, 10,
                                    max_samples=2000))

        self.assertGreater(len(matches), 0)
        for match in matches:
            with self.subTest(expression=match.expression):
                self.assertLess(abs(target - match.value), epsilon)
                self.assertLess(match.ratio, 1.0)
                self.assertAlmostEqual(match.ratio, abs(target - match.value) / epsilon)
                expression = parse(match.expression)
                self.assertTrue(is_valid(expression))
                self.assertEqual(evaluate(expression), match.value)

    def test_sample_budget(self):
        """A zero budget yields nothing."""
        self.assertEqual(list(iter_matches(random.Random(0), 1.0, 10.0, 1, 5, 1, 10,
                                           max_samples=0)), [])

    def test_stop_event(self):
        """A set stop event ends the loop before sampling."""
        stop = threading.Event()
        stop.set()
        self.assertEqual(list(iter_matches(random.Random(0), 1.0, 10.0, 1, 5, 1, 10,
                                           stop_event=stop)), [])

    def test_stop_event_ends_unbounded_loop(self):
        """Setting the event from the consumer stops an unbounded loop."""
        stop = threading.Event()
        seen = []
        for match in iter_matches(random.Random(8), 2.0, 1.0, 1, 4, 1, 4, stop_event=stop):
            seen.append(match)
            if len(seen) == 5:
                stop.set()
        self.assertEqual(len(seen), 5)

    def test_nan_never_matches(self):
        """nan values are never reported, even with a huge epsilon."""
        for match in iter_matches(random.Random(1), 0.0, 1e300, 2, 10, 1, 10, max_samples=500):
            self.assertFalse(math.isnan(match.value))


class TestSearch(unittest.TestCase):
    """Test cases for the multi-process driver."""

    def test_bounded_search(self):
        """Every emitted match is within epsilon of the target."""
        collected = []
        count = search(6.0, 0, 3, 10, 1, 10, workers=2, seed=11,
                       max_samples=300, emit=collected.append)

        self.assertEqual(count, len(collected))
        self.assertGreater(count, 0)
        for match in collected:
            self.assertLess(abs(6.0 - match.value), 1.0)
            self.assertEqual(evaluate(parse(match.expression)), match.value)

    def test_seeded_search_matches_in_process_loop(self):
        """Worker i samples with seed + i."""
        collected = []
        search(2.0, 0, 2, 6, 1, 5, workers=1, seed=21, max_samples=100, emit=collected.append)

        expected = list(iter_matches(random.Random(21), 2.0, 1.0, 2, 6, 1, 5, max_samples=100))
        self.assertEqual(collected, expected)

    def test_preset_stop_event(self):
        """A stop event that is already set ends the search at once."""
        stop = multiprocessing.Event()
        stop.set()
        collected = []
        count = search(1.0, 3, 3, 10, 1, 10, workers=2, stop_event=stop, emit=collected.append)
        self.assertEqual(count, 0)
        self.assertEqual(collected, [])

    def test_invalid_parameters(self):
        """Empty ranges and missing workers are rejected before starting."""
        with self.assertRaises(ValueError):
            search(1.0, 3, 10, 10, 1, 10)
        with self.assertRaises(ValueError):
            search(1.0, 3, 0, 10, 1, 10)
        with self.assertRaises(ValueError):
            search(1.0, 3, 3, 10, 5, 2)
        with self.assertRaises(ValueError):
            search(1.0, 3, 3, 10, 1, 10, workers=0)
        with self.assertRaises(ValueError):
            search(1.0, 3, 3, 10, 1, 10, max_samples=-1)


class _LateQueue(queue.Queue):
    """Queue whose first timed get misses items that are already queued."""

    def __init__(self, items):
        super().__init__()
        for item in items:
            self.put(item)
        self.missed = False

    def get(self, block=True, timeout=None):
        if timeout is not None and not self.missed:
            self.missed = True
            raise queue.Empty
        return super().get(block, timeout)


class _ExitedWorker:
    def is_alive(self):
        return False


class TestCollect(unittest.TestCase):
    """Test cases for gathering matches from workers."""

    def test_emits_matches_from_exited_workers(self):
        """Matches posted just before the workers exit are still emitted."""
        late = [SearchMatch(0.5, 3.0, "3"), None, SearchMatch(0.1, 2.9, "2.9"), None]
        collected = []

        emitted, finished = _collect(_LateQueue(late), [_ExitedWorker(), _ExitedWorker()],
                                     threading.Event(), collected.append)

        self.assertEqual(emitted, 2)
        self.assertEqual(finished, 2)
        self.assertEqual([match.expression for match in collected], ["3", "2.9"])

    def test_workers_gone_without_sentinel(self):
        """Collection ends once dead workers have nothing left to send."""
        collected = []
        emitted, finished = _collect(_LateQueue([SearchMatch(0.5, 3.0, "3")]), [_ExitedWorker()],
                                     threading.Event(), collected.append)

        self.assertEqual((emitted, finished), (1, 0))
        self.assertEqual(len(collected), 1)


if __name__ == '__main__':
    unittest.main()

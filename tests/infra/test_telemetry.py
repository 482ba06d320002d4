from __future__ import annotations

import unittest

from codesage.observability.telemetry import (
    counter,
    get_counter,
    get_counters,
    get_latency_stats,
    record_outcome,
    reset,
    time_block,
)


class TelemetryTests(unittest.TestCase):
    def setUp(self):
        reset()

    def test_time_block_appends_ms_suffix(self):
        metric_name = "gemini.review.latency"

        with time_block(metric_name):
            pass

        stats = get_latency_stats(metric_name)
        self.assertEqual(stats["count"], 1)
        self.assertEqual(get_latency_stats("gemini.review.latency_ms")["count"], 1)
        self.assertGreaterEqual(stats["p95"], 0.0)

    def test_time_block_respects_existing_suffix(self):
        metric_name = "review.total_ms"

        with time_block(metric_name):
            pass

        stats = get_latency_stats(metric_name)
        self.assertEqual(stats["count"], 1)

    def test_time_block_records_on_error(self):
        with self.assertRaises(RuntimeError), time_block("gemini.fix.latency"):
            raise RuntimeError("boom")

        self.assertEqual(get_latency_stats("gemini.fix.latency")["count"], 1)

    def test_empty_stats(self):
        self.assertEqual(get_latency_stats("never.recorded")["count"], 0)

    def test_counter_increments(self):
        before = counter("test.counter", 0)
        counter("test.counter")
        after = counter("test.counter", 0)
        self.assertEqual(after, before + 1)
        self.assertEqual(get_counter("test.counter"), after)

    def test_record_outcome_builds_dotted_name(self):
        record_outcome("review", "analyze", "fallback")
        record_outcome("review", "analyze", "fallback")
        record_outcome("gemini", "review", "success")

        self.assertEqual(get_counter("review.analyze.fallback"), 2)
        self.assertEqual(get_counters("review."), {"review.analyze.fallback": 2})
        self.assertEqual(len(get_counters()), 2)

    def test_reset_clears_counters(self):
        counter("test.counter")
        reset()
        self.assertEqual(get_counter("test.counter"), 0)


if __name__ == "__main__":
    unittest.main()

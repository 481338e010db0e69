from __future__ import annotations

import unittest

from core.types import AggregateStat, Endpoint, EndpointResult, Summary
from report import format_summary


class TestFormatSummary(unittest.TestCase):
    def setUp(self):
        self.a = Endpoint(index=0, url="https://a.example.org", host="a.example.org")
        self.b = Endpoint(index=1, url="https://b.example.org", host="b.example.org")
        self.c = Endpoint(index=2, url="https://c.example.org", host="c.example.org")

    def test_rows_in_rank_order_with_fastest_line(self):
        summary = Summary(
            ranked=[
                AggregateStat(self.b, 10.0, 9.0, 11.0, 3, 0),
                AggregateStat(self.a, 50.0, 40.0, 60.0, 2, 1),
            ],
            no_data=[self.c],
        )
        text = format_summary(summary, "RPC API response time")
        lines = text.splitlines()
        self.assertEqual(lines[0], "===== RPC API response time =====")
        self.assertIn("average", lines[1])
        self.assertIn("b.example.org", lines[3])
        self.assertIn("10.0 ms", lines[3])
        self.assertIn("a.example.org", lines[4])
        self.assertIn("no data", lines[5])
        self.assertEqual(lines[-1], "Fastest endpoint: https://b.example.org (avg 10.0 ms)")

    def test_skipped_rows_and_no_fastest(self):
        skipped = EndpointResult(endpoint=self.a, skipped="insufficient funds (1 < 13000 lamports)")
        text = format_summary(Summary(skipped=[skipped]), "Transaction confirmation time")
        self.assertIn("skipped", text)
        self.assertIn("insufficient funds", text)
        self.assertNotIn("Fastest endpoint", text)

    def test_fixed_column_width(self):
        summary = Summary(ranked=[AggregateStat(self.a, 1.0, 1.0, 1.0, 1, 0)], no_data=[self.b])
        lines = format_summary(summary, "Ping latency").splitlines()
        widths = {len(line) for line in lines[1:5]}
        self.assertEqual(len(widths), 1)


if __name__ == "__main__":
    unittest.main()

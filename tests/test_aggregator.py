import unittest

from exportbatch.aggregator import ResultAggregator, aggregate
from exportbatch.models import Failure, Success


class AggregatorTest(unittest.TestCase):
    def test_counts_and_bytes(self) -> None:
        outcomes = [
            ("a", Success(bytes_produced=10, elapsed=0.1)),
            ("b", Failure(error_message="boom", elapsed=0.2)),
            ("a", Success(bytes_produced=5, elapsed=0.3)),
        ]
        report = aggregate(outcomes, total_elapsed=0.4)
        self.assertEqual(report.succeeded_count, 2)
        self.assertEqual(report.failed_count, 1)
        self.assertEqual(report.succeeded_count + report.failed_count, len(outcomes))
        self.assertEqual(report.total_bytes, 15)
        self.assertEqual(report.total_elapsed, 0.4)
        self.assertFalse(report.ok)
        self.assertEqual([identifier for identifier, _ in report.outcomes], ["a", "b", "a"])

    def test_empty(self) -> None:
        report = ResultAggregator().report()
        self.assertEqual(report.total, 0)
        self.assertTrue(report.ok)
        self.assertEqual(report.total_bytes, 0)

    def test_rejects_unknown_outcome(self) -> None:
        aggregator = ResultAggregator()
        with self.assertRaises(TypeError):
            aggregator.add("x", "done")  # type: ignore[arg-type]
        with self.assertRaises(TypeError):
            aggregate([("x", None)])  # type: ignore[list-item]


if __name__ == "__main__":
    unittest.main()

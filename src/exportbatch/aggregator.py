from __future__ import annotations

from collections.abc import Iterable

from .models import BatchReport, Failure, JobOutcome, Success


class ResultAggregator:
    """Ordered log of ``(identifier, outcome)`` pairs for one batch."""

    def __init__(self) -> None:
        self._outcomes: list[tuple[str, JobOutcome]] = []

    def add(self, identifier: str, outcome: JobOutcome) -> None:
        if not isinstance(outcome, (Success, Failure)):
            raise TypeError(f"expected Success or Failure, got {type(outcome).__name__}")
        self._outcomes.append((identifier, outcome))

    def report(self, total_elapsed: float = 0.0) -> BatchReport:
        return aggregate(self._outcomes, total_elapsed)

    def __len__(self) -> int:
        return len(self._outcomes)


def aggregate(outcomes: Iterable[tuple[str, JobOutcome]], total_elapsed: float = 0.0) -> BatchReport:
    entries = tuple(outcomes)
    succeeded = 0
    failed = 0
    total_bytes = 0
    for _, outcome in entries:
        if isinstance(outcome, Success):
            succeeded += 1
            total_bytes += outcome.bytes_produced
        elif isinstance(outcome, Failure):
            failed += 1
        else:
            raise TypeError(f"expected Success or Failure, got {type(outcome).__name__}")
    return BatchReport(
        outcomes=entries,
        succeeded_count=succeeded,
        failed_count=failed,
        total_bytes=total_bytes,
        total_elapsed=max(0.0, total_elapsed),
    )

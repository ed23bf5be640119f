from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Union


class JobKind(str, Enum):
    DOCUMENT = "document"
    IMAGE = "image"
    VECTOR = "vector"
    ARCHIVE = "archive"


def kind_key(kind: JobKind | str) -> str:
    if isinstance(kind, JobKind):
        return kind.value
    return str(kind).strip().lower()


@dataclass(frozen=True, slots=True)
class Job:
    kind: JobKind | str
    identifier: str
    config: Any = field(default_factory=dict, hash=False)


@dataclass(frozen=True, slots=True)
class Success:
    bytes_produced: int
    elapsed: float
    payload: bytes = field(default=b"", repr=False, compare=False)
    kind: str = ""


@dataclass(frozen=True, slots=True)
class Failure:
    error_message: str
    elapsed: float
    error_type: str = "Exception"
    kind: str = ""


JobOutcome = Union[Success, Failure]


@dataclass(frozen=True, slots=True)
class BatchReport:
    outcomes: tuple[tuple[str, JobOutcome], ...]
    succeeded_count: int
    failed_count: int
    total_bytes: int
    total_elapsed: float

    @property
    def total(self) -> int:
        return len(self.outcomes)

    @property
    def ok(self) -> bool:
        return self.failed_count == 0

    def successes(self) -> list[tuple[str, Success]]:
        return [(identifier, outcome) for identifier, outcome in self.outcomes if isinstance(outcome, Success)]

    def failures(self) -> list[tuple[str, Failure]]:
        return [(identifier, outcome) for identifier, outcome in self.outcomes if isinstance(outcome, Failure)]

    def by_identifier(self) -> dict[str, list[JobOutcome]]:
        grouped: dict[str, list[JobOutcome]] = {}
        for identifier, outcome in self.outcomes:
            grouped.setdefault(identifier, []).append(outcome)
        return grouped

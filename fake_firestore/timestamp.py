from __future__ import annotations

import time
from dataclasses import dataclass
from datetime import datetime, timezone

_NANOS_PER_SECOND = 1_000_000_000


@dataclass(frozen=True, order=True)
class Timestamp:
    """
    Immutable instant with nanosecond precision, mirroring Firestore's Timestamp.

    `nanoseconds` is always normalized into [0, 1e9), so two timestamps that
    denote the same instant compare equal.
    """

    seconds: int
    nanoseconds: int = 0

    def __post_init__(self) -> None:
        if not 0 <= self.nanoseconds < _NANOS_PER_SECOND:
            raise ValueError(f"nanoseconds out of range: {self.nanoseconds}")

    @classmethod
    def now(cls) -> Timestamp:
        return cls.from_nanos(time.time_ns())

    @classmethod
    def from_nanos(cls, nanos: int) -> Timestamp:
        seconds, nanoseconds = divmod(nanos, _NANOS_PER_SECOND)
        return cls(seconds=seconds, nanoseconds=nanoseconds)

    @classmethod
    def from_millis(cls, millis: int) -> Timestamp:
        return cls.from_nanos(millis * 1_000_000)

    @classmethod
    def from_datetime(cls, dt: datetime) -> Timestamp:
        # Naive datetimes are treated as UTC, like the Firestore client does.
        if dt.tzinfo is None:
            dt = dt.replace(tzinfo=timezone.utc)
        delta = dt - datetime(1970, 1, 1, tzinfo=timezone.utc)
        nanos = (delta.days * 86_400 + delta.seconds) * _NANOS_PER_SECOND
        return cls.from_nanos(nanos + delta.microseconds * 1_000)

    def to_nanos(self) -> int:
        return self.seconds * _NANOS_PER_SECOND + self.nanoseconds

    def to_millis(self) -> int:
        return self.to_nanos() // 1_000_000

    def to_datetime(self) -> datetime:
        # datetime only keeps microseconds; sub-microsecond precision is dropped.
        return datetime.fromtimestamp(self.seconds, tz=timezone.utc).replace(
            microsecond=self.nanoseconds // 1_000
        )

    def isoformat(self) -> str:
        return self.to_datetime().isoformat()

    def is_equal(self, other: object) -> bool:
        return self == other

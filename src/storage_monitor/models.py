from __future__ import annotations

import math
from dataclasses import asdict, astuple, dataclass, fields
from datetime import datetime
from enum import IntEnum
from typing import Any, ClassVar, Dict, Iterable, Iterator, List, Optional, Tuple

MILLIS_PER_HOUR = 60 * 60 * 1000


class PreEolInfo(IntEnum):
    UNKNOWN = 0
    NORMAL = 1
    WARNING = 2
    URGENT = 3


def _check_percent(name: str, value: Optional[int]) -> None:
    if value is None:
        return
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"{name} must be an int or None, got {value!r}")
    if not 0 <= value <= 100:
        raise ValueError(f"{name} out of range [0, 100]: {value}")
    if value % 10 != 0:
        raise ValueError(f"{name} must be a multiple of 10: {value}")


def _require_same_uid(uid: int, other_uid: int) -> None:
    if uid != other_uid:
        raise ValueError(f"delta only allowed between entries of the same uid ({uid} != {other_uid})")


@dataclass(frozen=True)
class WearInformation:
    lifetime_estimate_a: Optional[int] = None
    lifetime_estimate_b: Optional[int] = None
    pre_eol_info: PreEolInfo = PreEolInfo.UNKNOWN

    def __post_init__(self) -> None:
        _check_percent("lifetime_estimate_a", self.lifetime_estimate_a)
        _check_percent("lifetime_estimate_b", self.lifetime_estimate_b)

    def to_estimate(self) -> WearEstimate:
        return WearEstimate(self.lifetime_estimate_a, self.lifetime_estimate_b)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "lifetime_estimate_a": self.lifetime_estimate_a,
            "lifetime_estimate_b": self.lifetime_estimate_b,
            "pre_eol_info": self.pre_eol_info.name,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> WearInformation:
        return cls(
            lifetime_estimate_a=data.get("lifetime_estimate_a"),
            lifetime_estimate_b=data.get("lifetime_estimate_b"),
            pre_eol_info=PreEolInfo[data.get("pre_eol_info", "UNKNOWN")],
        )


@dataclass(frozen=True)
class WearEstimate:
    a: Optional[int] = None
    b: Optional[int] = None

    def __post_init__(self) -> None:
        _check_percent("a", self.a)
        _check_percent("b", self.b)

    @property
    def is_unknown(self) -> bool:
        return self.a is None and self.b is None

    def increase_from(self, older: WearEstimate) -> int:
        """Largest per-channel increase over ``older``, floored at zero.

        A channel only counts when both estimates report it.
        """
        delta = 0
        for new, old in ((self.a, older.a), (self.b, older.b)):
            if new is None or old is None:
                continue
            delta = max(delta, new - old)
        return delta

    def sort_key(self) -> Tuple[int, int]:
        return (
            -1 if self.a is None else self.a,
            -1 if self.b is None else self.b,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {"a": self.a, "b": self.b}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> WearEstimate:
        return cls(a=data.get("a"), b=data.get("b"))


UNKNOWN_ESTIMATE = WearEstimate()


@dataclass(frozen=True)
class WearEstimateChange:
    old_estimate: WearEstimate
    new_estimate: WearEstimate
    uptime_at_change: int
    date_at_change: datetime
    is_acceptable_degradation: bool

    def to_dict(self) -> Dict[str, Any]:
        return {
            "old_estimate": self.old_estimate.to_dict(),
            "new_estimate": self.new_estimate.to_dict(),
            "uptime_at_change": self.uptime_at_change,
            "date_at_change": self.date_at_change.isoformat(),
            "is_acceptable_degradation": self.is_acceptable_degradation,
        }


@dataclass(frozen=True)
class WearEstimateRecord:
    old_estimate: WearEstimate
    new_estimate: WearEstimate
    uptime_millis: int
    observed_at: datetime

    def to_change(self, is_acceptable_degradation: bool) -> WearEstimateChange:
        return WearEstimateChange(
            old_estimate=self.old_estimate,
            new_estimate=self.new_estimate,
            uptime_at_change=self.uptime_millis,
            date_at_change=self.observed_at,
            is_acceptable_degradation=is_acceptable_degradation,
        )

    def sort_key(self) -> Tuple[Any, ...]:
        return (
            self.uptime_millis,
            self.observed_at.isoformat(),
            self.old_estimate.sort_key(),
            self.new_estimate.sort_key(),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "old_estimate": self.old_estimate.to_dict(),
            "new_estimate": self.new_estimate.to_dict(),
            "uptime_millis": self.uptime_millis,
            "observed_at": self.observed_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> WearEstimateRecord:
        return cls(
            old_estimate=WearEstimate.from_dict(data["old_estimate"]),
            new_estimate=WearEstimate.from_dict(data["new_estimate"]),
            uptime_millis=int(data["uptime_millis"]),
            observed_at=datetime.fromisoformat(data["observed_at"]),
        )


def wear_rate(delta_percent: int, elapsed_millis: int) -> float:
    """Wear increase in percent per hour of uptime."""
    if elapsed_millis <= 0:
        return math.inf if delta_percent > 0 else 0.0
    return delta_percent / (elapsed_millis / MILLIS_PER_HOUR)


@dataclass(frozen=True)
class WearHistory:
    records: Tuple[WearEstimateRecord, ...] = ()

    def __post_init__(self) -> None:
        # Full sort key, so records sharing an uptime still compare order-independently.
        object.__setattr__(
            self, "records", tuple(sorted(self.records, key=WearEstimateRecord.sort_key))
        )

    @classmethod
    def from_records(cls, *records: WearEstimateRecord) -> WearHistory:
        return cls(tuple(records))

    def __len__(self) -> int:
        return len(self.records)

    def __iter__(self) -> Iterator[WearEstimateRecord]:
        return iter(self.records)

    def __getitem__(self, index: int) -> WearEstimateRecord:
        return self.records[index]

    @property
    def last_estimate(self) -> WearEstimate:
        if not self.records:
            return UNKNOWN_ESTIMATE
        return self.records[-1].new_estimate

    def append(self, record: WearEstimateRecord) -> WearHistory:
        return WearHistory(self.records + (record,))

    def with_estimate(
        self, estimate: WearEstimate, uptime_millis: int, observed_at: datetime
    ) -> WearHistory:
        last = self.last_estimate
        if estimate == last:
            return self
        return self.append(WearEstimateRecord(last, estimate, uptime_millis, observed_at))

    def to_changes(self, threshold_percent_per_hour: float) -> List[WearEstimateChange]:
        """Classify every recorded transition, in ascending uptime order.

        A transition away from ``UNKNOWN_ESTIMATE`` has no baseline and is
        always acceptable. Otherwise the worst channel increase is divided by
        the uptime elapsed since the previous record (or since zero for the
        first one) and compared against ``threshold_percent_per_hour``.
        """
        changes: List[WearEstimateChange] = []
        previous_uptime = 0
        for record in self.records:
            if record.old_estimate == UNKNOWN_ESTIMATE:
                acceptable = True
            else:
                delta = record.new_estimate.increase_from(record.old_estimate)
                rate = wear_rate(delta, record.uptime_millis - previous_uptime)
                acceptable = rate <= threshold_percent_per_hour
            changes.append(record.to_change(acceptable))
            previous_uptime = record.uptime_millis
        return changes

    def to_dict(self) -> Dict[str, Any]:
        return {"records": [r.to_dict() for r in self.records]}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> WearHistory:
        return cls(tuple(WearEstimateRecord.from_dict(r) for r in data.get("records", [])))


@dataclass(frozen=True)
class IoMetrics:
    bytes_read: int = 0
    bytes_written: int = 0
    bytes_read_from_storage: int = 0
    bytes_written_to_storage: int = 0
    fsync_calls: int = 0

    ZERO: ClassVar[IoMetrics]

    def __add__(self, other: IoMetrics) -> IoMetrics:
        if not isinstance(other, IoMetrics):
            return NotImplemented
        return IoMetrics(*(a + b for a, b in zip(astuple(self), astuple(other))))

    def __sub__(self, other: IoMetrics) -> IoMetrics:
        if not isinstance(other, IoMetrics):
            return NotImplemented
        return IoMetrics(*(a - b for a, b in zip(astuple(self), astuple(other))))

    @property
    def is_zero(self) -> bool:
        return self == IoMetrics.ZERO

    def has_negative(self) -> bool:
        return any(v < 0 for v in astuple(self))

    def to_dict(self) -> Dict[str, int]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> IoMetrics:
        return cls(**{f.name: int(data.get(f.name, 0)) for f in fields(cls)})


IoMetrics.ZERO = IoMetrics()


def sum_metrics(metrics: Iterable[IoMetrics]) -> IoMetrics:
    return sum(metrics, IoMetrics.ZERO)


@dataclass(frozen=True)
class IoCounterRecord:
    uid: int
    foreground_rchar: int
    foreground_wchar: int
    foreground_read_bytes: int
    foreground_write_bytes: int
    foreground_fsync: int
    background_rchar: int
    background_wchar: int
    background_read_bytes: int
    background_write_bytes: int
    background_fsync: int

    @classmethod
    def from_metrics(cls, uid: int, foreground: IoMetrics, background: IoMetrics) -> IoCounterRecord:
        return cls(uid, *astuple(foreground), *astuple(background))

    @property
    def foreground(self) -> IoMetrics:
        return IoMetrics(
            bytes_read=self.foreground_rchar,
            bytes_written=self.foreground_wchar,
            bytes_read_from_storage=self.foreground_read_bytes,
            bytes_written_to_storage=self.foreground_write_bytes,
            fsync_calls=self.foreground_fsync,
        )

    @property
    def background(self) -> IoMetrics:
        return IoMetrics(
            bytes_read=self.background_rchar,
            bytes_written=self.background_wchar,
            bytes_read_from_storage=self.background_read_bytes,
            bytes_written_to_storage=self.background_write_bytes,
            fsync_calls=self.background_fsync,
        )

    def delta(self, baseline: IoUsageSnapshot) -> IoCounterRecord:
        _require_same_uid(self.uid, baseline.uid)
        return IoCounterRecord.from_metrics(
            self.uid,
            self.foreground - baseline.foreground,
            self.background - baseline.background,
        )

    def represents_same_metrics(self, snapshot: IoUsageSnapshot) -> bool:
        return (
            self.uid == snapshot.uid
            and self.foreground == snapshot.foreground
            and self.background == snapshot.background
        )


@dataclass(frozen=True)
class IoUsageSnapshot:
    uid: int
    runtime_millis: int
    foreground: IoMetrics = IoMetrics.ZERO
    background: IoMetrics = IoMetrics.ZERO

    @classmethod
    def from_record(cls, record: IoCounterRecord, runtime_millis: int) -> IoUsageSnapshot:
        return cls(
            uid=record.uid,
            runtime_millis=runtime_millis,
            foreground=record.foreground,
            background=record.background,
        )

    def delta(self, older: IoUsageSnapshot) -> IoUsageSnapshot:
        _require_same_uid(self.uid, older.uid)
        return IoUsageSnapshot(
            uid=self.uid,
            runtime_millis=self.runtime_millis - older.runtime_millis,
            foreground=self.foreground - older.foreground,
            background=self.background - older.background,
        )

    def represents_same_metrics(self, record: IoCounterRecord) -> bool:
        return record.represents_same_metrics(self)

    def has_negative_counters(self) -> bool:
        return (
            self.runtime_millis < 0
            or self.foreground.has_negative()
            or self.background.has_negative()
        )

    def sort_key(self) -> Tuple[Any, ...]:
        return (self.uid, self.runtime_millis, astuple(self.foreground), astuple(self.background))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "uid": self.uid,
            "runtime_millis": self.runtime_millis,
            "foreground": self.foreground.to_dict(),
            "background": self.background.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> IoUsageSnapshot:
        return cls(
            uid=int(data["uid"]),
            runtime_millis=int(data["runtime_millis"]),
            foreground=IoMetrics.from_dict(data.get("foreground", {})),
            background=IoMetrics.from_dict(data.get("background", {})),
        )


def io_delta(newer: IoUsageSnapshot, older: IoUsageSnapshot) -> IoUsageSnapshot:
    return newer.delta(older)


@dataclass(frozen=True)
class IoUsageWindow:
    entries: Tuple[IoUsageSnapshot, ...] = ()
    window_millis: int = 0

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "entries", tuple(sorted(self.entries, key=IoUsageSnapshot.sort_key))
        )

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self) -> Iterator[IoUsageSnapshot]:
        return iter(self.entries)

    def get(self, uid: int) -> Optional[IoUsageSnapshot]:
        for entry in self.entries:
            if entry.uid == uid:
                return entry
        return None

    @property
    def foreground_totals(self) -> IoMetrics:
        return sum_metrics(e.foreground for e in self.entries)

    @property
    def background_totals(self) -> IoMetrics:
        return sum_metrics(e.background for e in self.entries)

    @property
    def totals(self) -> IoMetrics:
        return self.foreground_totals + self.background_totals

    def negative_entries(self) -> List[IoUsageSnapshot]:
        return [e for e in self.entries if e.has_negative_counters()]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "entries": [e.to_dict() for e in self.entries],
            "window_millis": self.window_millis,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> IoUsageWindow:
        return cls(
            entries=tuple(IoUsageSnapshot.from_dict(e) for e in data.get("entries", [])),
            window_millis=int(data.get("window_millis", 0)),
        )


@dataclass
class HealthAssessment:
    score: int
    level: str
    reasons: List[str]
    recommendations: List[str]

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

from __future__ import annotations

import logging
from collections import deque
from typing import Deque, Dict, Iterator, List, Mapping, Optional

from .models import IoCounterRecord, IoUsageSnapshot, IoUsageWindow

logger = logging.getLogger(__name__)


class IoUsageTracker:
    """Keeps cumulative per-uid snapshots and turns each poll into a window of deltas."""

    def __init__(self, sample_window_millis: int) -> None:
        self.sample_window_millis = sample_window_millis
        self._totals: Dict[int, IoUsageSnapshot] = {}
        self._boot: Optional[Dict[int, IoUsageSnapshot]] = None

    @property
    def totals(self) -> Dict[int, IoUsageSnapshot]:
        return dict(self._totals)

    @property
    def has_baseline(self) -> bool:
        return self._boot is not None

    @property
    def boot_snapshots(self) -> Dict[int, IoUsageSnapshot]:
        return dict(self._boot or {})

    def update(
        self, records: Mapping[int, IoCounterRecord], elapsed_millis: Optional[int] = None
    ) -> IoUsageWindow:
        """Diff a fresh poll against the previous one.

        ``elapsed_millis`` is the time covered by this poll; it defaults to the
        configured sample window.
        """
        if elapsed_millis is None:
            elapsed_millis = self.sample_window_millis
        new_totals: Dict[int, IoUsageSnapshot] = {}
        deltas: List[IoUsageSnapshot] = []
        for uid, record in records.items():
            old = self._totals.get(uid)
            if old is None:
                # uid appeared since the last poll: everything it did counts for this window
                current = IoUsageSnapshot.from_record(record, elapsed_millis)
                deltas.append(current)
            elif old.represents_same_metrics(record):
                current = old
            else:
                current = IoUsageSnapshot.from_record(
                    record, old.runtime_millis + elapsed_millis
                )
                deltas.append(current.delta(old))
            new_totals[uid] = current

        dropped = set(self._totals) - set(new_totals)
        if dropped:
            logger.debug("uids no longer reported: %s", sorted(dropped))

        self._totals = new_totals
        if self._boot is None:
            self._boot = dict(new_totals)

        window = IoUsageWindow(entries=tuple(deltas), window_millis=elapsed_millis)
        negative = window.negative_entries()
        if negative:
            logger.warning(
                "Negative I/O deltas for uids %s, counters were probably reset",
                [e.uid for e in negative],
            )
        return window


class SampleHistory:
    def __init__(self, max_samples: int) -> None:
        self._samples: Deque[IoUsageWindow] = deque(maxlen=max_samples)

    def add(self, window: IoUsageWindow) -> None:
        self._samples.append(window)

    def extend(self, windows: List[IoUsageWindow]) -> None:
        self._samples.extend(windows)

    @property
    def latest(self) -> Optional[IoUsageWindow]:
        return self._samples[-1] if self._samples else None

    def __len__(self) -> int:
        return len(self._samples)

    def __iter__(self) -> Iterator[IoUsageWindow]:
        return iter(self._samples)

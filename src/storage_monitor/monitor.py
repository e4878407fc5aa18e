from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional

from .config import Settings
from .errors import StateStoreError
from .models import (
    HealthAssessment,
    IoUsageWindow,
    WearEstimateChange,
    WearHistory,
    WearInformation,
)
from .persistence import MonitorState, StateStore
from .platform import get_wear_information
from .procfs import read_uid_io_stats
from .rules import evaluate_health
from .tracker import IoUsageTracker, SampleHistory

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class StorageReport:
    wear_information: Optional[WearInformation]
    wear_changes: List[WearEstimateChange]
    io_window: Optional[IoUsageWindow]
    assessment: HealthAssessment
    uptime_millis: int
    generated_at: datetime

    def to_dict(self) -> Dict[str, Any]:
        window = self.io_window
        return {
            "generated_at": self.generated_at.isoformat(),
            "uptime_millis": self.uptime_millis,
            "wear_information": self.wear_information.to_dict() if self.wear_information else None,
            "wear_changes": [c.to_dict() for c in self.wear_changes],
            "io_window": window.to_dict() if window is not None else None,
            "io_totals": {
                "foreground": window.foreground_totals.to_dict(),
                "background": window.background_totals.to_dict(),
                "total": window.totals.to_dict(),
            }
            if window is not None
            else None,
            "assessment": self.assessment.to_dict(),
        }


class StorageMonitor:
    def __init__(
        self,
        settings: Settings,
        store: Optional[StateStore] = None,
        clock: Callable[[], float] = time.monotonic,
        now: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.settings = settings
        self.store = store if store is not None else StateStore(settings.state_file)
        self._clock = clock
        self._now = now

        state = self._load_state()
        # Uptime accumulates across restarts: persisted base plus time since start.
        self._uptime_base = state.uptime_millis
        self._started = clock()
        self.wear_history: WearHistory = state.wear_history
        self.samples = SampleHistory(settings.io_samples_to_store)
        self.samples.extend(state.io_samples)
        self.tracker = IoUsageTracker(settings.io_sample_window_ms)
        self._last_io_uptime: Optional[int] = None

    def _load_state(self) -> MonitorState:
        try:
            return self.store.load()
        except StateStoreError as exc:
            logger.error("Discarding unreadable monitor state: %s", exc)
            return MonitorState()

    def uptime_millis(self) -> int:
        return self._uptime_base + int((self._clock() - self._started) * 1000)

    def _update_wear(self, wear: WearInformation, uptime: int) -> None:
        estimate = wear.to_estimate()
        history = self.wear_history.with_estimate(estimate, uptime, self._now())
        if history is not self.wear_history:
            logger.info(
                "Wear estimate changed from %s to %s at uptime %d ms",
                self.wear_history.last_estimate,
                estimate,
                uptime,
            )
            self.wear_history = history

    def _update_io(self, uptime: int) -> Optional[IoUsageWindow]:
        records = read_uid_io_stats(self.settings.uid_io_stats_path)
        if records is None:
            return None
        first_poll = not self.tracker.has_baseline
        # Windows cover the uptime actually elapsed since the previous I/O poll.
        elapsed = None if self._last_io_uptime is None else uptime - self._last_io_uptime
        window = self.tracker.update(records, elapsed)
        self._last_io_uptime = uptime
        if first_poll:
            # Counters accumulated before the monitor started are not a sample.
            logger.info("I/O baseline recorded for %d uids", len(records))
            return None
        self.samples.add(window)
        return window

    def poll(self) -> StorageReport:
        uptime = self.uptime_millis()
        wear = get_wear_information(self.settings)
        if wear is not None:
            self._update_wear(wear, uptime)
        window = self._update_io(uptime)

        changes = self.wear_history.to_changes(self.settings.acceptable_wear_percent_per_hour)
        assessment = evaluate_health(wear, changes, list(self.samples), self.settings)
        if assessment.level in ("WARNING", "CRITICAL"):
            logger.warning("Storage health %s: %s", assessment.level, "; ".join(assessment.reasons))

        return StorageReport(
            wear_information=wear,
            wear_changes=changes,
            io_window=window,
            assessment=assessment,
            uptime_millis=uptime,
            generated_at=self._now(),
        )

    def state(self) -> MonitorState:
        return MonitorState(
            uptime_millis=self.uptime_millis(),
            wear_history=self.wear_history,
            io_samples=list(self.samples),
        )

    def save(self) -> None:
        self.store.save(self.state())

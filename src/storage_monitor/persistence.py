from __future__ import annotations

import json
import logging
import os
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Union

from .errors import StateStoreError
from .models import IoUsageWindow, WearHistory

logger = logging.getLogger(__name__)

STATE_VERSION = 1


@dataclass
class MonitorState:
    uptime_millis: int = 0
    wear_history: WearHistory = field(default_factory=WearHistory)
    io_samples: List[IoUsageWindow] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "version": STATE_VERSION,
            "uptime_millis": self.uptime_millis,
            "wear_history": self.wear_history.to_dict(),
            "io_samples": [w.to_dict() for w in self.io_samples],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> MonitorState:
        return cls(
            uptime_millis=int(data.get("uptime_millis", 0)),
            wear_history=WearHistory.from_dict(data.get("wear_history", {})),
            io_samples=[IoUsageWindow.from_dict(w) for w in data.get("io_samples", [])],
        )


class StateStore:
    def __init__(self, path: Union[str, Path]) -> None:
        self.path = Path(path)

    def load(self) -> MonitorState:
        if not self.path.exists():
            return MonitorState()
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
            return MonitorState.from_dict(data)
        except (OSError, ValueError, KeyError, TypeError, AttributeError) as exc:
            raise StateStoreError(f"Cannot load state from {self.path}: {exc}") from exc

    def save(self, state: MonitorState) -> None:
        directory = self.path.parent
        directory.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(prefix=self.path.name, suffix=".tmp", dir=directory)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(state.to_dict(), f, ensure_ascii=False, indent=2)
            os.replace(tmp_path, self.path)
        except OSError as exc:
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
            raise StateStoreError(f"Cannot save state to {self.path}: {exc}") from exc
        logger.debug("State saved to %s", self.path)

from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, Optional, Union

from .errors import IoStatsParseError
from .models import IoCounterRecord

logger = logging.getLogger(__name__)

# uid followed by five foreground and five background counters
UID_IO_FIELD_COUNT = 11


def _parse_line(line_number: int, line: str) -> IoCounterRecord:
    tokens = line.split()
    if len(tokens) != UID_IO_FIELD_COUNT:
        raise IoStatsParseError(
            f"line {line_number}: expected {UID_IO_FIELD_COUNT} fields, got {len(tokens)}"
        )
    try:
        values = [int(t) for t in tokens]
    except ValueError:
        raise IoStatsParseError(f"line {line_number}: non-numeric field in {line!r}") from None
    return IoCounterRecord(*values)


def parse_uid_io_stats(text: Union[str, bytes]) -> Dict[int, IoCounterRecord]:
    """Parse a uid I/O table; any malformed line rejects the whole table."""
    if isinstance(text, bytes):
        text = text.decode("ascii", errors="replace")
    records: Dict[int, IoCounterRecord] = {}
    for line_number, line in enumerate(text.splitlines(), start=1):
        if not line.strip():
            continue
        record = _parse_line(line_number, line)
        records[record.uid] = record
    return records


def read_uid_io_stats(path: Union[str, Path]) -> Optional[Dict[int, IoCounterRecord]]:
    try:
        text = Path(path).read_bytes()
    except OSError as exc:
        logger.warning("Unable to read uid I/O stats from %s: %s", path, exc)
        return None
    try:
        return parse_uid_io_stats(text)
    except IoStatsParseError as exc:
        logger.warning("Discarding uid I/O stats from %s: %s", path, exc)
        return None

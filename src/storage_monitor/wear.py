from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Dict, Optional, Union

from .errors import WearParseError
from .models import PreEolInfo, WearInformation

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]
TextLike = Union[str, bytes]

# Lifetime codes are 1-based steps of 10%; 0x0B means the rated endurance is used up.
MAX_LIFETIME_CODE = 0x0B

_PRE_EOL_CODES = {
    1: PreEolInfo.NORMAL,
    2: PreEolInfo.WARNING,
    3: PreEolInfo.URGENT,
}

UFS_PRE_EOL_LABEL = "bPreEOLInfo"
UFS_LIFETIME_A_LABEL = "bDeviceLifeTimeEstA"
UFS_LIFETIME_B_LABEL = "bDeviceLifeTimeEstB"

_UFS_FIELD_RE = re.compile(
    r"\b(%s|%s|%s)\s*=\s*(0[xX][0-9A-Fa-f]+|[0-9A-Fa-f]+)\b"
    % (UFS_PRE_EOL_LABEL, UFS_LIFETIME_A_LABEL, UFS_LIFETIME_B_LABEL)
)


def _as_text(data: TextLike) -> str:
    if isinstance(data, bytes):
        return data.decode("ascii", errors="replace")
    return data


def _parse_hex_byte(token: str) -> int:
    try:
        value = int(token, 16)
    except ValueError:
        raise WearParseError(f"not a hex value: {token!r}") from None
    if not 0 <= value <= 0xFF:
        raise WearParseError(f"not a byte value: {token!r}")
    return value


def decode_lifetime(code: int) -> Optional[int]:
    if code == 0:
        return None
    if code > MAX_LIFETIME_CODE:
        raise WearParseError(f"lifetime code out of range: {code:#x}")
    return (code - 1) * 10


def decode_pre_eol(code: int) -> PreEolInfo:
    try:
        return _PRE_EOL_CODES[code]
    except KeyError:
        raise WearParseError(f"unknown pre-EOL code: {code:#x}") from None


def parse_emmc_wear(lifetime_text: TextLike, eol_text: TextLike) -> WearInformation:
    lifetime_tokens = _as_text(lifetime_text).split()
    if len(lifetime_tokens) != 2:
        raise WearParseError(f"expected 2 lifetime values, got {len(lifetime_tokens)}")
    eol_tokens = _as_text(eol_text).split()
    if len(eol_tokens) != 1:
        raise WearParseError(f"expected 1 pre-EOL value, got {len(eol_tokens)}")

    estimate_a, estimate_b = (decode_lifetime(_parse_hex_byte(t)) for t in lifetime_tokens)
    return WearInformation(
        lifetime_estimate_a=estimate_a,
        lifetime_estimate_b=estimate_b,
        pre_eol_info=decode_pre_eol(_parse_hex_byte(eol_tokens[0])),
    )


def parse_ufs_wear(text: TextLike) -> WearInformation:
    pre_eol = PreEolInfo.UNKNOWN
    lifetimes: Dict[str, Optional[int]] = {}
    for line in _as_text(text).splitlines():
        match = _UFS_FIELD_RE.search(line)
        if not match:
            continue
        label, raw = match.groups()
        try:
            code = _parse_hex_byte(raw)
            if label == UFS_PRE_EOL_LABEL:
                pre_eol = PreEolInfo.UNKNOWN if code == 0 else decode_pre_eol(code)
            else:
                lifetimes[label] = decode_lifetime(code)
        except WearParseError as exc:
            # Out-of-range codes leave the field unknown rather than failing the dump.
            logger.warning("Ignoring UFS health field %s: %s", label, exc)
            if label == UFS_PRE_EOL_LABEL:
                pre_eol = PreEolInfo.UNKNOWN
            else:
                lifetimes[label] = None

    return WearInformation(
        lifetime_estimate_a=lifetimes.get(UFS_LIFETIME_A_LABEL),
        lifetime_estimate_b=lifetimes.get(UFS_LIFETIME_B_LABEL),
        pre_eol_info=pre_eol,
    )


def read_emmc_wear(lifetime_path: PathLike, eol_path: PathLike) -> Optional[WearInformation]:
    try:
        lifetime_text = Path(lifetime_path).read_bytes()
        eol_text = Path(eol_path).read_bytes()
    except OSError as exc:
        logger.debug("eMMC wear information unavailable: %s", exc)
        return None
    try:
        return parse_emmc_wear(lifetime_text, eol_text)
    except WearParseError as exc:
        logger.warning("Unable to parse eMMC wear information from %s: %s", lifetime_path, exc)
        return None


def read_ufs_wear(path: PathLike) -> Optional[WearInformation]:
    try:
        text = Path(path).read_bytes()
    except OSError as exc:
        logger.debug("UFS health descriptor unavailable: %s", exc)
        return None
    return parse_ufs_wear(text)

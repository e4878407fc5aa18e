from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from .config import Settings
from .models import WearInformation
from .wear import read_emmc_wear, read_ufs_wear

logger = logging.getLogger(__name__)

STORAGE_EMMC = "emmc"
STORAGE_UFS = "ufs"


def _emmc_wear(settings: Settings) -> Optional[WearInformation]:
    return read_emmc_wear(settings.emmc_lifetime_path, settings.emmc_eol_path)


def _ufs_wear(settings: Settings) -> Optional[WearInformation]:
    return read_ufs_wear(settings.ufs_health_path)


def detect_storage_type(settings: Settings) -> Optional[str]:
    if Path(settings.emmc_lifetime_path).is_file() and Path(settings.emmc_eol_path).is_file():
        return STORAGE_EMMC
    if Path(settings.ufs_health_path).is_file():
        return STORAGE_UFS
    return None


def get_wear_information(settings: Settings) -> Optional[WearInformation]:
    for name, provider in ((STORAGE_EMMC, _emmc_wear), (STORAGE_UFS, _ufs_wear)):
        info = provider(settings)
        if info is not None:
            logger.debug("Wear information read from %s source: %s", name, info)
            return info
    logger.info("No wear information available this cycle")
    return None

from __future__ import annotations

from typing import Iterable, List, Optional, Sequence

from .config import Settings
from .models import (
    HealthAssessment,
    IoUsageWindow,
    PreEolInfo,
    WearEstimateChange,
    WearInformation,
)


def is_excessive_io(window: IoUsageWindow, settings: Settings) -> bool:
    totals = window.totals
    return (
        totals.bytes_written_to_storage > settings.acceptable_bytes_written_per_sample
        or totals.fsync_calls > settings.acceptable_fsync_calls_per_sample
    )


def count_excessive_io(windows: Iterable[IoUsageWindow], settings: Settings) -> int:
    return sum(1 for w in windows if is_excessive_io(w, settings))


def evaluate_health(
    wear: Optional[WearInformation],
    changes: Sequence[WearEstimateChange],
    samples: Sequence[IoUsageWindow],
    settings: Settings,
) -> HealthAssessment:
    score = 0
    reasons: List[str] = []
    recommendations: List[str] = []

    if wear is None and not changes and not samples:
        return HealthAssessment(0, "UNKNOWN", [], ["Storage does not report wear information"])

    if wear is not None:
        if wear.pre_eol_info == PreEolInfo.URGENT:
            score += 70
            reasons.append("Pre-EOL status URGENT (reserved blocks nearly exhausted)")
        elif wear.pre_eol_info == PreEolInfo.WARNING:
            score += 40
            reasons.append("Pre-EOL status WARNING (reserved blocks consumed beyond 80%)")

        worst = max(
            (v for v in (wear.lifetime_estimate_a, wear.lifetime_estimate_b) if v is not None),
            default=None,
        )
        if worst is not None:
            if worst >= 90:
                score += 50
                reasons.append(f"Lifetime estimate at {worst}% of rated endurance")
            elif worst >= 70:
                score += 20
                reasons.append(f"Lifetime estimate at {worst}% of rated endurance")

    unacceptable = [c for c in changes if not c.is_acceptable_degradation]
    if unacceptable:
        score += 30
        reasons.append(
            f"{len(unacceptable)} wear change(s) faster than "
            f"{settings.acceptable_wear_percent_per_hour:g}%/hour"
        )

    excessive = count_excessive_io(samples, settings)
    if excessive > settings.max_excessive_io_samples:
        score += 30
        reasons.append(
            f"Excessive I/O in {excessive} of the last {len(samples)} samples"
        )
    elif excessive:
        score += 5
        reasons.append(f"Excessive I/O in {excessive} sample(s)")

    if score >= 100:
        score = 100

    if score >= 70:
        level = "CRITICAL"
        recommendations.append("Back up data immediately")
        recommendations.append("Plan storage replacement")
    elif score >= 40:
        level = "WARNING"
        recommendations.append("Back up important data soon")
        recommendations.append("Monitor wear estimates")
    else:
        level = "OK"
        recommendations.append("No immediate action needed")

    if excessive:
        recommendations.append("Review applications with the highest write volume")

    return HealthAssessment(score=score, level=level, reasons=reasons, recommendations=recommendations)

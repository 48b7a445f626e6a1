"""Warm-up ramp sets, computed on read and never stored."""

from dataclasses import dataclass
from typing import List, Optional

from .constants import WARMUP_MIN_WORKING_WEIGHT, WARMUP_RAMP
from .progression import round_to_increment


@dataclass
class WarmupSet:
    warmup_number: int
    target_weight: float
    target_reps: int


def calculate_warmup_sets(working_weight: Optional[float]) -> List[WarmupSet]:
    """Ramp toward the working weight; light weights need no warm-up."""
    if working_weight is None or working_weight < WARMUP_MIN_WORKING_WEIGHT:
        return []
    return [
        WarmupSet(
            warmup_number=i,
            target_weight=round_to_increment(working_weight * pct),
            target_reps=reps,
        )
        for i, (pct, reps) in enumerate(WARMUP_RAMP, start=1)
    ]

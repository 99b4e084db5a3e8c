"""
Score Calculator

Bounded, reproducible numbers shared by every analyzer:

  - Detector confidence: base + matches * increment, capped per category.
    A single pattern family can never reach certainty; the ceiling only
    rises when two or more independent families agree.
  - Stance arithmetic: agreement percentage, signed consensus, polarization.

All rounding is half-up so 12.5 -> 13 and 0.125 -> 0.13, independent
of banker's rounding in round().
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional


def round_half_up(value: float, digits: int = 0) -> float:
    """Round to `digits` decimals, halves away from zero for non-negative input."""
    factor = 10 ** digits
    return math.floor(value * factor + 0.5) / factor


def clamp_unit(value: float) -> float:
    return max(0.0, min(1.0, value))


@dataclass(frozen=True)
class ConfidenceModel:
    """
    Confidence for one detector category.

    floor:  lowest confidence a firing detector reports (one plain match).
    cap:    ceiling for a single pattern family.
    corroborated_cap: ceiling when >= 2 families matched.
    """
    base: float
    increment: float
    cap: float
    corroborated_cap: float = 1.0

    @property
    def floor(self) -> float:
        return min(self.base + self.increment, self.cap)

    def score(self, weighted_matches: float, families: int = 1) -> float:
        ceiling = self.corroborated_cap if families >= 2 else self.cap
        raw = self.base + weighted_matches * self.increment
        bounded = max(self.floor, min(raw, ceiling))
        return round(clamp_unit(bounded), 4)


# Per-category confidence models
TONE_CONFIDENCE = ConfidenceModel(base=0.65, increment=0.10, cap=0.95)
FALLACY_CONFIDENCE = ConfidenceModel(base=0.70, increment=0.08, cap=0.92)
UNSOURCED_CONFIDENCE = ConfidenceModel(base=0.65, increment=0.08, cap=0.88)
BIAS_CONFIDENCE = ConfidenceModel(base=0.60, increment=0.08, cap=0.85)


# ============================================================
# STANCE ARITHMETIC
# ============================================================

def calculate_agreement_percentage(
    support: int, oppose: int, nuanced: int,
) -> Optional[int]:
    """
    Share of support as a whole percentage.

    Returns None when nobody has taken a stance.
    """
    total = support + oppose + nuanced
    if total == 0:
        return None
    return int(round_half_up(100 * support / total))


def split_percentages(*counts: int) -> list[int]:
    """
    Whole percentages for each count that always sum to 100.

    Largest-remainder apportionment: floor every share, then hand the
    leftover points to the largest fractional parts (earlier counts win
    ties). All zeros yields all zeros.
    """
    total = sum(counts)
    if total == 0:
        return [0] * len(counts)
    exact = [100 * c / total for c in counts]
    whole = [math.floor(e) for e in exact]
    leftover = 100 - sum(whole)
    by_remainder = sorted(range(len(counts)), key=lambda i: (-(exact[i] - whole[i]), i))
    for i in by_remainder[:leftover]:
        whole[i] += 1
    return whole


def derived_consensus(support: int, oppose: int, nuanced: int) -> float:
    """Signed agreement ratio (support - oppose) / total normalized into [0, 1]."""
    total = support + oppose + nuanced
    if total == 0:
        return 0.5
    return ((support - oppose) / total + 1) / 2


def polarization(support_share: float, oppose_share: float) -> float:
    """1.0 for an even split, falling linearly as one side dominates."""
    return round_half_up(clamp_unit(1 - abs(support_share - oppose_share)), 2)

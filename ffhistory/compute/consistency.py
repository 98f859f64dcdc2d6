"""Consistency figures derived from weekly scoring.

``calculate_consistency_score`` is the canonical consistency figure used for every
``TeamMetrics.consistency.score``, single season and all-time alike. The standard
deviation of weekly scores is reported separately as ``points.std_dev`` and is
never substituted for the score.
"""

from __future__ import annotations

import math
import statistics
from collections.abc import Sequence

from ffhistory.constants import CONSISTENCY_RANGE_WEIGHT


def calculate_consistency_score(average: float, high: float, low: float) -> float:
    """Range-based consistency in ``[0, 100]``.

    ``100 - (high - low) / average * 50``, clamped. A non-positive or non-finite
    average (nothing scored yet) yields ``0.0``.
    """
    if not math.isfinite(average) or average <= 0:
        return 0.0
    normalized_range = (high - low) / average
    score = 100.0 - normalized_range * CONSISTENCY_RANGE_WEIGHT
    return max(0.0, min(100.0, score))


def series_consistency_score(scores: Sequence[float]) -> float:
    if not scores:
        return 0.0
    return calculate_consistency_score(statistics.fmean(scores), max(scores), min(scores))


def weekly_std_dev(scores: Sequence[float]) -> float:
    if len(scores) < 2:
        return 0.0
    return statistics.pstdev(scores)

"""
Histogram intervals for the log-scale distribution.
"""

from dataclasses import dataclass
from typing import List


@dataclass(frozen=True)
class HistogramBin:
    """
    One histogram interval.

    Attributes:
        left: Left boundary of the interval (-inf for the first interval).
        right: Right boundary of the interval, shared with the next one.
        count: Approximate number of observations in the interval.
    """

    left: float
    right: float
    count: float


def equal_width_cut_points(low: float, high: float, intervals: int) -> List[float]:
    """
    Split [low, high] into equal intervals and return their right edges.

    The returned list has ``intervals`` points; the last one is ``high`` up
    to rounding.
    """
    step = (high - low) / intervals
    return [low + i * step for i in range(1, intervals + 1)]

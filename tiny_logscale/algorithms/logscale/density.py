"""
Smoothed probability density over log-scale buckets.

Buckets differ in width, so raw counts cannot be compared directly, and
dividing by the bucket width alone is unstable around the zero bucket. Each
bucket's count is therefore blended with half of each neighbour's count and
divided by the distance between those neighbours:

                  C[prev] + 2 * C[this] + C[next]
    density  =   ---------------------------------
                         2 * |next - prev|

The outermost buckets have a single neighbour and use twice the gap to it
as the denominator. The estimate is known to be unreliable near zero.
"""

from typing import List, Optional, Sequence


def smoothed_density(keys: Sequence[float], counts: Sequence[int]) -> List[float]:
    """
    Compute the neighbour-smoothed density of each bucket.

    Args:
        keys: Bucket representatives in ascending order.
        counts: Counts parallel to keys.

    Returns:
        One density per bucket, or an empty list if there are fewer than two
        buckets.
    """
    if len(keys) != len(counts):
        raise ValueError("keys and counts must have the same length")
    n = len(keys)
    if n < 2:
        return []

    density = [0.0] * n
    for i in range(1, n - 1):
        count = counts[i] + (counts[i - 1] + counts[i + 1]) / 2
        density[i] = count / (keys[i + 1] - keys[i - 1])

    density[0] = (counts[0] + counts[1] / 2) / ((keys[1] - keys[0]) * 2)
    density[-1] = (counts[-2] / 2 + counts[-1]) / ((keys[-1] - keys[-2]) * 2)
    return density


def densest(keys: Sequence[float], density: Sequence[float]) -> Optional[float]:
    """
    Return the key with the highest density, the first one on ties.
    """
    best_key = None
    best_density = 0.0
    for key, value in zip(keys, density):
        if value > best_density:
            best_density = value
            best_key = key
    return best_key

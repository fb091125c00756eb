"""
Bucket counters and order-statistics helpers for the log-scale distribution.

The store is a flat mapping ``representative -> count``. It is the only
mutable state of a distribution; sorted keys and cumulative counts are
derived from it on demand.
"""

import logging
import math
import sys
from bisect import bisect_left
from typing import Dict, Iterable, List, Mapping, Optional, Sequence

from tiny_logscale.core.bucketizer import Bucketizer
from tiny_logscale.core.errors import InvalidArgument

logger = logging.getLogger(__name__)


def lower_bound_ge(sorted_array: Sequence[float], target: float) -> int:
    """
    Return the smallest index i with ``sorted_array[i] >= target``.

    Returns ``len(sorted_array)`` if every element is below target, and 0 if
    the array is empty or its first element already meets the target.
    """
    return bisect_left(sorted_array, target)


class BucketStore:
    """
    Mapping from bucket representative to occurrence count.

    Every key is either 0 or a fixed point of the bucketizer's ``round``.
    ``total_count`` always equals the sum of all counts, and no bucket is
    ever stored with a zero count.
    """

    __slots__ = ["_bucketizer", "_data", "_total_count"]

    def __init__(self, bucketizer: Bucketizer):
        self._bucketizer = bucketizer
        self._data: Dict[float, int] = {}
        self._total_count = 0

    @property
    def bucketizer(self) -> Bucketizer:
        return self._bucketizer

    @property
    def total_count(self) -> int:
        return self._total_count

    def _key(self, value: float) -> Optional[float]:
        """
        Return the representative of value, or None if it cannot be stored.

        Non-finite values and values outside the float range have no bucket.
        """
        try:
            if not math.isfinite(value):
                return None
            key = self._bucketizer.round(value)
        except OverflowError:
            return None
        return key if math.isfinite(key) else None

    def insert(self, values: Iterable[float]) -> int:
        """
        Count every value in its bucket.

        Non-finite values and values whose bucket lies beyond the float range
        are skipped.

        Args:
            values: Raw numeric observations.

        Returns:
            The number of observations added.
        """
        keys = []
        skipped = 0
        # Round everything first so a bad value leaves the store untouched
        for value in values:
            key = self._key(value)
            if key is None:
                skipped += 1
                continue
            keys.append(key)

        if skipped:
            logger.debug("Skipped %d non-finite or out-of-range values", skipped)

        data = self._data
        for key in keys:
            data[key] = data.get(key, 0) + 1

        self._total_count += len(keys)
        return len(keys)

    def insert_weighted(self, mapping: Mapping[float, int]) -> int:
        """
        Add each weight to the bucket of its key.

        Keys may be raw values or representatives; both are rounded. Keys
        that cannot be stored (see ``insert``) and zero weights are skipped.

        Args:
            mapping: Value -> non-negative integer weight.

        Returns:
            The total weight added.

        Raises:
            InvalidArgument: If a weight is negative or not an integer. The
                store is left unchanged in that case.
        """
        items = []
        for value, weight in mapping.items():
            if (
                not isinstance(weight, (int, float))
                or (isinstance(weight, float) and not weight.is_integer())
                or weight < 0
            ):
                raise InvalidArgument(
                    f"Weight for {value!r} must be a non-negative integer, got {weight!r}"
                )
            if weight == 0:
                continue
            key = self._key(value)
            if key is None:
                logger.debug("Skipped key %r with weight %d", value, weight)
                continue
            items.append((key, int(weight)))

        data = self._data
        added = 0
        for key, weight in items:
            data[key] = data.get(key, 0) + weight
            added += weight

        self._total_count += added
        return added

    def export(self) -> Dict[float, int]:
        """Return a copy of the representative -> count mapping."""
        return dict(self._data)

    def clear(self) -> None:
        self._data = {}
        self._total_count = 0

    def get(self, key: float) -> int:
        """Return the count stored under a representative (0 if absent)."""
        return self._data.get(key, 0)

    def sorted_keys(self) -> List[float]:
        """Return the representatives in ascending order."""
        return sorted(self._data)

    def cumulative(self, keys: Optional[Sequence[float]] = None) -> List[int]:
        """
        Return running totals of counts along keys.

        Args:
            keys: Representatives in the order to accumulate. Defaults to
                ``sorted_keys()``.
        """
        if keys is None:
            keys = self.sorted_keys()
        data = self._data
        running = 0
        totals = []
        for key in keys:
            running += data[key]
            totals.append(running)
        return totals

    def items(self):
        return self._data.items()

    def estimate_size(self) -> int:
        """Estimate the memory used by the bucket mapping in bytes."""
        size = sys.getsizeof(self._data)
        for key, count in self._data.items():
            size += sys.getsizeof(key) + sys.getsizeof(count)
        return size

    def __len__(self) -> int:
        """Number of non-empty buckets."""
        return len(self._data)

    def __contains__(self, key: float) -> bool:
        return key in self._data

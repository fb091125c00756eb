"""
Log-scale distribution for tiny-logscale.

This module provides an approximate descriptive-statistics summary that keeps
only counters for logarithmic buckets. Memory grows with the number of
distinct buckets (roughly ``log(max/min) / log(base)`` per sign), not with the
number of observations.

Every statistic is computed from the buckets, so the relative error of any
order statistic is bounded by half the bucket width (``(base - 1) / 2``).
Moments and arbitrary expectations go through a single integrator,
``sum_of``, which evaluates a function once per bucket and interpolates
linearly inside the buckets cut by the requested range.

References:
    - Statistics::Descriptive::LogScale (Perl), K. S. Uvarin, 2013.
"""

import logging
import math
import sys
from typing import (
    Any,
    Callable,
    Dict,
    Iterable,
    List,
    Mapping,
    Optional,
    Sequence,
    Tuple,
    Type,
    TypeVar,
    Union,
)

from tiny_logscale.algorithms.logscale.density import densest, smoothed_density
from tiny_logscale.algorithms.logscale.histogram import (
    HistogramBin,
    equal_width_cut_points,
)
from tiny_logscale.algorithms.logscale.store import BucketStore, lower_bound_ge
from tiny_logscale.core.base import DistributionSummary
from tiny_logscale.core.bucketizer import Bucketizer
from tiny_logscale.core.errors import ConfigError, DomainError, InvalidArgument
from tiny_logscale.core.memo import MemoCache, memoized

logger = logging.getLogger(__name__)

# Type variable for the class itself (for from_dict)
LogScaleType = TypeVar("LogScaleType", bound="LogScaleDistribution")

BucketFunction = Callable[[float], float]

_LAST_HISTOGRAM = "last_histogram"


def _one(x: float) -> int:
    return 1


def _identity(x: float) -> float:
    return x


class LogScaleDistribution(DistributionSummary):
    """
    Approximate distribution stored as logarithmic bucket counters.

    Observations with absolute value at or below the zero threshold go to a
    special zero bucket. Every other observation is counted in the bucket
    ``[floor * base**i, floor * base**(i+1))`` (mirrored for negatives),
    represented by ``base**i``, where ``floor = 2 / (1 + base)`` so that the
    bucket of 1 is centered on 1.

    Read queries are memoized until the next mutation. Instances are not
    thread-safe: callers sharing one instance must serialize all access.

    Example:
        dist = LogScaleDistribution()
        dist.add_data([1.5, 2.0, 2.5, 100.0])
        print(dist.median(), dist.percentile(90), dist.mean())
    """

    # About 5% precision with exact powers of 10
    DEFAULT_BASE: float = 10 ** (1 / 48)
    DEFAULT_ZERO_THRESHOLD: float = 0.0

    def __init__(
        self,
        base: Optional[float] = None,
        zero_threshold: Optional[float] = None,
        memory_limit_bytes: Optional[int] = None,
    ):
        """
        Initialize an empty distribution.

        Args:
            base: Ratio of adjacent bucket edges, must be > 1.
                  Default: 10 ** (1/48).
            zero_threshold: Absolute value at or below which observations
                  count as zero, must be >= 0. Snapped down to the nearest
                  bucket edge. Default: 0.
            memory_limit_bytes: Optional maximum memory usage in bytes.

        Raises:
            ConfigError: If base or zero_threshold is out of range.
        """
        super().__init__(memory_limit_bytes)
        if base is None:
            base = self.DEFAULT_BASE
        if zero_threshold is None:
            zero_threshold = self.DEFAULT_ZERO_THRESHOLD

        self._bucketizer = Bucketizer(base, zero_threshold)
        self._requested_zero_threshold = float(zero_threshold)
        self._store = BucketStore(self._bucketizer)
        self._cache = MemoCache()

    #
    # Configuration
    #
    @property
    def base(self) -> float:
        return self._bucketizer.base

    @property
    def bucketizer(self) -> Bucketizer:
        return self._bucketizer

    def bucket_width(self) -> float:
        """
        Bucket width relative to its representative.

        Percentiles are off by no more than half of this.
        """
        return self._bucketizer.base - 1

    def zero_threshold(self) -> float:
        """Absolute value at or below which observations are zero."""
        return self._bucketizer.zero_threshold

    #
    # Mutation
    #
    def _invalidate(self) -> None:
        self._cache.invalidate()

    def update(self, item: float) -> None:
        """
        Add a single observation.

        Args:
            item: Numeric value. Non-finite values (NaN, +/-Inf) are ignored.
        """
        self.add_data([item])

    def add_data(self, values: Iterable[float]) -> int:
        """
        Add observations.

        Args:
            values: Numeric values. Non-finite values are ignored.

        Returns:
            The number of observations added.
        """
        added = self._store.insert(values)
        if added:
            self._invalidate()
            self._items_processed += added
        return added

    def add_data_hash(self, mapping: Mapping[float, int]) -> int:
        """
        Add observations given as value -> count.

        This is the inverse of ``get_data_hash()``.

        Args:
            mapping: Values (raw or bucket representatives) mapped to
                non-negative integer counts.

        Returns:
            The number of observations added.

        Raises:
            InvalidArgument: If a count is negative or not an integer.
        """
        added = self._store.insert_weighted(mapping)
        if added:
            self._invalidate()
            self._items_processed += added
        return added

    def get_data_hash(self) -> Dict[float, int]:
        """Return a copy of the bucket representative -> count mapping."""
        return self._store.export()

    def clear(self) -> None:
        """
        Destroy all stored data.

        Configuration is preserved.
        """
        self._store.clear()
        self._invalidate()
        super().clear()
        logger.debug("Cleared %s", self.__class__.__name__)

    #
    # Order statistics index
    #
    @memoized
    def _sorted_keys(self) -> Tuple[float, ...]:
        return tuple(self._store.sorted_keys())

    @memoized
    def _cumulative(self) -> Tuple[int, ...]:
        return tuple(self._store.cumulative(self._sorted_keys()))

    def sorted_keys(self) -> List[float]:
        """Return the bucket representatives in ascending order."""
        return list(self._sorted_keys())

    def cumulative(self) -> List[int]:
        """
        Return cumulative counts parallel to ``sorted_keys()``.

        Entry j is the number of observations in buckets 0..j inclusive.
        """
        return list(self._cumulative())

    #
    # Integration
    #
    def sum_of(
        self,
        func: BucketFunction,
        min_value: Optional[float] = None,
        max_value: Optional[float] = None,
    ) -> float:
        """
        Integrate a function over the sample within [min_value, max_value].

        The function is evaluated once per bucket at its representative and
        weighted by the bucket count, so it should be pure and not vary
        wildly within a bucket. The buckets containing the limits are cut
        assuming observations are spread uniformly inside them; the zero
        bucket, when it has no width, is cut in half.

        ``sum_of(lambda x: 1, a, b)`` approximates the number of
        observations between a and b.

        Args:
            func: Function from a real number to a real number.
            min_value: Lower limit. None means negative infinity.
            max_value: Upper limit. None means positive infinity.

        Returns:
            The approximate sum of func over the observations in range.
        """
        store = self._store
        keys = self._sorted_keys()

        if min_value is None and max_value is None:
            total = 0
            for key in keys:
                total += store.get(key) * func(key)
            return total

        if min_value is None:
            min_value = -math.inf
        if max_value is None:
            max_value = math.inf
        if min_value >= max_value:
            return 0

        bucketizer = self._bucketizer
        left = bucketizer.lower(min_value)
        right = bucketizer.upper(max_value)

        total = 0
        for i in range(lower_bound_ge(keys, left), len(keys)):
            key = keys[i]
            if key > right:
                break
            total += store.get(key) * func(key)

        # Remove the parts of the edge buckets that lie outside the range
        max_bucket = bucketizer.round(max_value)
        count = store.get(max_bucket)
        if count:
            width = bucketizer.width(max_bucket)
            part = (bucketizer.upper(max_bucket) - max_value) / width if width else 0.5
            total -= count * func(max_bucket) * part

        min_bucket = bucketizer.round(min_value)
        count = store.get(min_bucket)
        if count:
            width = bucketizer.width(min_bucket)
            part = (min_value - bucketizer.lower(min_bucket)) / width if width else 0.5
            total -= count * func(min_bucket) * part

        return total

    def mean_of(
        self,
        func: BucketFunction,
        min_value: Optional[float] = None,
        max_value: Optional[float] = None,
    ) -> Optional[float]:
        """
        Return the expectation of func over the sample within the range.

        Returns None if no observations fall in the range.
        """
        weight = self.sum_of(_one, min_value, max_value)
        if not weight:
            return None
        return self.sum_of(func, min_value, max_value) / weight

    #
    # Moments
    #
    def count(self) -> int:
        """Return the number of observations."""
        return self._store.total_count

    @memoized
    def sum(self) -> float:
        return self.sum_of(_identity)

    @memoized
    def sumsq(self) -> float:
        return self.sum_of(lambda x: x * x)

    @memoized
    def mean(self) -> Optional[float]:
        n = self.count()
        return self.sum() / n if n else None

    @memoized
    def variance(self, population: bool = False) -> float:
        """
        Return the variance of the sample.

        Args:
            population: If True, divide by n (population variance). Otherwise
                divide by n - 1 (unbiased sample variance).

        Returns:
            The variance, or 0 if there are too few observations or the
            result is not positive due to rounding.
        """
        n = self.count()
        offset = 0 if population else 1
        if n < 1 + offset:
            return 0.0

        var = self.sumsq() - self.sum() ** 2 / n
        return var / (n - offset) if var > 0 else 0.0

    @memoized
    def std_dev(self) -> Optional[float]:
        """Return the sample standard deviation, or None if empty."""
        if not self.count():
            return None
        return math.sqrt(self.variance())

    standard_deviation = std_dev

    @memoized
    def central_moment(self, n: int) -> Optional[float]:
        """Return E((x - E(x)) ** n), or None if empty."""
        count = self.count()
        if not count:
            return None
        mean = self.mean()
        return self.sum_of(lambda x: (x - mean) ** n) / count

    @memoized
    def std_moment(self, n: int) -> Optional[float]:
        """
        Return E((x - E(x)) ** n) / std_dev ** n.

        Returns None if the sample is empty or has no spread.
        """
        count = self.count()
        dev = self.std_dev()
        if not count or not dev:
            return None
        mean = self.mean()
        return self.sum_of(lambda x: (x - mean) ** n) / (dev ** n * count)

    def skewness(self) -> Optional[float]:
        """
        Return the skewness, n / ((n-1)(n-2)) * n * std_moment(3).

        This matches Excel and Statistics::Descriptive. Needs at least
        3 observations.
        """
        n = self.count()
        if n <= 2:
            return None
        moment = self.std_moment(3)
        if moment is None:
            return None
        return n / ((n - 1) * (n - 2)) * n * moment

    def kurtosis(self) -> Optional[float]:
        """
        Return the excess kurtosis with the usual small-sample corrections.

        Needs at least 4 observations.
        """
        n = self.count()
        if n <= 3:
            return None
        moment = self.std_moment(4)
        if moment is None:
            return None
        correction1 = (n * (n + 1)) / ((n - 1) * (n - 2) * (n - 3))
        correction2 = (3 * (n - 1) ** 2) / ((n - 2) * (n - 3))
        return correction1 * n * moment - correction2

    def harmonic_mean(self) -> Optional[float]:
        """Return 1 / E(1/x), or None on division by zero."""
        try:
            return self.count() / self.sum_of(lambda x: 1 / x)
        except ZeroDivisionError:
            return None

    def geometric_mean(self) -> Optional[float]:
        """
        Return exp(E(log |x|)), signed like the data.

        Returns 0 if any observation is in the zero bucket and None if the
        sample is empty.

        Raises:
            DomainError: If the sample has both negative and positive values.
        """
        n = self.count()
        if not n:
            return None
        low, high = self.min(), self.max()
        if low * high < 0:
            raise DomainError("Geometric mean is undefined for a mixed-sign sample")
        if self._store.get(0.0):
            return 0.0

        value = math.exp(self.sum_of(lambda x: math.log(abs(x))) / n)
        return -value if low < 0 else value

    def trimmed_mean(
        self, lower: float = 0.0, upper: Optional[float] = None
    ) -> Optional[float]:
        """
        Return the mean with fractions of the sample cut off at both ends.

        Args:
            lower: Fraction of observations to drop from the low end.
            upper: Fraction to drop from the high end. Defaults to lower.

        Returns:
            The trimmed mean, or None if the cut leaves no interval.
        """
        if upper is None:
            upper = lower

        low = self.percentile(lower * 100)
        high = self.percentile(100 - upper * 100)
        # An undefined low percentile is negative infinity
        if high is None or (low is not None and low >= high):
            return None

        return self.mean_of(_identity, low, high)

    #
    # Order statistics
    #
    @memoized
    def min(self) -> Optional[float]:
        """Return the representative of the lowest bucket."""
        keys = self._sorted_keys()
        return keys[0] if keys else None

    @memoized
    def max(self) -> Optional[float]:
        """Return the representative of the highest bucket."""
        keys = self._sorted_keys()
        return keys[-1] if keys else None

    def sample_range(self) -> Optional[float]:
        """Return max() - min(), or None if empty."""
        if not self.count():
            return None
        return self.max() - self.min()

    def percentile(self, p: float) -> Optional[float]:
        """
        Return the value below which p percent of the observations lie.

        The 0th percentile is by definition negative infinity and is returned
        as None, as is any percentile whose rank is below 1.

        Args:
            p: Percentile, a real number between 0 and 100.

        Raises:
            InvalidArgument: If p is outside [0, 100].
        """
        if not isinstance(p, (int, float)) or not 0 <= p <= 100:
            raise InvalidArgument(f"Percentile must be between 0 and 100, got {p!r}")

        need = p * self.count() / 100
        if need < 1:
            return None

        cumulative = self._cumulative()
        i = lower_bound_ge(cumulative, need)
        if i >= len(cumulative):
            i = len(cumulative) - 1
        return self._sorted_keys()[i]

    def quantile(self, q: int) -> Optional[float]:
        """
        Return the q-th quartile.

        0 is the minimum, 1 the 25th percentile, 2 the median, 3 the 75th
        percentile and 4 the maximum.

        Raises:
            InvalidArgument: If q is not one of 0..4.
        """
        if isinstance(q, bool) or not isinstance(q, int) or not 0 <= q <= 4:
            raise InvalidArgument(f"Quantile must be one of 0..4, got {q!r}")
        return self._quantile(q)

    @memoized
    def _quantile(self, q: int) -> Optional[float]:
        if q == 0:
            return self.min()
        return self.percentile(q * 25)

    def median(self) -> Optional[float]:
        return self.percentile(50)

    @memoized
    def mode(self) -> Optional[float]:
        """
        Return the representative with the highest smoothed density.

        The distribution is treated as continuous, so bucket counts are
        smoothed with their neighbours before comparing. Unstable around zero.
        """
        keys = self._sorted_keys()
        if not keys:
            return None
        if len(keys) == 1:
            return keys[0]

        counts = [self._store.get(key) for key in keys]
        return densest(keys, smoothed_density(keys, counts))

    #
    # Histograms
    #
    def find_boundaries(self) -> Optional[Tuple[float, float]]:
        """
        Return (lower edge of the min bucket, upper edge of the max bucket).

        Returns None if the distribution is empty.
        """
        if not self.count():
            return None
        return self._bucketizer.lower(self.min()), self._bucketizer.upper(self.max())

    def histogram(
        self, cut_points: Union[int, Sequence[float], None] = None
    ) -> Optional[List[HistogramBin]]:
        """
        Count observations between consecutive cut points.

        Args:
            cut_points: Either a sequence of interval right edges, or a
                whole number n > 2 to split ``find_boundaries()`` into n equal
                intervals. If None, return the last histogram computed since
                the last mutation (or None).

        Returns:
            One HistogramBin per cut point. The first bin starts at negative
            infinity; each bin's right edge is the next bin's left edge.

        Raises:
            InvalidArgument: If a numeric cut_points is not a whole number
                greater than 2.
        """
        if cut_points is None:
            last = self._cache.get(_LAST_HISTOGRAM)
            return list(last) if last is not None else None

        if isinstance(cut_points, (int, float)):
            if (
                isinstance(cut_points, bool)
                or (isinstance(cut_points, float) and not cut_points.is_integer())
                or cut_points <= 2
            ):
                raise InvalidArgument(
                    f"Number of intervals must be an integer greater than 2, got {cut_points!r}"
                )
            boundaries = self.find_boundaries()
            points = (
                equal_width_cut_points(boundaries[0], boundaries[1], int(cut_points))
                if boundaries is not None
                else []
            )
        else:
            points = sorted(cut_points)

        edges = [-math.inf] + points
        bins = [
            HistogramBin(left=left, right=right, count=self.sum_of(_one, left, right))
            for left, right in zip(edges, edges[1:])
        ]

        self._cache.set(_LAST_HISTOGRAM, tuple(bins))
        return bins

    def frequency_distribution(
        self, cut_points: Union[int, Sequence[float], None] = None
    ) -> Optional[Dict[float, float]]:
        """
        Return ``histogram(cut_points)`` as a mapping right edge -> count.
        """
        bins = self.histogram(cut_points)
        if bins is None:
            return None
        return {b.right: b.count for b in bins}

    #
    # StreamSummary interface
    #
    def merge(self: LogScaleType, other: LogScaleType) -> LogScaleType:
        """
        Merge this distribution with another one.

        The originals are not modified.

        Args:
            other: Another LogScaleDistribution with the same base and
                zero threshold.

        Returns:
            A new distribution holding the observations of both.

        Raises:
            TypeError: If other is not a LogScaleDistribution.
            ValueError: If the bucket configurations differ.
        """
        self._check_same_type(other)

        if self._bucketizer != other._bucketizer:
            raise ValueError(
                f"Cannot merge distributions with different buckets: "
                f"{self._bucketizer!r} != {other._bucketizer!r}"
            )

        merged = self.__class__(
            base=self.base,
            zero_threshold=self._requested_zero_threshold,
            memory_limit_bytes=self._memory_limit_bytes,
        )
        merged.add_data_hash(self.get_data_hash())
        merged.add_data_hash(other.get_data_hash())

        logger.debug(
            "Merged %d + %d observations into %d buckets",
            self.count(),
            other.count(),
            len(merged._store),
        )
        return merged

    def to_dict(self) -> Dict[str, Any]:
        """
        Serialize the distribution to a dictionary.

        Buckets are stored as [representative, count] pairs in ascending
        order.
        """
        state = self._base_dict()
        state.update(
            {
                "base": self._bucketizer.base,
                "zero_threshold": self._requested_zero_threshold,
                "count": self.count(),
                "buckets": [[key, self._store.get(key)] for key in self._sorted_keys()],
            }
        )
        return state

    @classmethod
    def from_dict(cls: Type[LogScaleType], data: Dict[str, Any]) -> LogScaleType:
        """
        Deserialize a distribution from a dictionary created by to_dict().

        Raises:
            ValueError: If the dictionary is missing keys or has invalid data.
        """
        cls._check_dict(data, ("base", "zero_threshold", "buckets", "items_processed"))

        instance = cls(
            base=data["base"],
            zero_threshold=data["zero_threshold"],
            memory_limit_bytes=data.get("memory_limit_bytes"),
        )

        buckets: Dict[float, int] = {}
        try:
            for key, count in data["buckets"]:
                key = float(key)
                buckets[key] = buckets.get(key, 0) + count
        except (TypeError, ValueError) as e:
            raise ValueError(f"Error deserializing buckets: {e}") from e

        instance.add_data_hash(buckets)
        if "count" in data and data["count"] != instance.count():
            raise ValueError(
                f"Serialized count {data['count']} does not match buckets ({instance.count()})"
            )
        instance._items_processed = data["items_processed"]

        logger.debug(
            "Restored %s with %d buckets", cls.__name__, len(instance._store)
        )
        return instance

    @classmethod
    def create_from_precision(
        cls: Type[LogScaleType],
        precision: float,
        zero_threshold: float = 0.0,
        memory_limit_bytes: Optional[int] = None,
    ) -> LogScaleType:
        """
        Create a distribution whose bucket width does not exceed precision.

        The base is chosen as ``10 ** (1/k)`` with the smallest integer k
        that satisfies the precision, so powers of ten stay representatives.

        Args:
            precision: Maximum relative bucket width (base - 1), in (0, 1).
            zero_threshold: Zero threshold passed to the constructor.
            memory_limit_bytes: Optional maximum memory usage in bytes.

        Raises:
            ConfigError: If precision is not between 0 and 1.
        """
        if not isinstance(precision, (int, float)) or not 0 < precision < 1:
            raise ConfigError("Precision must be between 0 and 1")

        per_decade = math.ceil(math.log(10) / math.log1p(precision))
        return cls(
            base=10 ** (1 / per_decade),
            zero_threshold=zero_threshold,
            memory_limit_bytes=memory_limit_bytes,
        )

    def estimate_size(self) -> int:
        """
        Estimate the memory footprint of the distribution in bytes.

        Cached query results are not included.
        """
        size = super().estimate_size()
        size += sys.getsizeof(self._store)
        size += self._store.estimate_size()
        return size

    def error_bounds(self) -> Dict[str, float]:
        """
        Return the accuracy guarantees of this configuration.

        Returns:
            A dictionary with:
            - bucket_width: base - 1
            - relative_error: maximum relative error of any order statistic
            - zero_threshold: values this close to zero are reported as 0
        """
        width = self.bucket_width()
        return {
            "bucket_width": width,
            "relative_error": width / 2,
            "zero_threshold": self.zero_threshold(),
        }

    def get_stats(self) -> Dict[str, Any]:
        """
        Get statistics about the distribution and its bucket structure.
        """
        stats = super().get_stats()
        stats.update(
            {
                "base": self.base,
                "bucket_count": len(self._store),
                "min": self.min(),
                "max": self.max(),
                "std_dev": self.std_dev(),
            }
        )
        if self.count():
            stats["buckets_per_item"] = len(self._store) / self.count()
        return stats

    def __len__(self) -> int:
        """Return the number of observations."""
        return self.count()

    @property
    def is_empty(self) -> bool:
        """Check if the distribution contains any data."""
        return self.count() == 0

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}(base={self.base:.6g}, "
            f"zero_threshold={self.zero_threshold():.6g}, count={self.count()})"
        )

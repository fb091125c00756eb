"""
Logarithmic bucket mapping for tiny-logscale.

Real values are mapped to buckets whose edges grow geometrically by ``base``.
Each bucket is represented by a single point: ``0`` for the zero bucket, or
``+/-base**i`` otherwise. The bucket containing 1 is centered on 1, i.e. its
lower edge is ``2 / (1 + base)`` and its upper edge is ``2 * base / (1 + base)``.
"""

import math
from typing import Tuple

from tiny_logscale.core.errors import ConfigError


class Bucketizer:
    """
    Pure value -> bucket mapping for a fixed base and zero threshold.

    Instances are immutable after construction; all methods are pure
    functions of the configuration and their argument.
    """

    __slots__ = ["_base", "_log_base", "_floor", "_log_floor", "_zero_threshold"]

    def __init__(self, base: float, zero_threshold: float = 0.0):
        """
        Initialize the bucket mapping.

        Args:
            base: Ratio between adjacent bucket edges. Must be > 1.
            zero_threshold: Absolute value at or below which values fall into
                the zero bucket. Must be >= 0. It is snapped down to the
                nearest bucket edge.

        Raises:
            ConfigError: If base or zero_threshold is out of range.
        """
        if not isinstance(base, (int, float)) or not math.isfinite(base) or base <= 1:
            raise ConfigError(f"Base must be a finite number > 1, got {base!r}")
        if (
            not isinstance(zero_threshold, (int, float))
            or not math.isfinite(zero_threshold)
            or zero_threshold < 0
        ):
            raise ConfigError(
                f"Zero threshold must be a finite number >= 0, got {zero_threshold!r}"
            )

        self._base = float(base)
        self._log_base = math.log(self._base)
        self._floor = 2.0 / (1.0 + self._base)
        self._log_floor = math.log(self._floor)

        # Snap the threshold with an empty zero bucket first
        self._zero_threshold = 0.0
        self._zero_threshold = abs(self.lower(float(zero_threshold)))

    @property
    def base(self) -> float:
        return self._base

    @property
    def log_base(self) -> float:
        return self._log_base

    @property
    def floor(self) -> float:
        """Lower edge of the bucket whose representative is 1."""
        return self._floor

    @property
    def log_floor(self) -> float:
        return self._log_floor

    @property
    def zero_threshold(self) -> float:
        return self._zero_threshold

    def _index(self, x: float) -> int:
        return math.floor((math.log(abs(x)) - self._log_floor) / self._log_base)

    def _power(self, i: int) -> float:
        # Buckets past the largest float are unbounded
        try:
            return self._base ** i
        except OverflowError:
            return math.inf

    def round(self, x: float) -> float:
        """
        Return the representative of the bucket containing x.

        Values whose representative exceeds the float range map to +/-inf.
        """
        if math.isinf(x):
            return x
        if abs(x) <= self._zero_threshold:
            return 0.0
        value = self._power(self._index(x))
        return -value if x < 0 else value

    def upper(self, x: float) -> float:
        """Return the upper edge of the bucket containing x."""
        if math.isinf(x):
            return x
        if abs(x) <= self._zero_threshold:
            return self._zero_threshold
        i = self._index(x)
        if x > 0:
            return self._floor * self._power(i + 1)
        return -self._floor * self._power(i)

    def lower(self, x: float) -> float:
        """Return the lower edge of the bucket containing x."""
        if math.isinf(x):
            return x
        return -self.upper(-x)

    def edges(self, x: float) -> Tuple[float, float]:
        """Return (lower, upper) edges of the bucket containing x."""
        return self.lower(x), self.upper(x)

    def width(self, x: float) -> float:
        """Return the absolute width of the bucket containing x."""
        return self.upper(x) - self.lower(x)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Bucketizer):
            return NotImplemented
        return (
            self._base == other._base
            and self._zero_threshold == other._zero_threshold
        )

    def __hash__(self) -> int:
        return hash((self._base, self._zero_threshold))

    def __repr__(self) -> str:
        return (
            f"Bucketizer(base={self._base:.6g}, "
            f"zero_threshold={self._zero_threshold:.6g})"
        )

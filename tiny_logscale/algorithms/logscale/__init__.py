"""
Log-scale distribution for tiny-logscale.

This package stores a numeric distribution as counters of logarithmic
buckets and derives descriptive statistics from them.

This includes:
- BucketStore: representative -> count mapping with its running total
- LogScaleDistribution: the summary with moments, percentiles, mode and
  histograms
"""

from tiny_logscale.algorithms.logscale.distribution import LogScaleDistribution
from tiny_logscale.algorithms.logscale.histogram import HistogramBin
from tiny_logscale.algorithms.logscale.store import BucketStore, lower_bound_ge

__all__ = [
    "BucketStore",
    "HistogramBin",
    "LogScaleDistribution",
    "lower_bound_ge",
]

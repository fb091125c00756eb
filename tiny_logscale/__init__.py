"""
tiny-logscale - Approximate Streaming Statistics Library

tiny-logscale summarizes a stream of real numbers with logarithmic bucket
counters, answering means, moments, percentiles, histograms and arbitrary
expectations in bounded memory with a guaranteed relative error.
"""

__version__ = "0.1.0"

# Import main classes to make them available at the top level
from tiny_logscale.algorithms.logscale import HistogramBin, LogScaleDistribution
from tiny_logscale.core.base import DistributionSummary, StreamSummary
from tiny_logscale.core.bucketizer import Bucketizer
from tiny_logscale.core.errors import ConfigError, DomainError, InvalidArgument

__all__ = [
    # Core base classes
    "StreamSummary",
    "DistributionSummary",
    "Bucketizer",
    # Errors
    "ConfigError",
    "InvalidArgument",
    "DomainError",
    # Algorithm implementations
    "LogScaleDistribution",
    "HistogramBin",
]

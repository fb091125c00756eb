"""
Core functionality for tiny-logscale.
"""

from tiny_logscale.core.base import DistributionSummary, StreamSummary
from tiny_logscale.core.bucketizer import Bucketizer
from tiny_logscale.core.errors import ConfigError, DomainError, InvalidArgument
from tiny_logscale.core.memo import MemoCache, memoized

__all__ = [
    # Base classes
    "StreamSummary",
    "DistributionSummary",
    # Bucket mapping
    "Bucketizer",
    # Errors
    "ConfigError",
    "InvalidArgument",
    "DomainError",
    # Utilities
    "MemoCache",
    "memoized",
]

"""
Algorithm implementations for tiny-logscale.
"""

from tiny_logscale.algorithms.logscale import LogScaleDistribution

__all__ = [
    "LogScaleDistribution",
]

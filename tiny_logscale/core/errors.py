"""
Exception types for tiny-logscale.

All errors derive from ValueError so callers that already guard against bad
parameters with ``except ValueError`` keep working.
"""


class ConfigError(ValueError):
    """Invalid construction parameters (e.g. base <= 1)."""


class InvalidArgument(ValueError):
    """Query or ingest argument outside its allowed domain."""


class DomainError(ValueError):
    """The requested statistic is undefined for the data currently stored."""

"""
Base classes and interfaces for tiny-logscale summaries.

This module defines the abstract base classes that streaming summaries
implement to provide a consistent interface: updating with new items,
querying, merging, serialization and memory/accuracy reporting.
"""

import abc
import json
import sys
from typing import Any, Dict, Generic, Iterable, Optional, TypeVar, Union

T = TypeVar("T")  # Type for the items being processed
R = TypeVar("R")  # Type for the result of queries


class StreamSummary(Generic[T, R], abc.ABC):
    """
    Abstract base class for all streaming data structures.

    Subclasses keep ``_items_processed`` up to date as they ingest data and
    reset it in ``clear()``.
    """

    def __init__(self, memory_limit_bytes: Optional[int] = None):
        """
        Initialize a new stream summary.

        Args:
            memory_limit_bytes: Optional maximum memory usage in bytes.
                                None means no explicit limit.
        """
        self._memory_limit_bytes = memory_limit_bytes
        self._items_processed = 0

    @abc.abstractmethod
    def update(self, item: T) -> None:
        """
        Update the summary with a new item from the stream.

        Args:
            item: The new item to process.
        """

    @abc.abstractmethod
    def query(self, *args: Any, **kwargs: Any) -> R:
        """
        Query the current state of the summary.

        The parameters and return value depend on the specific summary.
        """

    @abc.abstractmethod
    def merge(self, other: "StreamSummary[T, R]") -> "StreamSummary[T, R]":
        """
        Merge this summary with another of the same type.

        Args:
            other: Another stream summary of the same type.

        Returns:
            A new merged stream summary.

        Raises:
            TypeError: If other is not of the same type.
        """

    def _check_same_type(self, other: "StreamSummary[T, R]") -> None:
        """
        Raise TypeError unless other is an instance of this summary's class.
        """
        if not isinstance(other, self.__class__):
            raise TypeError(f"Cannot merge with {other.__class__.__name__}")

    @abc.abstractmethod
    def to_dict(self) -> Dict[str, Any]:
        """
        Convert the summary to a dictionary for serialization.

        Returns:
            A dictionary representation of the summary.
        """

    def _base_dict(self) -> Dict[str, Any]:
        """
        Create a dictionary with base attributes common to all summaries.
        """
        return {
            "type": self.__class__.__name__,
            "items_processed": self._items_processed,
            "memory_limit_bytes": self._memory_limit_bytes,
        }

    @classmethod
    def _check_dict(cls, data: Dict[str, Any], required_keys: Iterable[str]) -> None:
        """
        Validate the envelope of a serialized summary.

        Raises:
            ValueError: If the type tag does not match or keys are missing.
        """
        if "type" not in data:
            raise ValueError(
                f"Invalid dictionary format for {cls.__name__}. Missing 'type'"
            )
        if data["type"] != cls.__name__:
            raise ValueError(
                f"Dictionary represents class '{data['type']}' but expected '{cls.__name__}'"
            )
        missing_keys = set(required_keys) - data.keys()
        if missing_keys:
            raise ValueError(
                f"Invalid dictionary format for {cls.__name__}. Missing keys: {sorted(missing_keys)}"
            )

    @classmethod
    @abc.abstractmethod
    def from_dict(cls, data: Dict[str, Any]) -> "StreamSummary[T, R]":
        """
        Create a summary from a dictionary representation.

        Args:
            data: The dictionary containing the summary state.

        Returns:
            A new stream summary initialized with the given state.
        """

    def serialize(self, format: str = "json") -> Union[str, bytes]:
        """
        Serialize the summary to a string or bytes.

        Args:
            format: The serialization format ('json' or 'binary').

        Returns:
            The serialized representation of the summary.

        Raises:
            ValueError: If the format is not supported.
        """
        if format == "json":
            return json.dumps(self.to_dict())
        elif format == "binary":
            return json.dumps(self.to_dict()).encode("utf-8")
        else:
            raise ValueError(f"Unsupported serialization format: {format}")

    @classmethod
    def deserialize(
        cls, data: Union[str, bytes], format: str = "json"
    ) -> "StreamSummary[T, R]":
        """
        Deserialize a summary from a string or bytes.

        Args:
            data: The serialized summary.
            format: The serialization format ('json' or 'binary').

        Returns:
            A new stream summary.

        Raises:
            ValueError: If the format is not supported.
        """
        if format == "json":
            if isinstance(data, bytes):
                data = data.decode("utf-8")
            return cls.from_dict(json.loads(data))
        elif format == "binary":
            if isinstance(data, str):
                data = data.encode("utf-8")
            return cls.from_dict(json.loads(data.decode("utf-8")))
        else:
            raise ValueError(f"Unsupported serialization format: {format}")

    def estimate_size(self) -> int:
        """
        Estimate the current memory usage of this summary in bytes.

        Derived classes should override this method and add the size of their
        own data structures.

        Returns:
            Estimated memory usage in bytes.
        """
        size = sys.getsizeof(self)
        if hasattr(self, "__dict__"):
            size += sys.getsizeof(self.__dict__)
        return size

    def check_memory_limit(self) -> bool:
        """
        Check if the current memory usage is within the limit.

        Returns:
            True if the memory usage is within limits, False otherwise.
        """
        if self._memory_limit_bytes is None:
            return True

        return self.estimate_size() <= self._memory_limit_bytes

    def clear(self) -> None:
        """
        Reset the summary to its initial empty state.

        Derived classes must call super().clear() after clearing their own
        data structures.
        """
        self._items_processed = 0

    def get_stats(self) -> Dict[str, Any]:
        """
        Get detailed statistics about the current state of the summary.

        Derived classes should extend this with their own statistics.

        Returns:
            A dictionary containing various statistics about the summary state.
        """
        stats: Dict[str, Any] = {
            "type": self.__class__.__name__,
            "items_processed": self._items_processed,
            "memory_bytes": self.estimate_size(),
        }

        if self._memory_limit_bytes is not None:
            stats["memory_limit_bytes"] = self._memory_limit_bytes
            stats["memory_usage_pct"] = (
                self.estimate_size() / self._memory_limit_bytes
            ) * 100

        stats.update(self.error_bounds())
        return stats

    def error_bounds(self) -> Dict[str, float]:
        """
        Get the theoretical error bounds for this summary.

        The base implementation returns an empty dictionary.
        """
        return {}

    @property
    def items_processed(self) -> int:
        """Get the total number of items processed by this summary."""
        return self._items_processed


class DistributionSummary(StreamSummary[float, Optional[float]], abc.ABC):
    """
    Abstract base class for summaries of a numeric distribution.

    Implementations answer order statistics and moments in bounded memory.
    Queries that have no answer for the current data return None.
    """

    @abc.abstractmethod
    def count(self) -> int:
        """Return the number of observations stored."""

    @abc.abstractmethod
    def mean(self) -> Optional[float]:
        """Return the mean of the observations, or None if there are none."""

    @abc.abstractmethod
    def percentile(self, p: float) -> Optional[float]:
        """
        Return the value below which p percent of the observations lie.

        Args:
            p: Percentile between 0 and 100.
        """

    def query(self, p: float = 50.0) -> Optional[float]:
        """
        Query the summary; equivalent to ``percentile(p)``.
        """
        return self.percentile(p)

    def get_stats(self) -> Dict[str, Any]:
        """
        Get statistics about the summary, including a few order statistics.
        """
        stats = super().get_stats()

        stats["count"] = self.count()
        stats["mean"] = self.mean()
        for p in (50, 90, 99):
            stats[f"p{p}"] = self.percentile(p)

        return stats

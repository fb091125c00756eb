"""
Log-Scale Distribution Demo for TinyLogScale.

This example demonstrates how to summarize a large stream of numbers with
LogScaleDistribution and query descriptive statistics from the buckets.
"""

import random
import statistics

from tiny_logscale.algorithms.logscale import LogScaleDistribution


def demonstrate_basic_statistics():
    """Compare approximate statistics with exact ones on a latency stream."""
    print("\n=== Basic Log-Scale Distribution Demo ===")

    dist = LogScaleDistribution()
    print(f"Base: {dist.base:.5f} (bucket width {dist.bucket_width():.2%})")

    # Simulated request latencies in milliseconds
    values = [random.lognormvariate(3, 0.8) for _ in range(100000)]
    dist.add_data(values)

    print(f"\nProcessed {dist.count()} values into {dist.get_stats()['bucket_count']} buckets")
    print(f"Memory usage: {dist.estimate_size()} bytes")

    values.sort()
    exact = {
        "mean": statistics.mean(values),
        "std_dev": statistics.stdev(values),
        "median": statistics.median(values),
        "p90": values[int(0.9 * len(values)) - 1],
        "p99": values[int(0.99 * len(values)) - 1],
    }
    approx = {
        "mean": dist.mean(),
        "std_dev": dist.std_dev(),
        "median": dist.median(),
        "p90": dist.percentile(90),
        "p99": dist.percentile(99),
    }

    print(f"\n{'Statistic':<10} {'Exact':>10} {'Approx':>10} {'Error':>8}")
    for name, value in exact.items():
        error = abs(approx[name] - value) / value
        print(f"{name:<10} {value:>10.2f} {approx[name]:>10.2f} {error:>8.2%}")

    print(f"\nSkewness: {dist.skewness():.3f}")
    print(f"Kurtosis: {dist.kurtosis():.3f}")
    print(f"Mode: {dist.mode():.2f}")
    print(f"10% trimmed mean: {dist.trimmed_mean(0.1):.2f}")


def demonstrate_histogram():
    """Show a text histogram built from the buckets."""
    print("\n=== Histogram Demo ===")

    dist = LogScaleDistribution(zero_threshold=0.001)
    dist.add_data(random.gauss(0, 10) for _ in range(20000))

    low, high = dist.find_boundaries()
    print(f"Range: [{low:.2f}, {high:.2f}]")

    bins = dist.histogram(10)
    scale = 60 / max(b.count for b in bins)
    for b in bins:
        bar = "#" * int(b.count * scale)
        print(f"  <= {b.right:>8.2f} {b.count:>9.1f} {bar}")

    below_zero = dist.sum_of(lambda x: 1, None, 0)
    print(f"\nObservations below zero: {below_zero:.0f} of {dist.count()}")


def demonstrate_merge_and_serialization():
    """Summarize two streams separately, merge them and round-trip through JSON."""
    print("\n=== Merge and Serialization Demo ===")

    left = LogScaleDistribution.create_from_precision(0.01)
    right = LogScaleDistribution.create_from_precision(0.01)
    left.add_data(random.expovariate(0.5) for _ in range(5000))
    right.add_data(random.expovariate(0.1) for _ in range(5000))

    merged = left.merge(right)
    print(f"Base for 1% precision: {merged.base:.5f}")
    print(f"Merged count: {merged.count()}")
    print(f"Merged median: {merged.median():.3f}")

    payload = merged.serialize(format="json")
    restored = LogScaleDistribution.deserialize(payload, format="json")
    print(f"Serialized size: {len(payload)} characters")
    print(f"Restored median: {restored.median():.3f}")
    print(f"Identical buckets: {restored.get_data_hash() == merged.get_data_hash()}")


if __name__ == "__main__":
    random.seed(42)
    demonstrate_basic_statistics()
    demonstrate_histogram()
    demonstrate_merge_and_serialization()

"""
Setup script for tiny-logscale.
"""

from setuptools import setup, find_packages

setup(
    name="tiny-logscale",
    version="0.1.0",
    description="Approximate streaming statistics with logarithmic buckets",
    packages=find_packages(include=["tiny_logscale", "tiny_logscale.*"]),
    package_data={"tiny_logscale": ["py.typed"]},
    python_requires=">=3.8",
)

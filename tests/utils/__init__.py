"""
Test utilities for Fanout.

This package contains shared testing utilities to help write
better, more maintainable tests.
"""

from .memory_utils import assert_cleaned_up, count_instances, run_concurrently

__all__ = [
    "assert_cleaned_up",
    "count_instances",
    "run_concurrently",
]

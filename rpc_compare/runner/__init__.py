"""
Comparison runner.

This package provides:
- Method-name filtering
- The bounded concurrent executor
- Result aggregation and reporting
- The end-to-end comparison flow
"""

from .executor import BoundedExecutor
from .filter_list import FilterList
from .orchestrator import build_catalogue, compare_apis, plan_comparison
from .report import ResultAggregator

__all__ = [
    'BoundedExecutor',
    'FilterList',
    'build_catalogue',
    'compare_apis',
    'plan_comparison',
    'ResultAggregator',
]

"""
Shared utilities for the rebalance reconciler.

This package contains common functionality used by the reconciler service and its launcher:
- logging_config: consistent logging setup across components
"""

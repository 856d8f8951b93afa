"""
Expense Tracker - Source Package

A personal expense-tracking client that keeps a small, in-memory view of
records stored in a remote record-keeping service.

DESIGN PRINCIPLES:
1. The remote service is the source of truth
2. Raw records are normalized once, at the boundary
3. Filtering and aggregation are pure functions over canonical records
4. Only the reconciliation controller mutates application state
5. Failures are surfaced, never fatal
"""

__version__ = "1.0.0"
__author__ = "Expense Tracker Team"

"""
Finance Tracker - Source Package

A personal income/expense tracker: record transactions, keep them in a
local persistence slot, and see totals, breakdowns and trends.

DESIGN PRINCIPLES:
1. Validate before anything is saved
2. Storage never diverges from what the user sees
3. Aggregates are pure functions of the transaction list
4. Storage layer is swappable
"""

__version__ = "1.0.0"

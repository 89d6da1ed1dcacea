"""
Finance Tracker - Source Package

Personal income/expense tracking for a single authenticated user:
record, list, filter, edit and delete payments, and view totals.

DESIGN PRINCIPLES:
1. One JSON collection per user, loaded and saved whole
2. Caller identity only ever comes from the auth context
3. Fail visibly, but never leak internals to the client
4. Every change is auditable
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "Finance Tracker Team"

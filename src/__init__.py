"""
Money Keeper - Source Package

A small personal finance tracker: accounts, manual deposits and
withdrawals, recurring automation rules that catch up on startup, and
an optional AI written analysis.

DESIGN PRINCIPLES:
1. State is an immutable snapshot; every change produces a new one
2. Automation is idempotent: a day is processed at most once per rule
3. Old persisted snapshots are migrated, never rejected
4. Persistence failures never lose the in-memory state
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "Money Keeper Team"

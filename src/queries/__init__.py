"""Ledger query package."""

from src.queries.reports import LedgerQueries

__all__ = ["LedgerQueries"]

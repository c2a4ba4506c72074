"""Persistence layer."""

from .error_ledger import ErrorLedger

__all__ = ["ErrorLedger"]

"""Rentarium: rent and utility billing ledger for rental properties."""

__version__ = "0.1.0"

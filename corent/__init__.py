"""Rental ledger core: recurring obligations, alerts and automatic transactions."""

__version__ = "0.1.0"

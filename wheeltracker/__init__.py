"""Options wheel tracking: ledger, lots, cycles, reinvestment and allocation."""

__version__ = "1.0.0"

"""Shared utility functions."""

from .date_utils import to_utc_naive, utcnow

__all__ = ["to_utc_naive", "utcnow"]

"""HTTP server for the wheel tracker: database, services and REST API."""

from wheeltracker import __version__

__all__ = ["__version__"]

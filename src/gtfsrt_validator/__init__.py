"""GTFS-realtime feed validator."""

__version__ = "0.1.0"

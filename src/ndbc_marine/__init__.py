"""NDBC buoy observation normalization and caching service."""

__version__ = "0.1.0"

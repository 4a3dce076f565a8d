"""Bi-weekly payment tracking dashboard."""

__version__ = "1.0.0"

"""Batch translation pipeline for extracted UI strings."""

__version__ = "0.1.0"

"""Proprio motion metrics backend."""

__version__ = "1.0.0"

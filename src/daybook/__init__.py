"""Daybook - simple time tracking for clients and projects."""

__version__ = "0.1.0"

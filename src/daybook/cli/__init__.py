"""Command-line interface for Daybook."""

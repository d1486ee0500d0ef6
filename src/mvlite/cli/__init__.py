"""Command-line interface for mvlite."""

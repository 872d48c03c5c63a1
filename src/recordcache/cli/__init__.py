"""Command-line interface for the record cache."""

"""Command-line interface for HI Gateway."""

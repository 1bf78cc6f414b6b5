"""Command-line entry points for the documentation tools."""

"""Command line interface for tableseed."""

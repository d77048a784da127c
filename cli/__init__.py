"""Command-line entry points of the blob simulator."""

"""Pytest plugins of the blob simulator."""

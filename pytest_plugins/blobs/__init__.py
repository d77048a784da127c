"""Pytest plugin running the Engine API blob scenarios against hive clients."""

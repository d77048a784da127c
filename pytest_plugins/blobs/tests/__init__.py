"""Tests of the blobs plugin."""

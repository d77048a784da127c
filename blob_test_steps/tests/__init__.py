"""Tests for the `blob_test_steps` package."""

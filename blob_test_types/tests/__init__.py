"""Tests for the `blob_test_types` package."""

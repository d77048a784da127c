"""Tests for the `blob_test_base_types` package."""

"""Tests for the `blob_test_forks` package."""

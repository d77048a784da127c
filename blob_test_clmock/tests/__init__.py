"""Tests for the `blob_test_clmock` package."""

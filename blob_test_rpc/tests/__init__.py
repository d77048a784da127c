"""Tests for the `blob_test_rpc` package."""

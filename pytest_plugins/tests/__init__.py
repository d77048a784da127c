"""Tests of the hive and concurrency plugins."""

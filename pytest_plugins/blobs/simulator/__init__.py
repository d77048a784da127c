"""The blob simulator test module."""

"""Scenarios of the cancun fork."""

"""Engine API blob scenarios."""

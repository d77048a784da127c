"""Listings of the forks, in chronological order."""

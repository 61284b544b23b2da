"""Archlint - architecture convention linter for Go module trees."""

__version__ = "0.3.0"

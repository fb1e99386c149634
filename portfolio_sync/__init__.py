"""Sync a GitHub account's repositories into the portfolio projects table."""

__version__ = "0.1.0"

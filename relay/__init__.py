"""Credential relay between the mobile app and GitHub's App / OAuth APIs."""

__version__ = "0.1.0"

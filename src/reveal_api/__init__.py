"""Reveal: anonymous posting with votes, comments and flags."""

__version__ = "0.1.0"

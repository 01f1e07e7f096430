"""Hausee agent-matching intake wizard."""

__version__ = "0.1.0"

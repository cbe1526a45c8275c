"""Tagging policy validation and tag compliance engine."""

__version__ = "0.1.0"

"""Credential storage and multi-provider AI code review."""

__version__ = "0.1.0"

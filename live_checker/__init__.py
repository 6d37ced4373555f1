"""Batch liveness checker for numeric account identifiers."""

__version__ = "0.1.0"

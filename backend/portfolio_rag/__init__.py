"""Retrieval-augmented generation over portfolio content."""

__version__ = "0.1.0"

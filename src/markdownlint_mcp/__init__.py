"""Markdown lint and fix server."""
__version__ = "1.0.0"

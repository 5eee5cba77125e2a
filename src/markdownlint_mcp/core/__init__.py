"""Core modules for Markdown linting."""

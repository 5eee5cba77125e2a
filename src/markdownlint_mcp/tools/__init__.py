"""markdownlint MCP tools."""
from . import lint

__all__ = ["lint"]

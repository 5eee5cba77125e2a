"""markdownlint MCP resources."""

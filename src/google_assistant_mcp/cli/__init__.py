"""Command-line interface for google-assistant-mcp."""

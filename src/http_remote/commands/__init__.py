"""CLI command groups for http-remote."""

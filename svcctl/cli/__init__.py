"""Command-line interface for svcctl."""

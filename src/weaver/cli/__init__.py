"""Command-line interface for Weaver."""

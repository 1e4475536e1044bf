"""Weaver CLI commands."""

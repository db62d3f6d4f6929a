"""Mend CLI commands."""

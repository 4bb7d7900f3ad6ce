"""Command line interface for secret-sync."""

"""Command line interface for the pharmacy portal."""

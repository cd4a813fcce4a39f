"""Command line interface for actionreg."""

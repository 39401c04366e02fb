"""Command line interface for pnlkit."""

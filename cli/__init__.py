"""Command line interface for AnnealNet."""

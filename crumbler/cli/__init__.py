"""Command line interface and output formats."""

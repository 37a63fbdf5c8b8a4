"""
Command-line interface for genmedia.
"""

from genmedia.cli.commands import cli, main

__all__ = ["cli", "main"]

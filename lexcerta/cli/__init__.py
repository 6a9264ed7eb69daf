"""
Command-line interface for LexCerta.
"""

from lexcerta.cli.main import cli

__all__ = ["cli"]

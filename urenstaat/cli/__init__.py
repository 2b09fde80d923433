"""Command line layer - click commands and terminal tables"""

from .commands import cli

__all__ = ["cli"]

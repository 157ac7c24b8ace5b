"""Command line interface for hbackup."""

from .dispatcher import main

__all__ = ["main"]

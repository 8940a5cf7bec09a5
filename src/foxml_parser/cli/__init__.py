"""Command-line interface for foxml-parse."""

from .main import main

__all__ = ["main"]

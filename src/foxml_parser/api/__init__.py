"""Public parsing API."""

from .parser import FoxmlParser, get_default_parser, parse_file

__all__ = [
    "FoxmlParser",
    "get_default_parser",
    "parse_file",
]

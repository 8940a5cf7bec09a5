"""Tree building for FOXML documents.

Key Components:
    ElementStackMachine: Builds the Digital Object Model from parse events
"""

from .builder import ElementStackMachine

__all__ = [
    "ElementStackMachine",
]

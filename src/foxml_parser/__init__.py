"""FOXML Parser.

Streaming parser for Fedora 3 FOXML export files. Documents of any size are
read in bounded chunks and pushed through an incremental XML engine into a
typed Digital Object Model; results are cached per path.

Progressive API Disclosure:
- Level 1: Simple function - parse_file()
- Level 2: Configured parser - FoxmlParser with ParserConfig and ResultCache
- Level 3: Building blocks - ElementStackMachine, ExpatEventSource, ElementRegistry
"""

__version__ = "0.1.0"
__author__ = "FOXML Parser Team"

from .api import FoxmlParser, parse_file
from .cache import FileCacheBackend, MemoryCacheBackend, ResultCache
from .errors import (
    FinalizedNodeError,
    FoxmlParserError,
    ParseError,
    StructuralError,
    StructuralViolation,
)
from .model import (
    ContentMetadata,
    Datastream,
    DatastreamVersion,
    DigitalObject,
    ElementNode,
    ElementRegistry,
    GenericElement,
    ObjectProperties,
)
from .shared.config import ParserConfig
from .stream import corrected_offset

__all__ = [
    # Version and metadata
    "__author__",
    "__version__",

    # Level 1 and 2: parsing entry points
    "parse_file",
    "FoxmlParser",
    "ParserConfig",

    # Caching
    "ResultCache",
    "MemoryCacheBackend",
    "FileCacheBackend",

    # Object model
    "DigitalObject",
    "ObjectProperties",
    "Datastream",
    "DatastreamVersion",
    "ContentMetadata",
    "GenericElement",
    "ElementNode",
    "ElementRegistry",

    # Errors
    "FoxmlParserError",
    "ParseError",
    "StructuralError",
    "StructuralViolation",
    "FinalizedNodeError",

    # Diagnostics
    "corrected_offset",
]

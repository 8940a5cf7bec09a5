"""Digital Object Model for FOXML documents.

Key Components:
    DigitalObject: Root node with properties and ordered datastreams
    Datastream / DatastreamVersion: Versioned content streams
    ContentMetadata: Opaque inline XML payload
    GenericElement: Fallback for unmapped tags
    ElementRegistry: Tag to node-constructor table
"""

from .elements import (
    BinaryContent,
    ContentDigest,
    ContentLocation,
    ContentMetadata,
    Datastream,
    DatastreamVersion,
    DigitalObject,
    ElementNode,
    GenericElement,
    ObjectProperties,
    ObjectProperty,
    foxml_tag,
    parse_foxml_datetime,
)
from .registry import ElementRegistry, NodeFactory, default_registry

__all__ = [
    "BinaryContent",
    "ContentDigest",
    "ContentLocation",
    "ContentMetadata",
    "Datastream",
    "DatastreamVersion",
    "DigitalObject",
    "ElementNode",
    "GenericElement",
    "ObjectProperties",
    "ObjectProperty",
    "foxml_tag",
    "parse_foxml_datetime",
    "ElementRegistry",
    "NodeFactory",
    "default_registry",
]

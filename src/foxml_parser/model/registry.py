"""Tag to node-constructor registration table.

The tree builder never subclasses or inspects node types to decide what to
build; it asks the registry. Supporting a new element type means registering
one more factory.
"""

from typing import Callable, Dict, Iterable, Mapping, Optional, Type

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
)

NodeFactory = Callable[[str, Dict[str, str]], ElementNode]

DEFAULT_NODE_TYPES = (
    DigitalObject,
    ObjectProperties,
    ObjectProperty,
    Datastream,
    DatastreamVersion,
    ContentDigest,
    ContentLocation,
    BinaryContent,
    ContentMetadata,
)


def _factory_for(node_type: Type[ElementNode]) -> NodeFactory:
    def build(tag: str, attributes: Dict[str, str]) -> ElementNode:
        return node_type(tag, attributes)
    return build


class ElementRegistry:
    """Maps qualified tags to node factories, falling back to ``GenericElement``."""

    def __init__(
        self,
        factories: Optional[Mapping[str, NodeFactory]] = None,
        fallback: NodeFactory = GenericElement,
    ) -> None:
        self._factories: Dict[str, NodeFactory] = dict(factories or {})
        self._fallback = fallback

    def register(self, tag: str, factory: NodeFactory) -> None:
        """Register (or replace) the factory for ``tag``."""
        if not tag:
            raise ValueError("Registered tag cannot be empty")
        self._factories[tag] = factory

    def register_types(self, node_types: Iterable[Type[ElementNode]]) -> None:
        """Register node classes under their ``TAG``."""
        for node_type in node_types:
            if not node_type.TAG:
                raise ValueError(f"{node_type.__name__} does not declare a TAG")
            self.register(node_type.TAG, _factory_for(node_type))

    def is_registered(self, tag: str) -> bool:
        return tag in self._factories

    def create(self, tag: str, attributes: Dict[str, str]) -> ElementNode:
        """Build the node for ``tag``; unmapped tags get the fallback node."""
        factory = self._factories.get(tag, self._fallback)
        return factory(tag, attributes)

    def copy(self) -> "ElementRegistry":
        return ElementRegistry(self._factories, self._fallback)

    def __contains__(self, tag: object) -> bool:
        return tag in self._factories

    def __len__(self) -> int:
        return len(self._factories)


def default_registry() -> ElementRegistry:
    """Registry covering the FOXML 1.1 element vocabulary."""
    registry = ElementRegistry()
    registry.register_types(DEFAULT_NODE_TYPES)
    return registry

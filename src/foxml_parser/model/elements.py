"""Digital Object Model for parsed FOXML documents.

Each FOXML element the parser understands is represented by an
``ElementNode`` subclass. Nodes are built incrementally by the tree builder:
text and children are appended while the node sits on top of the build
stack, then ``finalize()`` converts accumulated text and attributes into
typed values and freezes the node. A finalized node is owned by its parent
and rejects any further mutation.

Unknown elements, including everything inside ``foxml:xmlContent``, become
``GenericElement`` instances so that unexpected extensions never abort a
parse. Payloads are kept verbatim and are not interpreted here.
"""

import base64
import re
from datetime import datetime, timezone
from types import MappingProxyType
from typing import Any, ClassVar, Dict, Iterator, List, Mapping, Optional, Tuple

from foxml_parser.errors import FinalizedNodeError
from foxml_parser.shared.config import FOXML_NAMESPACE
from foxml_parser.shared.logging import get_logger

_logger = get_logger(__name__, component="model")

MODEL_NAMESPACE = "info:fedora/fedora-system:def/model#"
VIEW_NAMESPACE = "info:fedora/fedora-system:def/view#"

PROPERTY_STATE = MODEL_NAMESPACE + "state"
PROPERTY_LABEL = MODEL_NAMESPACE + "label"
PROPERTY_OWNER = MODEL_NAMESPACE + "ownerId"
PROPERTY_CREATED = MODEL_NAMESPACE + "createdDate"
PROPERTY_MODIFIED = VIEW_NAMESPACE + "lastModifiedDate"

_FRACTION = re.compile(r"\.(\d+)")


def foxml_tag(local_name: str) -> str:
    """Qualified (Clark notation) tag for an element in the FOXML namespace."""
    return "{%s}%s" % (FOXML_NAMESPACE, local_name)


def parse_foxml_datetime(value: Optional[str]) -> Optional[datetime]:
    """Parse an ISO-8601 timestamp as written by Fedora 3.

    Fedora writes UTC timestamps with a trailing ``Z`` and a variable number
    of fractional digits. Returns ``None`` for empty or unparseable values.
    """
    if not value:
        return None
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    # fromisoformat only accepts 3 or 6 fractional digits on older interpreters
    text = _FRACTION.sub(lambda m: "." + m.group(1)[:6].ljust(6, "0"), text, count=1)
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        _logger.debug("Unparseable timestamp kept as text", extra={"value": value})
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _parse_bool(value: Optional[str], default: bool) -> bool:
    if value is None:
        return default
    return value.strip().lower() == "true"


def _parse_int(value: Optional[str]) -> Optional[int]:
    if value is None or not value.strip():
        return None
    try:
        return int(value)
    except ValueError:
        return None


class ElementNode:
    """Base node: qualified tag, attributes, accumulated text and ordered children."""

    TAG: ClassVar[Optional[str]] = None
    LABEL: ClassVar[Optional[str]] = None

    def __init__(self, tag: str, attributes: Optional[Dict[str, str]] = None) -> None:
        if not tag:
            raise ValueError("Element tag cannot be empty")
        self.tag = tag
        self.attributes: Mapping[str, str] = dict(attributes or {})
        self.text = ""
        self.children: Any = []
        self._text_parts: List[str] = []
        self._finalized = False

    def __setattr__(self, name: str, value: Any) -> None:
        if self.__dict__.get("_finalized", False):
            raise FinalizedNodeError(f"Cannot set {name!r} on finalized <{self.tag}>")
        object.__setattr__(self, name, value)

    def __getstate__(self) -> Dict[str, Any]:
        """Pickle state; read-only mappings travel as plain dicts."""
        state = dict(self.__dict__)
        frozen = [name for name, value in state.items() if isinstance(value, MappingProxyType)]
        for name in frozen:
            state[name] = dict(state[name])
        state["_frozen_mappings"] = frozen
        return state

    def __setstate__(self, state: Dict[str, Any]) -> None:
        for name in state.pop("_frozen_mappings", ()):
            state[name] = MappingProxyType(state[name])
        self.__dict__.update(state)

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.local_name}>"

    @property
    def label(self) -> str:
        """Label under which this node attaches to its parent."""
        return self.LABEL or self.tag

    @property
    def local_name(self) -> str:
        """Tag name without its namespace."""
        if self.tag.startswith("{"):
            return self.tag.split("}", 1)[1]
        return self.tag

    @property
    def namespace(self) -> Optional[str]:
        if self.tag.startswith("{"):
            return self.tag[1:].split("}", 1)[0]
        return None

    @property
    def is_finalized(self) -> bool:
        return self._finalized

    def get(self, name: str, default: Optional[str] = None) -> Optional[str]:
        """Get an attribute value."""
        return self.attributes.get(name, default)

    def _ensure_mutable(self) -> None:
        if self._finalized:
            raise FinalizedNodeError(f"<{self.tag}> is finalized and can no longer change")

    def append_text(self, text: str) -> None:
        """Append a character data segment; segments are concatenated on finalize."""
        self._ensure_mutable()
        self._text_parts.append(text)

    def append_child(self, label: str, child: "ElementNode") -> None:
        """Attach a finalized child under ``label``."""
        self._ensure_mutable()
        if not isinstance(child, ElementNode):
            raise TypeError("Child must be an ElementNode instance")
        if not child.is_finalized:
            raise ValueError(f"Child <{child.tag}> must be finalized before attaching")
        self.children.append(child)
        self._attach(label, child)

    def _attach(self, label: str, child: "ElementNode") -> None:
        """Hook for variants that expose well-known children as attributes."""

    def finalize(self, discard_whitespace: bool = True) -> None:
        """Convert accumulated state to typed values and freeze the node."""
        self._ensure_mutable()
        text = "".join(self._text_parts)
        if discard_whitespace and not text.strip():
            text = ""
        self.text = text
        self._text_parts = []
        self._finalize()
        self.attributes = MappingProxyType(dict(self.attributes))
        self.children = tuple(self.children)
        self._finalized = True

    def _finalize(self) -> None:
        """Hook for variant-specific conversion of text and attributes."""

    def find_children(self, tag: str) -> List["ElementNode"]:
        """Find all direct children with matching tag."""
        return [child for child in self.children if child.tag == tag]

    def find(self, tag: str) -> Optional["ElementNode"]:
        """Find first descendant with matching tag, depth-first in document order."""
        for node in self.iter():
            if node is not self and node.tag == tag:
                return node
        return None

    def iter(self) -> Iterator["ElementNode"]:
        """Iterate over this node and all descendants in document order."""
        stack = [self]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children))

    def to_dict(self) -> Dict[str, Any]:
        """Structural representation used for comparisons and JSON output."""
        result: Dict[str, Any] = {"tag": self.tag, "attributes": dict(self.attributes)}
        if self.text:
            result["text"] = self.text
        if self.children:
            result["children"] = [child.to_dict() for child in self.children]
        return result


class GenericElement(ElementNode):
    """Fallback node for unmapped tags; attaches under its own tag."""


class ObjectProperty(ElementNode):
    """A single ``foxml:property`` NAME/VALUE pair."""

    TAG = foxml_tag("property")
    LABEL = "property"

    @property
    def name(self) -> Optional[str]:
        return self.attributes.get("NAME")

    @property
    def value(self) -> Optional[str]:
        return self.attributes.get("VALUE")


class ObjectProperties(ElementNode):
    """The ``foxml:objectProperties`` block of a digital object."""

    TAG = foxml_tag("objectProperties")
    LABEL = "properties"

    def __init__(self, tag: str, attributes: Optional[Dict[str, str]] = None) -> None:
        super().__init__(tag, attributes)
        self.values: Mapping[str, str] = {}
        self.created_date: Optional[datetime] = None
        self.last_modified_date: Optional[datetime] = None

    def _attach(self, label: str, child: ElementNode) -> None:
        if isinstance(child, ObjectProperty) and child.name:
            self.values[child.name] = child.value or ""  # type: ignore[index]

    def _finalize(self) -> None:
        self.created_date = parse_foxml_datetime(self.values.get(PROPERTY_CREATED))
        self.last_modified_date = parse_foxml_datetime(self.values.get(PROPERTY_MODIFIED))
        self.values = MappingProxyType(dict(self.values))

    def get_property(self, name: str, default: Optional[str] = None) -> Optional[str]:
        """Look up a property by its full URI name."""
        return self.values.get(name, default)

    @property
    def state(self) -> Optional[str]:
        return self.values.get(PROPERTY_STATE)

    @property
    def object_label(self) -> Optional[str]:
        return self.values.get(PROPERTY_LABEL)

    @property
    def owner_id(self) -> Optional[str]:
        return self.values.get(PROPERTY_OWNER)


class ContentDigest(ElementNode):
    TAG = foxml_tag("contentDigest")
    LABEL = "content_digest"

    @property
    def type(self) -> Optional[str]:
        return self.attributes.get("TYPE")

    @property
    def digest(self) -> Optional[str]:
        return self.attributes.get("DIGEST")


class ContentLocation(ElementNode):
    TAG = foxml_tag("contentLocation")
    LABEL = "content_location"

    @property
    def type(self) -> Optional[str]:
        return self.attributes.get("TYPE")

    @property
    def ref(self) -> Optional[str]:
        return self.attributes.get("REF")


class BinaryContent(ElementNode):
    """Inline base64 payload of a managed datastream version."""

    TAG = foxml_tag("binaryContent")
    LABEL = "binary_content"

    def _finalize(self) -> None:
        # Base64 is wrapped across lines; the line breaks carry no data.
        self.text = "".join(self.text.split())

    def decode(self) -> bytes:
        """Decode the base64 payload."""
        return base64.b64decode(self.text)


class ContentMetadata(ElementNode):
    """Opaque inline XML payload (``foxml:xmlContent``).

    The payload is captured as ``GenericElement`` sub-structure plus verbatim
    text and is not interpreted.
    """

    TAG = foxml_tag("xmlContent")
    LABEL = "xml_content"

    @property
    def root(self) -> Optional[ElementNode]:
        """The payload's document element, if any."""
        return self.children[0] if self.children else None


class DatastreamVersion(ElementNode):
    """One ``foxml:datastreamVersion`` of a datastream."""

    TAG = foxml_tag("datastreamVersion")
    LABEL = "datastream_version"

    def __init__(self, tag: str, attributes: Optional[Dict[str, str]] = None) -> None:
        super().__init__(tag, attributes)
        self.content_digest: Optional[ContentDigest] = None
        self.content_location: Optional[ContentLocation] = None
        self.binary_content: Optional[BinaryContent] = None
        self.xml_content: Optional[ContentMetadata] = None
        self.created: Optional[datetime] = None
        self.size: Optional[int] = None
        self.alt_ids: Tuple[str, ...] = ()

    def _attach(self, label: str, child: ElementNode) -> None:
        if label == ContentDigest.LABEL:
            self.content_digest = child  # type: ignore[assignment]
        elif label == ContentLocation.LABEL:
            self.content_location = child  # type: ignore[assignment]
        elif label == BinaryContent.LABEL:
            self.binary_content = child  # type: ignore[assignment]
        elif label == ContentMetadata.LABEL:
            self.xml_content = child  # type: ignore[assignment]

    def _finalize(self) -> None:
        self.created = parse_foxml_datetime(self.attributes.get("CREATED"))
        self.size = _parse_int(self.attributes.get("SIZE"))
        self.alt_ids = tuple(self.attributes.get("ALT_IDS", "").split())

    @property
    def id(self) -> Optional[str]:
        return self.attributes.get("ID")

    @property
    def version_label(self) -> Optional[str]:
        return self.attributes.get("LABEL")

    @property
    def mimetype(self) -> Optional[str]:
        return self.attributes.get("MIMETYPE")

    @property
    def format_uri(self) -> Optional[str]:
        return self.attributes.get("FORMAT_URI")


class Datastream(ElementNode):
    """A named, versioned ``foxml:datastream``."""

    TAG = foxml_tag("datastream")
    LABEL = "datastream"

    def __init__(self, tag: str, attributes: Optional[Dict[str, str]] = None) -> None:
        super().__init__(tag, attributes)
        self.versions: Any = []
        self.versionable = True

    def _attach(self, label: str, child: ElementNode) -> None:
        if label == DatastreamVersion.LABEL:
            self.versions.append(child)

    def _finalize(self) -> None:
        self.versions = tuple(self.versions)
        self.versionable = _parse_bool(self.attributes.get("VERSIONABLE"), True)

    @property
    def id(self) -> Optional[str]:
        return self.attributes.get("ID")

    @property
    def state(self) -> Optional[str]:
        return self.attributes.get("STATE")

    @property
    def control_group(self) -> Optional[str]:
        return self.attributes.get("CONTROL_GROUP")

    @property
    def latest(self) -> Optional[DatastreamVersion]:
        """The last version in document order."""
        return self.versions[-1] if self.versions else None


class DigitalObject(ElementNode):
    """Root of a FOXML document: properties plus ordered datastreams."""

    TAG = foxml_tag("digitalObject")
    LABEL = "digital_object"

    def __init__(self, tag: str, attributes: Optional[Dict[str, str]] = None) -> None:
        super().__init__(tag, attributes)
        self.properties: Optional[ObjectProperties] = None
        self.datastreams: Any = []
        self._datastream_index: Mapping[str, Datastream] = {}

    def _attach(self, label: str, child: ElementNode) -> None:
        if label == ObjectProperties.LABEL:
            self.properties = child  # type: ignore[assignment]
        elif label == Datastream.LABEL:
            self.datastreams.append(child)
            if child.id is not None:  # type: ignore[attr-defined]
                self._datastream_index.setdefault(child.id, child)  # type: ignore[attr-defined,union-attr]

    def _finalize(self) -> None:
        self.datastreams = tuple(self.datastreams)
        self._datastream_index = MappingProxyType(dict(self._datastream_index))

    @property
    def pid(self) -> Optional[str]:
        return self.attributes.get("PID")

    @property
    def version(self) -> Optional[str]:
        return self.attributes.get("VERSION")

    @property
    def fedora_uri(self) -> Optional[str]:
        return self.attributes.get("FEDORA_URI")

    @property
    def datastream_ids(self) -> List[str]:
        return [ds.id for ds in self.datastreams if ds.id is not None]

    def datastream(self, datastream_id: str) -> Optional[Datastream]:
        """Look up a datastream by ID; the first occurrence wins."""
        return self._datastream_index.get(datastream_id)

    def __getitem__(self, datastream_id: str) -> Datastream:
        datastream = self.datastream(datastream_id)
        if datastream is None:
            raise KeyError(datastream_id)
        return datastream

    def __contains__(self, datastream_id: object) -> bool:
        return datastream_id in self._datastream_index

    def __len__(self) -> int:
        return len(self.datastreams)

    def __bool__(self) -> bool:
        return True

    def summary(self) -> Dict[str, Any]:
        """Compact description of the object for reports."""
        properties = self.properties
        return {
            "pid": self.pid,
            "label": properties.object_label if properties else None,
            "state": properties.state if properties else None,
            "owner": properties.owner_id if properties else None,
            "created": (
                properties.created_date.isoformat()
                if properties and properties.created_date else None
            ),
            "datastreams": [
                {
                    "id": ds.id,
                    "control_group": ds.control_group,
                    "state": ds.state,
                    "versions": [
                        {
                            "id": version.id,
                            "mimetype": version.mimetype,
                            "created": version.created.isoformat() if version.created else None,
                            "size": version.size,
                        }
                        for version in ds.versions
                    ],
                }
                for ds in self.datastreams
            ],
        }

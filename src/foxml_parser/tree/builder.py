"""Element stack machine building the Digital Object Model from parse events.

The machine owns every in-progress node through its slot on the build stack.
A node only receives text and children while it is the top of the stack; on
its close event it is finalized and handed to its parent, which becomes the
new top. Once the root closes the machine is complete and rejects any further
event.
"""

from typing import List, Optional

from foxml_parser.errors import StructuralError, StructuralViolation
from foxml_parser.model import DigitalObject, ElementNode, ElementRegistry, default_registry
from foxml_parser.shared.config import DIGITAL_OBJECT_TAG
from foxml_parser.shared.logging import CorrelationLogger, get_logger
from foxml_parser.stream.events import EventKind, ParseEvent


class ElementStackMachine:
    """Consumes open/text/close events and builds the object graph.

    Args:
        registry: Tag to node-constructor table; defaults to the FOXML vocabulary
        root_tag: Qualified tag the document element must carry
        discard_whitespace: Drop whitespace-only text when finalizing nodes
        logger: Optional correlation logger
    """

    def __init__(
        self,
        registry: Optional[ElementRegistry] = None,
        root_tag: str = DIGITAL_OBJECT_TAG,
        discard_whitespace: bool = True,
        logger: Optional[CorrelationLogger] = None,
    ) -> None:
        self.registry = registry if registry is not None else default_registry()
        self.root_tag = root_tag
        self.discard_whitespace = discard_whitespace
        self._logger = logger or get_logger(__name__, component="builder")
        self._stack: List[ElementNode] = []
        self._result: Optional[ElementNode] = None
        self._started = False
        self.events_processed = 0

    @property
    def depth(self) -> int:
        """Number of currently open elements."""
        return len(self._stack)

    @property
    def is_complete(self) -> bool:
        """Whether the root element has closed."""
        return self._result is not None

    @property
    def result(self) -> Optional[ElementNode]:
        """The finalized root, once the root element has closed."""
        return self._result

    def reset(self) -> None:
        """Drop all in-progress state so the machine can be reused."""
        self._stack.clear()
        self._result = None
        self._started = False
        self.events_processed = 0

    def handle(self, event: ParseEvent) -> None:
        """Route one event through the state machine.

        Raises:
            StructuralError: The event violates the document structure
        """
        if self._result is not None:
            raise StructuralError(
                f"Received {event.kind.name} event after the root element closed",
                StructuralViolation.EVENT_AFTER_ROOT,
            )
        self.events_processed += 1

        if event.kind is EventKind.OPEN:
            self._open(event.tag or "", event.attributes)
        elif event.kind is EventKind.TEXT:
            self._characters(event.text or "")
        elif event.kind is EventKind.CLOSE:
            self._close(event.tag or "")
        else:
            raise ValueError(f"Unsupported event kind: {event.kind!r}")

    def _open(self, tag: str, attributes: dict) -> None:
        if not self._started:
            if tag != self.root_tag:
                raise StructuralError(
                    f"Document element is <{tag}>, expected <{self.root_tag}>",
                    StructuralViolation.ROOT_TAG,
                )
            self._started = True

        node = self.registry.create(tag, attributes)
        self._stack.append(node)

    def _characters(self, text: str) -> None:
        if not self._stack:
            raise StructuralError(
                "Character data outside of any element",
                StructuralViolation.TEXT_OUTSIDE_ROOT,
            )
        self._stack[-1].append_text(text)

    def _close(self, tag: str) -> None:
        if not self._stack:
            raise StructuralError(
                f"Close tag </{tag}> with no open element",
                StructuralViolation.TAG_MISMATCH,
            )
        top = self._stack[-1]
        if top.tag != tag:
            raise StructuralError(
                f"Close tag </{tag}> does not match open tag <{top.tag}>",
                StructuralViolation.TAG_MISMATCH,
            )

        node = self._stack.pop()
        node.finalize(self.discard_whitespace)

        if self._stack:
            self._stack[-1].append_child(node.label, node)
            return

        self._result = node
        if isinstance(node, DigitalObject):
            self._logger.debug(
                "Root element closed",
                extra={"pid": node.pid, "datastreams": len(node.datastreams)},
            )

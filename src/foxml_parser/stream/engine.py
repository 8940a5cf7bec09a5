"""Incremental XML event engine adapter.

Wraps an expat push parser: bytes are fed chunk by chunk, and every start
tag, end tag and character data segment is converted into a ``ParseEvent``
and handed synchronously to a sink before the next chunk is read. Engine
errors and structural errors raised by the sink are reported as
``ParseError``/``StructuralError`` carrying a corrected absolute byte offset.
"""

from typing import Callable, Dict, Optional
from xml.parsers import expat

from foxml_parser.errors import ParseError, StructuralError
from foxml_parser.shared.logging import CorrelationLogger, get_logger

from .events import ParseEvent
from .offsets import corrected_offset

NAMESPACE_SEPARATOR = " "

EventSink = Callable[[ParseEvent], None]
PositionSource = Callable[[], int]


def qualify(name: str) -> str:
    """Convert expat's ``namespace<sep>local`` naming to Clark notation."""
    if NAMESPACE_SEPARATOR in name:
        namespace, local = name.rsplit(NAMESPACE_SEPARATOR, 1)
        return "{%s}%s" % (namespace, local)
    return name


class ExpatEventSource:
    """Namespace-aware, case-sensitive push parser forwarding events to a sink.

    Args:
        sink: Callable receiving each ``ParseEvent``
        position: Callable returning the reader's current file position
        text_buffer_size: Size of expat's character data buffer
        target: Document path, used to label errors
        logger: Optional correlation logger
    """

    def __init__(
        self,
        sink: EventSink,
        position: Optional[PositionSource] = None,
        text_buffer_size: int = 65536,
        target: Optional[str] = None,
        logger: Optional[CorrelationLogger] = None,
    ) -> None:
        self._sink = sink
        self._position = position or (lambda: 0)
        self.target = target
        self._logger = logger or get_logger(__name__, component="engine")
        self._parser: Optional[expat.XMLParserType] = self._create_parser(text_buffer_size)

    def _create_parser(self, text_buffer_size: int) -> "expat.XMLParserType":
        parser = expat.ParserCreate(namespace_separator=NAMESPACE_SEPARATOR)
        parser.buffer_text = True
        parser.buffer_size = text_buffer_size
        parser.ordered_attributes = False
        parser.StartElementHandler = self._on_start
        parser.EndElementHandler = self._on_end
        parser.CharacterDataHandler = self._on_text
        return parser

    @property
    def closed(self) -> bool:
        return self._parser is None

    def _require_parser(self) -> "expat.XMLParserType":
        if self._parser is None:
            raise ValueError("Event source is closed")
        return self._parser

    def current_offset(self) -> int:
        """Corrected absolute offset of the event being processed."""
        parser = self._require_parser()
        return corrected_offset(parser.CurrentByteIndex, self._position())

    def feed(self, data: bytes, final: bool = False) -> None:
        """Push one chunk into the engine.

        Raises:
            ParseError: The input is not well-formed XML
            StructuralError: The sink rejected an event
        """
        parser = self._require_parser()
        try:
            parser.Parse(data, final)
        except expat.ExpatError as exc:
            offset = corrected_offset(parser.ErrorByteIndex, self._position())
            message = expat.ErrorString(exc.code)
            self._logger.debug(
                "Engine rejected input",
                extra={"code": exc.code, "line": exc.lineno, "column": exc.offset},
            )
            raise ParseError(
                f"Malformed XML at line {exc.lineno}, column {exc.offset}: {message}",
                code=exc.code,
                offset=offset,
                target=self.target,
            ) from exc

    def close(self) -> None:
        """Release the engine; handlers hold a reference back to this object."""
        self._parser = None

    def __enter__(self) -> "ExpatEventSource":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def _dispatch(self, event: ParseEvent) -> None:
        try:
            self._sink(event)
        except StructuralError as exc:
            if exc.offset is None:
                exc.offset = self.current_offset()
            if exc.target is None:
                exc.target = self.target
            raise

    def _on_start(self, name: str, attributes: Dict[str, str]) -> None:
        qualified = {qualify(key): value for key, value in attributes.items()}
        self._dispatch(ParseEvent.open(qualify(name), qualified))

    def _on_end(self, name: str) -> None:
        self._dispatch(ParseEvent.close(qualify(name)))

    def _on_text(self, data: str) -> None:
        self._dispatch(ParseEvent.characters(data))

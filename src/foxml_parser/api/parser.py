"""Top-level FOXML parse operation.

``FoxmlParser.parse`` checks the result cache, streams the file through the
event engine into the element stack machine, caches the finished object
graph and returns it. The file handle, the engine and the build stack are
released on every exit path; a failed parse never touches the cache.
"""

import logging
import os
from typing import Optional, Union, cast

from foxml_parser.cache import ResultCache
from foxml_parser.errors import ParseError, StructuralError, StructuralViolation
from foxml_parser.model import DigitalObject, ElementRegistry, default_registry
from foxml_parser.shared.config import ParserConfig
from foxml_parser.shared.logging import get_logger
from foxml_parser.shared.result import ParseMetrics, current_rss_bytes
from foxml_parser.stream import ChunkedReader, ExpatEventSource
from foxml_parser.tree import ElementStackMachine

Target = Union[str, "os.PathLike[str]"]


class FoxmlParser:
    """Streaming FOXML parser with result caching.

    Args:
        cache: Result cache; built from ``config.cache`` when omitted. Pass a
            cache explicitly to share it between parser instances.
        config: Parser configuration, defaults to ``ParserConfig()``
        registry: Tag to node-constructor table, defaults to the FOXML vocabulary

    Examples:
        >>> parser = FoxmlParser()
        >>> obj = parser.parse("/exports/demo_1.xml")
        >>> obj.pid
        'demo:1'
        >>> [ds.id for ds in obj.datastreams]
        ['DC', 'RELS-EXT', 'OBJ']
    """

    def __init__(
        self,
        cache: Optional[ResultCache] = None,
        config: Optional[ParserConfig] = None,
        registry: Optional[ElementRegistry] = None,
    ) -> None:
        self.config = config or ParserConfig()
        if cache is None and self.config.cache.enabled:
            cache = ResultCache.from_config(self.config.cache)
        self.cache = cache if self.config.cache.enabled else None
        self.registry = registry if registry is not None else default_registry()
        self.last_metrics: Optional[ParseMetrics] = None
        self._logger = get_logger(__name__, self.config.correlation_id, "parser")

    def parse(self, target: Target) -> DigitalObject:
        """Parse the FOXML document at ``target``.

        Args:
            target: Path of the document; the absolute path is the cache key

        Returns:
            The finalized ``DigitalObject`` root

        Raises:
            OSError: The file cannot be opened or read
            ParseError: The document is malformed; carries the engine error
                code and the corrected byte offset
            StructuralError: The document violates the FOXML structure
        """
        path = os.path.abspath(os.fspath(target))
        metrics = ParseMetrics(target=path)
        self.last_metrics = metrics

        if self.cache is not None:
            cached = self.cache.get(path)
            if cached is not None:
                metrics.cache_hit = True
                metrics.finish()
                self._logger.info("Serving parse result from cache", extra={"target": path})
                return cast(DigitalObject, cached)

        root = self._parse_file(path, metrics)

        if self.cache is not None:
            self.cache.set(path, root)
        self._logger.info(
            "Parsed FOXML document",
            extra={
                "pid": root.get("PID"),
                "root": root.tag,
                **metrics.to_dict(),
            },
        )
        return root

    def _parse_file(self, path: str, metrics: ParseMetrics) -> DigitalObject:
        stream_config = self.config.stream
        track_memory = self.config.track_memory
        if track_memory:
            metrics.memory_start_bytes = current_rss_bytes()

        machine = ElementStackMachine(
            registry=self.registry,
            root_tag=self.config.root_tag,
            discard_whitespace=stream_config.discard_whitespace,
            logger=self._logger.child("builder"),
        )
        reader = ChunkedReader(path, stream_config.chunk_size)
        source: Optional[ExpatEventSource] = None

        self._logger.debug(
            "Starting parse",
            extra={"target": path, "chunk_size": stream_config.chunk_size},
        )
        try:
            reader.open()
            source = ExpatEventSource(
                machine.handle,
                position=lambda: reader.position,
                text_buffer_size=stream_config.text_buffer_size,
                target=path,
                logger=self._logger.child("engine"),
            )
            trace_chunks = self._logger.is_enabled_for(logging.DEBUG)
            for chunk, is_final in reader:
                source.feed(chunk, is_final)
                if trace_chunks:
                    self._logger.debug(
                        "Chunk consumed",
                        extra={
                            "position": reader.position,
                            "events": machine.events_processed,
                            "depth": machine.depth,
                        },
                    )

            root = machine.result
            if root is None:
                raise StructuralError(
                    "Input ended before the document element closed",
                    StructuralViolation.INCOMPLETE_DOCUMENT,
                    offset=reader.position,
                    target=path,
                )
            return cast(DigitalObject, root)
        except OSError as exc:
            self._logger.error(
                "Unable to read FOXML document",
                extra={"target": path, "error": str(exc)},
            )
            raise
        except ParseError as exc:
            self._logger.error(
                "Failed to parse FOXML document",
                extra={
                    "target": path,
                    "code": exc.code,
                    "offset": exc.offset,
                    "error": exc.message,
                },
            )
            raise
        finally:
            metrics.bytes_read = reader.bytes_read
            metrics.chunks_read = reader.chunks_read
            metrics.events_processed = machine.events_processed
            metrics.finish(track_memory)
            if source is not None:
                source.close()
            reader.close()
            machine.reset()


_default_parser: Optional[FoxmlParser] = None


def get_default_parser() -> FoxmlParser:
    """Shared parser with the default configuration and in-memory cache."""
    global _default_parser
    if _default_parser is None:
        _default_parser = FoxmlParser()
    return _default_parser


def parse_file(
    target: Target,
    config: Optional[ParserConfig] = None,
    cache: Optional[ResultCache] = None,
) -> DigitalObject:
    """Parse a FOXML file.

    Without ``config`` or ``cache`` the shared default parser is used, so
    repeated calls for the same path are served from its cache.
    """
    if config is None and cache is None:
        return get_default_parser().parse(target)
    return FoxmlParser(cache=cache, config=config).parse(target)

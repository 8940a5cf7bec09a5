"""Parse events emitted by the event engine and consumed by the tree builder."""

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Dict, Optional


class EventKind(Enum):
    """Kinds of parse events."""

    OPEN = auto()   # Element start with attributes
    TEXT = auto()   # Character data segment
    CLOSE = auto()  # Element end


@dataclass(frozen=True)
class ParseEvent:
    """One open/text/close event.

    Tags are qualified in Clark notation (``{namespace}local``); text events
    carry one segment of character data, and a single element's text may
    arrive split over any number of events.
    """

    kind: EventKind
    tag: Optional[str] = None
    attributes: Dict[str, str] = field(default_factory=dict)
    text: Optional[str] = None

    @classmethod
    def open(cls, tag: str, attributes: Optional[Dict[str, str]] = None) -> "ParseEvent":
        return cls(EventKind.OPEN, tag=tag, attributes=dict(attributes or {}))

    @classmethod
    def close(cls, tag: str) -> "ParseEvent":
        return cls(EventKind.CLOSE, tag=tag)

    @classmethod
    def characters(cls, text: str) -> "ParseEvent":
        return cls(EventKind.TEXT, text=text)

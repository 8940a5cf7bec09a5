"""Streaming input layer: chunked file reading and the incremental event engine.

Key Components:
    ChunkedReader: Bounded sequential reads with end-of-input detection
    ExpatEventSource: Push parser converting bytes into ParseEvents
    ParseEvent / EventKind: Open, text and close events
    corrected_offset: Reconciles wrapped engine byte indexes
"""

from .engine import ExpatEventSource, qualify
from .events import EventKind, ParseEvent
from .offsets import WRAP_WINDOW, corrected_offset
from .reader import ChunkedReader

__all__ = [
    "ExpatEventSource",
    "qualify",
    "EventKind",
    "ParseEvent",
    "WRAP_WINDOW",
    "corrected_offset",
    "ChunkedReader",
]

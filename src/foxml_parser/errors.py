"""Exception hierarchy for FOXML parsing.

All failures raised by the parser derive from ``FoxmlParserError``. Malformed
input surfaces as ``ParseError`` carrying the engine error code and a corrected
absolute byte offset; contract violations of the document structure surface
as ``StructuralError``, a distinguished ``ParseError`` subtype. File access
problems are left to propagate as the built-in ``OSError``.
"""

from enum import Enum
from typing import Optional


class StructuralViolation(Enum):
    """Kinds of structural contract violations."""

    ROOT_TAG = "root_tag"                    # Outermost element is not a digital object
    TAG_MISMATCH = "tag_mismatch"            # Close tag differs from the open tag
    EVENT_AFTER_ROOT = "event_after_root"    # Event received after the root closed
    TEXT_OUTSIDE_ROOT = "text_outside_root"  # Character data with no open element
    INCOMPLETE_DOCUMENT = "incomplete"       # Input ended before the root closed


class FoxmlParserError(Exception):
    """Base exception for all FOXML parser failures."""


class ParseError(FoxmlParserError):
    """Raised when the input is not well-formed XML.

    Attributes:
        message: Human-readable description of the failure
        code: Low-level event engine error code, if the engine reported one
        offset: Corrected absolute byte offset of the fault, if known
        target: Path of the document being parsed, if known
    """

    def __init__(
        self,
        message: str,
        code: Optional[int] = None,
        offset: Optional[int] = None,
        target: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.offset = offset
        self.target = target

    def __str__(self) -> str:
        parts = [self.message]
        if self.code is not None:
            parts.append(f"code={self.code}")
        if self.offset is not None:
            parts.append(f"offset={self.offset}")
        if self.target is not None:
            parts.append(f"target={self.target}")
        if len(parts) == 1:
            return self.message
        return f"{parts[0]} ({', '.join(parts[1:])})"


class StructuralError(ParseError):
    """Raised when a well-formed event stream violates the FOXML structure."""

    def __init__(
        self,
        message: str,
        violation: StructuralViolation,
        offset: Optional[int] = None,
        target: Optional[str] = None,
    ) -> None:
        super().__init__(message, code=None, offset=offset, target=target)
        self.violation = violation


class FinalizedNodeError(FoxmlParserError):
    """Raised when a finalized element node is mutated."""

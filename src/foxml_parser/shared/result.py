"""Metrics collected while parsing one FOXML document."""

import time
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

import psutil


def current_rss_bytes() -> int:
    """Resident set size of this process in bytes."""
    return psutil.Process().memory_info().rss


@dataclass
class ParseMetrics:
    """Performance metrics for a parse operation."""

    target: Optional[str] = None
    bytes_read: int = 0
    chunks_read: int = 0
    events_processed: int = 0
    processing_time_ms: float = 0.0
    memory_start_bytes: int = 0
    memory_end_bytes: int = 0
    cache_hit: bool = False
    started_at: float = field(default_factory=time.time)

    @property
    def bytes_per_second(self) -> float:
        """Calculate bytes read per second."""
        if self.processing_time_ms <= 0:
            return 0.0
        return (self.bytes_read * 1000.0) / self.processing_time_ms

    @property
    def memory_delta_bytes(self) -> int:
        """Growth of resident memory over the parse."""
        return self.memory_end_bytes - self.memory_start_bytes

    def finish(self, track_memory: bool = False) -> None:
        """Stamp elapsed time and, optionally, final memory usage."""
        self.processing_time_ms = (time.time() - self.started_at) * 1000
        if track_memory:
            self.memory_end_bytes = current_rss_bytes()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "target": self.target,
            "bytes_read": self.bytes_read,
            "chunks_read": self.chunks_read,
            "events_processed": self.events_processed,
            "processing_time_ms": round(self.processing_time_ms, 3),
            "bytes_per_second": round(self.bytes_per_second, 1),
            "memory_delta_bytes": self.memory_delta_bytes,
            "cache_hit": self.cache_hit,
        }

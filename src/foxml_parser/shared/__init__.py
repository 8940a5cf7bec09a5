"""Shared utilities for FOXML parsing.

This module provides configuration objects, metrics and correlation-aware
logging used across the reader, the tree builder and the API layer.
"""

from .config import (
    DIGITAL_OBJECT_TAG,
    FOXML_NAMESPACE,
    CacheConfig,
    ConfigError,
    ConfigValidationError,
    ParserConfig,
    StreamConfig,
)
from .logging import (
    CorrelationLogger,
    configure_logging,
    get_logger,
)
from .result import ParseMetrics

__all__ = [
    "DIGITAL_OBJECT_TAG",
    "FOXML_NAMESPACE",
    "CacheConfig",
    "ConfigError",
    "ConfigValidationError",
    "ParserConfig",
    "StreamConfig",
    "CorrelationLogger",
    "configure_logging",
    "get_logger",
    "ParseMetrics",
]

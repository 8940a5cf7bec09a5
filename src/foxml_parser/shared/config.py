"""Configuration classes for FOXML parsing.

This module provides configuration objects for the chunked reader, the event
engine and the result cache, with validation, presets and JSON round-trips.
"""

import json
from dataclasses import dataclass, field, fields, is_dataclass, replace
from typing import Any, Dict, List, Optional

FOXML_NAMESPACE = "info:fedora/fedora-system:def/foxml#"
DIGITAL_OBJECT_TAG = "{%s}digitalObject" % FOXML_NAMESPACE

DEFAULT_CHUNK_SIZE = 2 ** 18
DEFAULT_CACHE_TTL_SECONDS = 3600 * 24 * 7
DEFAULT_CACHE_MAX_ENTRIES = 256

CACHE_BACKENDS = ("memory", "file", "redis")


class ConfigError(Exception):
    """Base exception for configuration errors."""


class ConfigValidationError(ConfigError):
    """Exception raised when configuration validation fails."""

    def __init__(self, message: str, field_name: Optional[str] = None,
                 suggestions: Optional[List[str]] = None):
        super().__init__(message)
        self.field_name = field_name
        self.suggestions = suggestions or []


@dataclass
class StreamConfig:
    """Configuration for the chunked reader and the event engine."""

    chunk_size: int = DEFAULT_CHUNK_SIZE
    text_buffer_size: int = 65536
    discard_whitespace: bool = True

    def __post_init__(self) -> None:
        """Validate stream configuration."""
        if self.chunk_size <= 0:
            raise ValueError("chunk_size must be > 0")
        if self.text_buffer_size <= 0:
            raise ValueError("text_buffer_size must be > 0")


@dataclass
class CacheConfig:
    """Configuration for the parse result cache."""

    enabled: bool = True
    ttl_seconds: int = DEFAULT_CACHE_TTL_SECONDS
    key_includes_mtime: bool = False
    backend: str = "memory"  # memory, file, redis
    directory: Optional[str] = None
    redis_url: Optional[str] = None
    key_prefix: str = "foxml:"
    max_entries: Optional[int] = DEFAULT_CACHE_MAX_ENTRIES  # memory backend only; None is unbounded

    def __post_init__(self) -> None:
        """Validate cache configuration."""
        if self.ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be > 0")
        if self.max_entries is not None and self.max_entries <= 0:
            raise ValueError("max_entries must be > 0")
        if self.backend not in CACHE_BACKENDS:
            raise ValueError(f"backend must be one of {list(CACHE_BACKENDS)}")
        if self.backend == "file" and not self.directory:
            raise ValueError("directory is required for the file cache backend")
        if self.backend == "redis" and not self.redis_url:
            raise ValueError("redis_url is required for the redis cache backend")


@dataclass(frozen=True)
class ParserConfig:
    """Complete configuration for a FOXML parser.

    Immutable once built; use ``override`` to derive variants. Component
    configurations validate themselves and any failure is reported as a
    ``ConfigValidationError``.
    """

    stream: StreamConfig = field(default_factory=StreamConfig)
    cache: CacheConfig = field(default_factory=CacheConfig)

    root_tag: str = DIGITAL_OBJECT_TAG
    correlation_id: Optional[str] = None
    track_memory: bool = True

    def __post_init__(self) -> None:
        """Validate the complete parser configuration."""
        try:
            self.stream.__post_init__()
            self.cache.__post_init__()
        except ValueError as e:
            raise ConfigValidationError(str(e)) from e
        if not self.root_tag:
            raise ConfigValidationError("root_tag cannot be empty", field_name="root_tag")

    def override(self, **kwargs: Any) -> "ParserConfig":
        """Create a new configuration with specific overrides.

        Nested fields use double-underscore notation.

        Example:
            >>> config = ParserConfig().override(
            ...     stream__chunk_size=4096,
            ...     cache__enabled=False,
            ... )
        """
        nested_overrides: Dict[str, Dict[str, Any]] = {}
        new_fields: Dict[str, Any] = {}
        for key, value in kwargs.items():
            if "__" in key:
                component, field_name = key.split("__", 1)
                nested_overrides.setdefault(component, {})[field_name] = value
            else:
                new_fields[key] = value

        for component, overrides in nested_overrides.items():
            current = getattr(self, component, None)
            if not is_dataclass(current):
                raise ConfigValidationError(
                    f"Unknown configuration component: {component}",
                    field_name=component,
                    suggestions=["stream", "cache"],
                )
            try:
                new_fields[component] = replace(current, **overrides)
            except (TypeError, ValueError) as e:
                raise ConfigValidationError(str(e), field_name=component) from e

        return replace(self, **new_fields)

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary format."""
        def _dataclass_to_dict(obj: Any) -> Any:
            if is_dataclass(obj):
                return {f.name: _dataclass_to_dict(getattr(obj, f.name)) for f in fields(obj)}
            return obj

        return _dataclass_to_dict(self)

    def to_json(self, indent: int = 2) -> str:
        """Convert configuration to JSON string."""
        return json.dumps(self.to_dict(), indent=indent)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ParserConfig":
        """Create configuration from dictionary.

        Unknown keys are rejected rather than ignored.
        """
        components = {"stream": StreamConfig, "cache": CacheConfig}
        values: Dict[str, Any] = {}
        known = {f.name for f in fields(cls)}
        for key, value in data.items():
            if key not in known:
                raise ConfigValidationError(f"Unknown configuration key: {key}", field_name=key)
            if key in components:
                try:
                    values[key] = components[key](**value)
                except (TypeError, ValueError) as e:
                    raise ConfigValidationError(str(e), field_name=key) from e
            else:
                values[key] = value
        return cls(**values)

    @classmethod
    def from_json(cls, json_str: str) -> "ParserConfig":
        """Create configuration from JSON string."""
        return cls.from_dict(json.loads(json_str))

    @classmethod
    def default(cls) -> "ParserConfig":
        """Default configuration: 256 KiB chunks, in-memory cache for a week."""
        return cls()

    @classmethod
    def low_memory(cls) -> "ParserConfig":
        """Smaller chunks and engine buffers for constrained workers."""
        return cls(stream=StreamConfig(chunk_size=2 ** 16, text_buffer_size=8192))

    @classmethod
    def uncached(cls) -> "ParserConfig":
        """Configuration that always parses from disk."""
        return cls(cache=CacheConfig(enabled=False))

"""Sequential chunked file reader."""

import os
from typing import BinaryIO, Iterator, Optional, Tuple, Union

from foxml_parser.shared.config import DEFAULT_CHUNK_SIZE

PathLike = Union[str, "os.PathLike[str]"]


class ChunkedReader:
    """Reads a file in bounded chunks, flagging the final read.

    Iteration yields ``(chunk, is_final)`` pairs. A read shorter than the
    chunk size marks the end of the file, so a file whose size is an exact
    multiple of the chunk size ends with an empty final chunk. The file is
    opened on ``open()`` (or on entering the context) and released by
    ``close()``, which is safe to call more than once.
    """

    def __init__(self, path: PathLike, chunk_size: int = DEFAULT_CHUNK_SIZE) -> None:
        if chunk_size <= 0:
            raise ValueError("chunk_size must be > 0")
        self.path = os.fspath(path)
        self.chunk_size = chunk_size
        self.bytes_read = 0
        self.chunks_read = 0
        self._file: Optional[BinaryIO] = None

    def open(self) -> "ChunkedReader":
        if self._file is None:
            self._file = open(self.path, "rb")
        return self

    def close(self) -> None:
        if self._file is not None:
            try:
                self._file.close()
            finally:
                self._file = None

    @property
    def closed(self) -> bool:
        return self._file is None

    @property
    def position(self) -> int:
        """Current (non-wrapping) file position."""
        if self._file is None:
            return self.bytes_read
        return self._file.tell()

    def __enter__(self) -> "ChunkedReader":
        return self.open()

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def __iter__(self) -> Iterator[Tuple[bytes, bool]]:
        if self._file is None:
            raise ValueError("ChunkedReader is not open")
        while True:
            chunk = self._file.read(self.chunk_size)
            self.bytes_read += len(chunk)
            self.chunks_read += 1
            is_final = len(chunk) < self.chunk_size
            yield chunk, is_final
            if is_final:
                return

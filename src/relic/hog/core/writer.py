from __future__ import annotations

import logging
import os
from types import TracebackType
from typing import BinaryIO, Optional, Type, Union

from relic.hog.core.definitions import MAGIC_WORD, MAX_PAYLOAD_SIZE
from relic.hog.core.errors import (
    AppendToHogError,
    BadHogFilenameError,
    FileTooLargeError,
    OpenHogError,
    OpenInputError,
    SignatureWriteError,
    UnexpectedEofError,
)
from relic.hog.core.lazyio import copy_exactly
from relic.hog.core.serialization import RecordHeaderSerializer

logger = logging.getLogger(__name__)

PathLike = Union[str, "os.PathLike[str]"]


class HogWriter:
    """Builds a new HOG archive one file at a time.

    Appends are not transactional; a failure part way through a payload leaves a truncated archive behind.
    """

    def __init__(self, stream: BinaryIO, name: Optional[str] = None, close_stream: bool = True):
        self._stream = stream
        self._close_stream = close_stream
        self.name = name or str(getattr(stream, "name", "<stream>"))

    @classmethod
    def create(cls, path: PathLike) -> HogWriter:
        """Create (or truncate) ``path`` and write the HOG signature."""
        try:
            stream = open(path, "wb")
        except OSError as e:
            raise OpenHogError(e) from e
        try:
            cls._write_signature(stream)
        except BaseException:
            stream.close()
            raise
        return cls(stream, name=os.fspath(path))

    @classmethod
    def from_stream(cls, stream: BinaryIO, close_stream: bool = False) -> HogWriter:
        cls._write_signature(stream)
        return cls(stream, close_stream=close_stream)

    @staticmethod
    def _write_signature(stream: BinaryIO) -> None:
        try:
            MAGIC_WORD.write(stream)
        except OSError as e:
            raise SignatureWriteError(e) from e

    def append_stream(self, name: str, stream: BinaryIO, length: int) -> int:
        """Append ``length`` bytes read from ``stream`` as the member ``name``.

        :returns: The number of payload bytes written.
        """
        header = RecordHeaderSerializer.pack(name, length)
        try:
            self._stream.write(header)
            copied = copy_exactly(stream, self._stream, length)
        except (OSError, UnexpectedEofError) as e:
            raise AppendToHogError(e) from e
        logger.debug("Appended `%s` (%d bytes) to `%s`", name, copied, self.name)
        return copied

    def append_file(self, path: PathLike) -> int:
        """Append the file at ``path``, stored under its final path component.

        :returns: The number of payload bytes written.
        """
        try:
            in_file = open(path, "rb")
        except OSError as e:
            raise OpenInputError(e) from e

        with in_file:
            try:
                size = os.fstat(in_file.fileno()).st_size
            except OSError as e:
                raise AppendToHogError(e) from e
            if size > MAX_PAYLOAD_SIZE:
                raise FileTooLargeError(size)

            name = os.path.basename(os.path.normpath(os.fspath(path)))
            if name in ("", ".", "..", os.sep):
                raise BadHogFilenameError(os.fspath(path))

            return self.append_stream(name, in_file, size)

    def flush(self) -> None:
        self._stream.flush()

    def close(self) -> None:
        if self._close_stream:
            self._stream.close()
        else:
            self._stream.flush()

    def __enter__(self) -> HogWriter:
        return self

    def __exit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc_val: Optional[BaseException],
        exc_tb: Optional[TracebackType],
    ) -> None:
        self.close()


__all__ = ["HogWriter"]

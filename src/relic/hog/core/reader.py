from __future__ import annotations

import logging
import os
from types import TracebackType
from typing import BinaryIO, Iterator, Optional, Type, Union

from relic.hog.core.definitions import HOG_SIGNATURE, SIGNATURE_SIZE, HogRecord
from relic.hog.core.errors import (
    ExtractError,
    HogCursorStateError,
    HogError,
    HogSeekError,
    InvalidSignatureError,
    OpenHogError,
    SignatureReadError,
    UnexpectedEofError,
)
from relic.hog.core.lazyio import copy_exactly, retry_interrupted
from relic.hog.core.serialization import read_header

logger = logging.getLogger(__name__)

PathLike = Union[str, "os.PathLike[str]"]


def _safe_get_name(stream: BinaryIO, default: str = "<stream>") -> str:
    return str(getattr(stream, "name", default))


class HogReader:
    """An open, validated HOG archive.

    The reader owns its stream; only one :class:`HogRecordCursor` may be used at a time,
    since cursors move the shared stream position.
    """

    def __init__(self, stream: BinaryIO, name: Optional[str] = None, close_stream: bool = True):
        self._stream = stream
        self._close_stream = close_stream
        self.name = name or _safe_get_name(stream)

    @classmethod
    def open(cls, path: PathLike) -> HogReader:
        try:
            stream = open(path, "rb")
        except OSError as e:
            raise OpenHogError(e) from e
        try:
            cls._validate_signature(stream)
        except BaseException:
            stream.close()
            raise
        return cls(stream, name=os.fspath(path))

    @classmethod
    def from_stream(cls, stream: BinaryIO, close_stream: bool = False) -> HogReader:
        """Wrap an already opened, seekable stream positioned at the start of an archive."""
        cls._validate_signature(stream)
        return cls(stream, close_stream=close_stream)

    @staticmethod
    def _validate_signature(stream: BinaryIO) -> None:
        buffer = bytearray()
        try:
            while len(buffer) < SIGNATURE_SIZE:
                remaining = SIGNATURE_SIZE - len(buffer)
                chunk = retry_interrupted(lambda: stream.read(remaining))
                if not chunk:
                    raise SignatureReadError(
                        UnexpectedEofError(SIGNATURE_SIZE, len(buffer))
                    )
                buffer.extend(chunk)
        except OSError as e:
            raise SignatureReadError(e) from e

        if bytes(buffer) != HOG_SIGNATURE:
            raise InvalidSignatureError(bytes(buffer), HOG_SIGNATURE)

    def records(self) -> HogRecordCursor:
        """Start a new traversal from the first record.

        :raises HogSeekError: the stream could not be rewound.
        """
        try:
            self._stream.seek(SIGNATURE_SIZE, os.SEEK_SET)
        except (OSError, ValueError) as e:
            raise HogSeekError(e) from e
        return HogRecordCursor(self._stream)

    def close(self) -> None:
        if self._close_stream:
            self._stream.close()

    @property
    def closed(self) -> bool:
        return self._stream.closed

    def __enter__(self) -> HogReader:
        return self

    def __exit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc_val: Optional[BaseException],
        exc_tb: Optional[TracebackType],
    ) -> None:
        self.close()


class HogRecordCursor:
    """Walks the records of an archive in a single forward pass.

    After :meth:`advance` yields a record, its payload is pending;
    call :meth:`copy_payload` to read it, or call :meth:`advance` again to seek past it.
    Any error faults the cursor, after which it yields nothing.
    """

    def __init__(self, stream: BinaryIO):
        self._stream = stream
        self._pending: Optional[int] = None
        self._faulted = False

    @property
    def faulted(self) -> bool:
        return self._faulted

    @property
    def pending_length(self) -> Optional[int]:
        return self._pending

    def _fault(self) -> None:
        self._faulted = True
        self._pending = None

    def _skip_pending(self) -> None:
        length, self._pending = self._pending, None
        if not length:
            return
        try:
            self._stream.seek(length, os.SEEK_CUR)
        except (OSError, ValueError) as e:
            self._fault()
            raise HogSeekError(e) from e
        logger.debug("Skipped %d byte payload", length)

    def advance(self) -> Optional[HogRecord]:
        """Move to the next record.

        :returns: The next record, or None at the end of the archive (or once faulted).
        """
        if self._faulted:
            return None
        self._skip_pending()
        try:
            record = read_header(self._stream)
        except HogError:
            self._fault()
            raise
        if record is None:
            return None
        self._pending = record.length
        return record

    def copy_payload(self, dst: BinaryIO) -> int:
        """Copy the payload of the record last returned by :meth:`advance` into ``dst``.

        :raises HogCursorStateError: no record is pending.
        :raises ExtractError: the payload could not be copied.
        """
        if self._faulted or self._pending is None:
            raise HogCursorStateError(
                "attempted to copy file without first scanning for the header"
            )
        length, self._pending = self._pending, None
        try:
            return copy_exactly(self._stream, dst, length)
        except (OSError, UnexpectedEofError) as e:
            self._fault()
            raise ExtractError(e) from e

    def __iter__(self) -> Iterator[HogRecord]:
        return self

    def __next__(self) -> HogRecord:
        record = self.advance()
        if record is None:
            raise StopIteration
        return record


__all__ = ["HogReader", "HogRecordCursor"]

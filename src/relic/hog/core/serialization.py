from __future__ import annotations

from typing import BinaryIO, Optional

from relic.hog.core.definitions import (
    FILENAME_ENCODING,
    FILENAME_SIZE,
    MAX_PAYLOAD_SIZE,
    RECORD_HEADER,
    RECORD_HEADER_SIZE,
    HogRecord,
)
from relic.hog.core.errors import (
    FileTooLargeError,
    HeaderDecodeError,
    HogFilenameTooLongError,
    InvalidFilenameError,
    ReadHeaderError,
    UnexpectedEofError,
)
from relic.hog.core.lazyio import retry_interrupted


class RecordHeaderSerializer:
    """Converts between the packed 17 byte record header and a :class:`HogRecord`.

    The header is a 13 byte, NUL padded filename followed by the payload length as a little-endian u32.
    """

    @staticmethod
    def unpack(buffer: bytes) -> HogRecord:
        if len(buffer) != RECORD_HEADER_SIZE:
            raise HeaderDecodeError(
                f"Expected a {RECORD_HEADER_SIZE} byte record header, got {len(buffer)} bytes"
            )
        raw_name, length = RECORD_HEADER.unpack(buffer)

        # Everything after the first NUL is padding; a full 13 byte name has no NUL at all
        name_part = raw_name.split(b"\0", 1)[0]
        try:
            filename = name_part.decode(FILENAME_ENCODING)
        except UnicodeDecodeError as e:
            raise InvalidFilenameError(raw_name) from e
        return HogRecord(filename, length)

    @staticmethod
    def pack(filename: str, length: int) -> bytes:
        # Lossy, like the names derived from OS paths
        name_part = filename.encode(FILENAME_ENCODING, errors="replace")
        if len(name_part) >= FILENAME_SIZE:
            raise HogFilenameTooLongError(filename)
        if not 0 <= length <= MAX_PAYLOAD_SIZE:
            raise FileTooLargeError(length)
        # struct pads '13s' with NULs on the right
        return RECORD_HEADER.pack(name_part, length)

    @classmethod
    def read(cls, stream: BinaryIO) -> Optional[HogRecord]:
        """Read the next header from ``stream``.

        Returns None if the stream is exhausted before the first byte of the header.

        :raises UnexpectedEofError: the stream ended partway through the header.
        :raises ReadHeaderError: the underlying stream failed.
        """
        buffer = bytearray()
        while len(buffer) < RECORD_HEADER_SIZE:
            remaining = RECORD_HEADER_SIZE - len(buffer)
            try:
                chunk = retry_interrupted(lambda: stream.read(remaining))
            except OSError as e:
                raise ReadHeaderError(e) from e
            if not chunk:
                if len(buffer) == 0:
                    return None
                raise UnexpectedEofError(RECORD_HEADER_SIZE, len(buffer))
            buffer.extend(chunk)
        return cls.unpack(bytes(buffer))

    @classmethod
    def write(cls, stream: BinaryIO, filename: str, length: int) -> int:
        buffer = cls.pack(filename, length)
        stream.write(buffer)
        return len(buffer)


decode_header = RecordHeaderSerializer.unpack
encode_header = RecordHeaderSerializer.pack
read_header = RecordHeaderSerializer.read

__all__ = [
    "RecordHeaderSerializer",
    "decode_header",
    "encode_header",
    "read_header",
]

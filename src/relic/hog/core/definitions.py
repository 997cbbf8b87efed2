"""Constants and records of the HOG format."""

from __future__ import annotations

import struct
from dataclasses import dataclass

from relic.core.serialization import MagicWord

HOG_SIGNATURE = b"DHF"
MAGIC_WORD = MagicWord(HOG_SIGNATURE, name="HOG Signature")
SIGNATURE_SIZE = len(HOG_SIGNATURE)

FILENAME_SIZE = 13
# One byte of the name field is always reserved for the terminator when writing
MAX_FILENAME_SIZE = FILENAME_SIZE - 1
MAX_PAYLOAD_SIZE = 0xFFFFFFFF

# Packed; no alignment between the name and the length
RECORD_HEADER = struct.Struct("<13sI")
RECORD_HEADER_SIZE = RECORD_HEADER.size  # 17

FILENAME_ENCODING = "utf-8"
DEFAULT_CHUNK_SIZE = 64 * 1024


@dataclass
class HogRecord:
    """A decoded record header.

    Args:
        filename (str): The name stored in the header; never contains a directory.
        length (int): The exact size of the payload following the header.
    """

    filename: str
    length: int

    def __str__(self) -> str:
        return f"{self.filename} ({self.length} bytes)"


__all__ = [
    "HOG_SIGNATURE",
    "MAGIC_WORD",
    "SIGNATURE_SIZE",
    "FILENAME_SIZE",
    "MAX_FILENAME_SIZE",
    "MAX_PAYLOAD_SIZE",
    "RECORD_HEADER",
    "RECORD_HEADER_SIZE",
    "FILENAME_ENCODING",
    "DEFAULT_CHUNK_SIZE",
    "HogRecord",
]

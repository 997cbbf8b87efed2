"""Errors raised while reading or writing HOG archives."""

from __future__ import annotations

from typing import Optional

from relic.core.errors import MismatchError, RelicToolError

from relic.hog.core.definitions import HOG_SIGNATURE, MAX_FILENAME_SIZE


class HogError(RelicToolError):
    """Base class for all HOG errors."""


class HogIOError(HogError):
    """A HOG error caused by a low-level I/O failure.

    The underlying error is kept on ``cause`` and chained as ``__cause__`` by the raiser.
    """

    MESSAGE = "I/O error"

    def __init__(self, cause: Optional[BaseException] = None):
        super().__init__(cause)
        self.cause = cause

    def __str__(self) -> str:
        if self.cause is None:
            return self.MESSAGE
        return f"{self.MESSAGE}: {self.cause}"


class OpenHogError(HogIOError):
    MESSAGE = "failed to open HOG file"


class OpenOutputError(HogIOError):
    MESSAGE = "failed to open output file"


class OpenInputError(HogIOError):
    MESSAGE = "failed to open input file"


class SignatureReadError(HogIOError):
    MESSAGE = "reading HOG signature failed"


class SignatureWriteError(HogIOError):
    MESSAGE = "writing HOG signature failed"


class ReadHeaderError(HogIOError):
    MESSAGE = "reading HOG record header failed"


class ExtractError(HogIOError):
    MESSAGE = "failed to save file from HOG to disk"


class AppendToHogError(HogIOError):
    MESSAGE = "failed to append file to HOG"


class HogSeekError(HogIOError):
    MESSAGE = "failed to seek in HOG file"


class InvalidSignatureError(MismatchError, HogError):
    """The first bytes of the file are not the HOG signature."""

    def __init__(
        self, received: Optional[bytes] = None, expected: Optional[bytes] = None
    ):
        super().__init__("HOG Signature", received, expected or HOG_SIGNATURE)
        self.received = received
        self.expected = expected or HOG_SIGNATURE

    def __str__(self) -> str:
        return f"file did not have correct HOG signature (got {self.received!r}, expected {self.expected!r})"


class UnexpectedEofError(HogError):
    """The stream ended in the middle of a header or payload."""

    def __init__(self, expected: Optional[int] = None, received: Optional[int] = None):
        super().__init__(expected, received)
        self.expected = expected
        self.received = received

    def __str__(self) -> str:
        if self.expected is None:
            return "unexpected end of file encountered"
        return f"unexpected end of file encountered (expected {self.expected} bytes, found {self.received})"


class HeaderDecodeError(HogError):
    """A buffer could not be interpreted as a record header."""


class InvalidFilenameError(HeaderDecodeError):
    def __init__(self, raw: Optional[bytes] = None):
        super().__init__(raw)
        self.raw = raw

    def __str__(self) -> str:
        return f"invalid filename found in HOG record header: {self.raw!r}"


class HogFilenameTooLongError(HogError):
    def __init__(self, filename: Optional[str] = None):
        super().__init__(filename)
        self.filename = filename

    def __str__(self) -> str:
        return (
            f"filename '{self.filename}' cannot be stored in HOG file"
            f" (it must be at most {MAX_FILENAME_SIZE} ASCII characters long)"
        )


class FileTooLargeError(HogError):
    def __init__(self, size: int):
        super().__init__(size)
        self.size = size

    def __str__(self) -> str:
        return f"file of {self.size} bytes cannot be stored in HOG (it is too large)"


class BadHogFilenameError(HogError):
    def __init__(self, path: str):
        super().__init__(path)
        self.path = path

    def __str__(self) -> str:
        return f"could not find filename basename of file: {self.path}"


class HogCursorStateError(HogError, RuntimeError):
    """A cursor operation was called out of order.

    This signals a programming error in the caller, not a malformed archive.
    """


__all__ = [
    "HogError",
    "HogIOError",
    "OpenHogError",
    "OpenOutputError",
    "OpenInputError",
    "SignatureReadError",
    "SignatureWriteError",
    "ReadHeaderError",
    "ExtractError",
    "AppendToHogError",
    "HogSeekError",
    "InvalidSignatureError",
    "UnexpectedEofError",
    "HeaderDecodeError",
    "InvalidFilenameError",
    "HogFilenameTooLongError",
    "FileTooLargeError",
    "BadHogFilenameError",
    "HogCursorStateError",
]

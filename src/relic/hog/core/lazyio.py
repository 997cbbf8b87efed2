"""Bounded stream-to-stream copies used by the reader and the writer."""

from __future__ import annotations

from typing import BinaryIO, Callable, TypeVar

from relic.hog.core.definitions import DEFAULT_CHUNK_SIZE
from relic.hog.core.errors import UnexpectedEofError

_T = TypeVar("_T")


def retry_interrupted(func: Callable[[], _T]) -> _T:
    """Call ``func`` until it completes without being interrupted by a signal."""
    while True:
        try:
            return func()
        except InterruptedError:
            continue


def _write_all(dst: BinaryIO, buffer: bytes) -> None:
    view = memoryview(buffer)
    while view:
        written = retry_interrupted(lambda: dst.write(view))
        # Raw streams may return None (would block) or a short count
        if written is None:
            written = 0
        view = view[written:]


def copy_upto(
    src: BinaryIO, dst: BinaryIO, n: int, chunk_size: int = DEFAULT_CHUNK_SIZE
) -> int:
    """Copy at most ``n`` bytes from ``src`` to ``dst``.

    Running out of source bytes is not an error; the number of bytes actually copied is returned.
    Any error other than an interrupt is propagated, leaving the copied amount unspecified.
    """
    copied = 0
    while copied < n:
        size = min(n - copied, chunk_size)
        buffer = retry_interrupted(lambda: src.read(size))
        if not buffer:
            break
        _write_all(dst, buffer)
        copied += len(buffer)
    return copied


def copy_exactly(
    src: BinaryIO, dst: BinaryIO, n: int, chunk_size: int = DEFAULT_CHUNK_SIZE
) -> int:
    """Copy exactly ``n`` bytes from ``src`` to ``dst``.

    :raises UnexpectedEofError: ``src`` was exhausted before ``n`` bytes were copied.
    """
    copied = copy_upto(src, dst, n, chunk_size=chunk_size)
    if copied != n:
        raise UnexpectedEofError(n, copied)
    return copied


__all__ = ["retry_interrupted", "copy_upto", "copy_exactly"]

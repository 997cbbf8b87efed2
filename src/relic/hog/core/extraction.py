"""Extraction, listing and creation of whole archives.

These drive the reader and writer for one archive at a time and accumulate summaries
for the CLI to report. The batch helpers isolate failures per archive.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from functools import partial
from typing import Callable, Dict, Iterable, Optional, Union

from fs import errors as fs_errors
from fs.base import FS

from relic.hog.core.definitions import HogRecord
from relic.hog.core.errors import HogError, OpenOutputError
from relic.hog.core.reader import HogReader
from relic.hog.core.writer import HogWriter

_logger = logging.getLogger(__name__)

PathLike = Union[str, "os.PathLike[str]"]
RecordCallback = Callable[[HogRecord], None]


@dataclass
class HogExtractSummary:
    files_processed: int = 0
    files_extracted: int = 0
    files_skipped: int = 0
    files_failed: int = 0
    bytes_extracted: int = 0

    def __str__(self) -> str:
        return (
            f"Processed {self.files_processed} files, extracted {self.files_extracted} files"
            f" ({self.bytes_extracted} bytes), skipped {self.files_skipped} files."
        )


@dataclass
class HogListSummary:
    num_files: int = 0
    num_bytes: int = 0

    def __str__(self) -> str:
        return f"contains {self.num_files} files ({self.num_bytes} bytes)."


@dataclass
class HogCreateSummary:
    files_added: int = 0
    files_failed: int = 0
    bytes_added: int = 0

    def __str__(self) -> str:
        return (
            f"added {self.files_added} files ({self.bytes_added} bytes),"
            f" failed to add {self.files_failed} files."
        )


class HogExtractor:
    """Extracts archives into a destination filesystem.

    Args:
        destination (FS): Where extracted files are written; HOG archives are flat so files land in its root.
        overwrite (bool): Replace existing files; otherwise existing files are skipped.
        on_extract (Callable): Optional callback invoked with the archive name, each record and its outcome.
    """

    EXTRACTED = "extracted"
    SKIPPED = "skipped"
    FAILED = "failed"

    def __init__(
        self,
        destination: FS,
        overwrite: bool = False,
        on_extract: Optional[Callable[[str, HogRecord, str], None]] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self.destination = destination
        self.overwrite = overwrite
        self._on_extract = on_extract
        self.logger = logger or _logger

    def _notify(self, reader: HogReader, record: HogRecord, outcome: str) -> None:
        if self._on_extract is not None:
            self._on_extract(reader.name, record, outcome)

    def _open_output(self, filename: str):
        """Open the destination for ``filename``, or return None if it exists and must be kept."""
        mode = "w" if self.overwrite else "x"
        try:
            return self.destination.openbin(filename, mode)
        except fs_errors.FileExists:
            return None
        except (fs_errors.FSError, OSError, ValueError) as e:
            raise OpenOutputError(e) from e

    def extract_reader(self, reader: HogReader) -> HogExtractSummary:
        summary = HogExtractSummary()
        cursor = reader.records()
        for record in cursor:
            summary.files_processed += 1

            try:
                out_file = self._open_output(record.filename)
            except OpenOutputError as e:
                # The payload stays pending; the cursor skips it on the next advance
                self.logger.error("`%s`: %s: %s", reader.name, record.filename, e)
                summary.files_failed += 1
                self._notify(reader, record, self.FAILED)
                continue

            if out_file is None:
                self.logger.debug("`%s`: skipping `%s` (already exists)", reader.name, record.filename)
                summary.files_skipped += 1
                self._notify(reader, record, self.SKIPPED)
                continue

            with out_file:
                copied = cursor.copy_payload(out_file)

            summary.files_extracted += 1
            summary.bytes_extracted += copied
            self._notify(reader, record, self.EXTRACTED)
        return summary

    def extract_archive(self, path: PathLike) -> HogExtractSummary:
        with HogReader.open(path) as reader:
            return self.extract_reader(reader)


def list_reader(
    reader: HogReader, on_record: Optional[RecordCallback] = None
) -> HogListSummary:
    """Count the records of an archive without reading any payload."""
    summary = HogListSummary()
    for record in reader.records():
        if on_record is not None:
            on_record(record)
        summary.num_files += 1
        summary.num_bytes += record.length
    return summary


def list_archive(
    path: PathLike, on_record: Optional[RecordCallback] = None
) -> HogListSummary:
    with HogReader.open(path) as reader:
        return list_reader(reader, on_record)


def list_archives(
    paths: Iterable[PathLike],
    on_record: Optional[Callable[[PathLike, HogRecord], None]] = None,
    *,
    logger: Optional[logging.Logger] = None,
) -> Dict[PathLike, Union[HogListSummary, HogError]]:
    logger = logger or _logger
    results: Dict[PathLike, Union[HogListSummary, HogError]] = {}
    for path in paths:
        callback = None
        if on_record is not None:
            callback = partial(on_record, path)
        try:
            results[path] = list_archive(path, callback)
        except HogError as e:
            logger.error('error while processing HOG file "%s": %s', path, e)
            results[path] = e
    return results


def extract_archives(
    paths: Iterable[PathLike],
    extractor: HogExtractor,
    *,
    logger: Optional[logging.Logger] = None,
) -> Dict[PathLike, Union[HogExtractSummary, HogError]]:
    logger = logger or _logger
    results: Dict[PathLike, Union[HogExtractSummary, HogError]] = {}
    for path in paths:
        try:
            results[path] = extractor.extract_archive(path)
        except HogError as e:
            logger.error('error while processing HOG file "%s": %s', path, e)
            results[path] = e
    return results


def create_archive(
    out_path: PathLike,
    sources: Iterable[PathLike],
    on_append: Optional[Callable[[PathLike, int], None]] = None,
    *,
    logger: Optional[logging.Logger] = None,
) -> HogCreateSummary:
    """Write a new archive at ``out_path`` containing ``sources`` in order.

    Sources that cannot be added are logged and counted; creating the archive itself is fatal.
    """
    logger = logger or _logger
    summary = HogCreateSummary()
    with HogWriter.create(out_path) as writer:
        for source in sources:
            try:
                length = writer.append_file(source)
            except HogError as e:
                logger.error(
                    'error occurred while appending "%s" to HOG file "%s": %s',
                    source,
                    out_path,
                    e,
                )
                summary.files_failed += 1
                continue
            summary.files_added += 1
            summary.bytes_added += length
            if on_append is not None:
                on_append(source, length)
    return summary


__all__ = [
    "HogExtractSummary",
    "HogListSummary",
    "HogCreateSummary",
    "HogExtractor",
    "list_reader",
    "list_archive",
    "list_archives",
    "extract_archives",
    "create_archive",
]

import os
from io import BytesIO

import pytest

from relic.hog.core import HogReader, HogWriter
from relic.hog.core.definitions import MAGIC_WORD
from relic.hog.core.errors import (
    AppendToHogError,
    BadHogFilenameError,
    FileTooLargeError,
    HogFilenameTooLongError,
    OpenHogError,
    OpenInputError,
    SignatureWriteError,
)
from tests.dummy_hog import EXAMPLE_FILES, EXAMPLE_HOG
from tests.util import write_files


class _BrokenStream(BytesIO):
    def __init__(self, broken: bool = True):
        super().__init__()
        self.broken = broken

    def write(self, data):
        if self.broken:
            raise OSError(28, "No space left on device")
        return super().write(data)


def test_create_writes_signature(tmp_path):
    path = tmp_path / "new.hog"
    with HogWriter.create(path):
        pass
    assert path.read_bytes() == b"DHF"
    with open(path, "rb") as h:
        assert MAGIC_WORD.check(h, advance=True)


def test_create_truncates(tmp_path):
    path = tmp_path / "old.hog"
    path.write_bytes(b"something else entirely")
    with HogWriter.create(path):
        pass
    assert path.read_bytes() == b"DHF"


def test_create_in_missing_directory(tmp_path):
    with pytest.raises(OpenHogError):
        HogWriter.create(tmp_path / "missing" / "new.hog")


def test_signature_write_failure():
    with pytest.raises(SignatureWriteError):
        HogWriter.from_stream(_BrokenStream())


def test_append_files(tmp_path):
    sources = write_files(str(tmp_path), EXAMPLE_FILES)
    path = tmp_path / "out.hog"
    with HogWriter.create(path) as writer:
        written = [writer.append_file(source) for source in sources]
    assert written == [2, 3]
    assert path.read_bytes() == EXAMPLE_HOG


def test_append_grows_archive_by_header_and_payload(tmp_path):
    sources = write_files(str(tmp_path), {"EMPTY": b"", "DATA.BIN": b"\x01" * 1000})
    path = tmp_path / "out.hog"
    with HogWriter.create(path) as writer:
        for source in sources:
            writer.flush()
            before = os.path.getsize(path)
            size = writer.append_file(source)
            writer.flush()
            assert os.path.getsize(path) == before + 17 + size


@pytest.mark.parametrize(
    ["name", "should_fail"],
    [("ABCDEFGH.TXT", False), ("ABCDEFGHI.TXT", True), ("A" * 40, True), ("A", False)],
)
def test_append_filename_boundary(tmp_path, name: str, should_fail: bool):
    (source,) = write_files(str(tmp_path), {name: b"payload"})
    with HogWriter.from_stream(BytesIO()) as writer:
        if should_fail:
            with pytest.raises(HogFilenameTooLongError):
                writer.append_file(source)
        else:
            assert writer.append_file(source) == len(b"payload")


def test_append_missing_input(tmp_path):
    with HogWriter.from_stream(BytesIO()) as writer:
        with pytest.raises(OpenInputError):
            writer.append_file(tmp_path / "missing.txt")


def test_append_directory(tmp_path):
    with HogWriter.from_stream(BytesIO()) as writer:
        with pytest.raises((OpenInputError, BadHogFilenameError)):
            writer.append_file(tmp_path)


def test_append_stream_too_large():
    with HogWriter.from_stream(BytesIO()) as writer:
        with pytest.raises(FileTooLargeError):
            writer.append_stream("HUGE.BIN", BytesIO(), 0x100000000)


def test_append_stream_short_source():
    with BytesIO() as handle:
        with HogWriter.from_stream(handle) as writer:
            with pytest.raises(AppendToHogError):
                writer.append_stream("SHORT.BIN", BytesIO(b"abc"), 10)


def test_append_write_failure():
    stream = _BrokenStream(broken=False)
    writer = HogWriter.from_stream(stream)
    stream.broken = True
    with pytest.raises(AppendToHogError) as exc_info:
        writer.append_stream("A.TXT", BytesIO(b"hi"), 2)
    assert "No space left on device" in str(exc_info.value)


def test_append_stream_round_trip():
    with BytesIO() as handle:
        with HogWriter.from_stream(handle) as writer:
            for name, data in EXAMPLE_FILES.items():
                writer.append_stream(name, BytesIO(data), len(data))
        handle.seek(0)
        with HogReader.from_stream(handle) as reader:
            assert [r.filename for r in reader.records()] == list(EXAMPLE_FILES)

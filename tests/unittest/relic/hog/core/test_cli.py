import argparse
import logging
import os
from io import StringIO
from typing import Optional, Any

import pytest
import relic.core.cli
from relic.core import CLI

from relic.hog.core.cli import RelicHogCli
from tests.dummy_hog import EXAMPLE_FILES, EXAMPLE_HOG, build_hog, generate_random_files
from tests.util import write_files

SEEDS = [8675309, 20040920, 20250318, 500500]


def _run(*args: str) -> str:
    with StringIO() as logFile:
        logging.basicConfig(
            stream=logFile, level=logging.DEBUG, format="%(message)s", force=True
        )
        logger = logging.getLogger()
        CLI.run_with("relic", "hog", *args, logger=logger)
        result = logFile.getvalue()
    print("\nLOG:")
    print(result)
    return result


@pytest.fixture
def example_hog(tmp_path) -> str:
    path = tmp_path / "example.hog"
    path.write_bytes(EXAMPLE_HOG)
    return str(path)


@pytest.mark.parametrize("parent", [True, False])
def test_init_cli(parent: bool):
    parent_parser: Optional[Any] = None
    if parent:
        parent_parser = argparse.ArgumentParser().add_subparsers()

    RelicHogCli(parent=parent_parser)


def test_cli_list(example_hog: str):
    result = _run(example_hog)
    assert f"{example_hog}: contains 2 files (5 bytes)." in result
    assert "A.TXT" not in result


def test_cli_list_verbose(example_hog: str):
    result = _run("-v", example_hog)
    assert f"  {example_hog}: A.TXT: 2 bytes" in result
    assert f"  {example_hog}: B.BIN: 3 bytes" in result


def test_cli_list_continues_after_bad_archive(tmp_path, example_hog: str):
    bad = tmp_path / "bad.hog"
    bad.write_bytes(b"not a hog")
    result = _run(str(bad), example_hog)
    assert f'error while processing HOG file "{bad}"' in result
    assert "file did not have correct HOG signature" in result
    assert f"{example_hog}: contains 2 files (5 bytes)." in result


@pytest.mark.parametrize("seed", SEEDS)
def test_cli_extract(tmp_path, monkeypatch, seed: int):
    files = generate_random_files(seed)
    hog = tmp_path / "random.hog"
    hog.write_bytes(build_hog(files))
    out_dir = tmp_path / "out"
    out_dir.mkdir()
    monkeypatch.chdir(out_dir)

    result = _run("-x", str(hog))
    assert sorted(os.listdir(out_dir)) == sorted(files)
    for name, data in files.items():
        assert (out_dir / name).read_bytes() == data
    assert (
        f"Processed {len(files)} files, extracted {len(files)} files"
        f" ({sum(map(len, files.values()))} bytes), skipped 0 files."
    ) in result


def test_cli_extract_twice(tmp_path, monkeypatch, example_hog: str):
    out_dir = tmp_path / "out"
    out_dir.mkdir()
    monkeypatch.chdir(out_dir)

    _run("-x", example_hog)
    (out_dir / "A.TXT").write_bytes(b"changed")
    result = _run("-x", example_hog)
    assert "A.TXT: skipping (already exists)" in result
    assert "Processed 2 files, extracted 0 files (0 bytes), skipped 2 files." in result
    assert (out_dir / "A.TXT").read_bytes() == b"changed"

    result = _run("-x", "-o", example_hog)
    assert "A.TXT: wrote 2 bytes" in result
    assert (out_dir / "A.TXT").read_bytes() == b"hi"


def test_cli_create(tmp_path):
    sources = write_files(str(tmp_path), EXAMPLE_FILES)
    out_path = tmp_path / "created.hog"
    result = _run("-c", str(out_path), *sources)
    assert out_path.read_bytes() == EXAMPLE_HOG
    assert f'{out_path}: added file "{sources[0]}" (2 bytes).' in result


def test_cli_create_reports_bad_file(tmp_path):
    sources = write_files(str(tmp_path), {"A.TXT": b"hi", "ABCDEFGHI.TXT": b"x"})
    out_path = tmp_path / "created.hog"
    result = _run("-c", str(out_path), *sources)
    assert f'error occurred while appending "{sources[1]}"' in result
    assert out_path.read_bytes() == EXAMPLE_HOG[: 3 + 17 + 2]


def test_cli_extract_and_create_are_exclusive(tmp_path, example_hog: str):
    with pytest.raises(
        (argparse.ArgumentError, relic.core.cli.RelicArgParserError, SystemExit)
    ):
        CLI.run_with("relic", "hog", "-x", "-c", str(tmp_path / "out.hog"), example_hog)
    assert not (tmp_path / "out.hog").exists()

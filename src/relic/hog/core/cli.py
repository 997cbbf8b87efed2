from __future__ import annotations

from argparse import ArgumentParser, Namespace
from logging import Logger
from typing import List, Optional

import relic.core.cli
from fs import open_fs
from relic.core.cli import CliPlugin, RelicArgParser, _SubParsersAction, get_path_validator
from relic.core.logmsg import BraceMessage

from relic.hog.core.definitions import HogRecord
from relic.hog.core.errors import HogError
from relic.hog.core.extraction import (
    HogExtractor,
    create_archive,
    extract_archives,
    list_archives,
)

_SUCCESS = 0
_FAILURE = 1


class RelicHogCli(CliPlugin):
    def _create_parser(
        self, command_group: Optional[_SubParsersAction] = None
    ) -> ArgumentParser:
        parser: ArgumentParser
        desc = """List, extract or create Descent HOG archives.
            Without '--extract' or '--create', prints a summary of each HOG file."""
        if command_group is None:
            parser = RelicArgParser("hog", description=desc)
        else:
            parser = command_group.add_parser("hog", description=desc)

        mode_flags = parser.add_mutually_exclusive_group()
        mode_flags.add_argument(
            "-x",
            "--extract",
            help="Extract the contents of the provided HOG file(s) into the current directory",
            action="store_true",
        )
        mode_flags.add_argument(
            "-c",
            "--create",
            type=get_path_validator(exists=False),
            help="Create a HOG file out of the provided file(s)",
            default=None,
        )
        parser.add_argument(
            "-o",
            "--overwrite",
            help="Overwrite files that already exist when extracting",
            action="store_true",
        )
        parser.add_argument(
            "-v",
            "--verbose",
            help="Display more information during processing",
            action="store_true",
        )
        parser.add_argument(
            "file",
            nargs="+",
            help="The files to operate on (1 or more)",
        )
        return parser

    def command(self, ns: Namespace, *, logger: Logger) -> Optional[int]:
        extract: bool = ns.extract
        create: Optional[str] = ns.create
        overwrite: bool = ns.overwrite
        verbose: bool = ns.verbose
        files: List[str] = ns.file

        if extract and create is not None:  # pragma: nocover
            # argparse rejects this first
            raise relic.core.cli.RelicArgParserError(
                "--extract and --create are mutually exclusive operations."
            )

        if extract:
            return self._extract(files, overwrite, logger=logger)
        if create is not None:
            return self._create(create, files, verbose, logger=logger)
        return self._list(files, verbose, logger=logger)

    @staticmethod
    def _list(files: List[str], verbose: bool, *, logger: Logger) -> int:
        def _on_record(path: str, record: HogRecord) -> None:
            if verbose:
                logger.info(
                    BraceMessage(
                        "  {0}: {1}: {2} bytes", path, record.filename, record.length
                    )
                )

        results = list_archives(files, on_record=_on_record, logger=logger)
        exit_code = _SUCCESS
        for path, result in results.items():
            if isinstance(result, HogError):
                exit_code = _FAILURE
                continue
            logger.info(BraceMessage("{0}: {1}", path, result))
        return exit_code

    @staticmethod
    def _extract(files: List[str], overwrite: bool, *, logger: Logger) -> int:
        def _on_extract(archive: str, record: HogRecord, outcome: str) -> None:
            if outcome == HogExtractor.SKIPPED:
                detail = "skipping (already exists)"
            elif outcome == HogExtractor.FAILED:
                detail = "failed"
            else:
                detail = f"wrote {record.length} bytes"
            logger.info(BraceMessage("  {0}: {1}: {2}", archive, record.filename, detail))

        exit_code = _SUCCESS
        with open_fs(".", writeable=True) as destination:
            extractor = HogExtractor(
                destination, overwrite=overwrite, on_extract=_on_extract, logger=logger
            )
            results = extract_archives(files, extractor, logger=logger)
        for path, result in results.items():
            if isinstance(result, HogError):
                exit_code = _FAILURE
                continue
            if result.files_failed > 0:
                exit_code = _FAILURE
            logger.info(BraceMessage("{0}: {1}", path, result))
        return exit_code

    @staticmethod
    def _create(out_path: str, files: List[str], verbose: bool, *, logger: Logger) -> int:
        def _on_append(source: str, length: int) -> None:
            logger.info(
                BraceMessage('{0}: added file "{1}" ({2} bytes).', out_path, source, length)
            )

        try:
            summary = create_archive(
                out_path, files, on_append=_on_append, logger=logger
            )
        except HogError as e:
            logger.error(
                BraceMessage('error creating output HOG file "{0}": {1}', out_path, e)
            )
            return _FAILURE
        if verbose:
            logger.info(BraceMessage("{0}: {1}", out_path, summary))
        return _FAILURE if summary.files_failed > 0 else _SUCCESS


__all__ = ["RelicHogCli"]

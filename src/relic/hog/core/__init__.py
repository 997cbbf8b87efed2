"""
Read, list and write Descent HOG archives.
"""
from relic.hog.core.definitions import MAGIC_WORD, HogRecord
from relic.hog.core.reader import HogReader, HogRecordCursor
from relic.hog.core.writer import HogWriter

__all__ = [
    "MAGIC_WORD",
    "HogRecord",
    "HogReader",
    "HogRecordCursor",
    "HogWriter",
]

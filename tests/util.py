import os
import tempfile
from typing import Dict, List, Optional


class TempFileHandle:
    def __init__(self, suffix: Optional[str] = None):
        with tempfile.NamedTemporaryFile("x", suffix=suffix, delete=False) as h:
            self._filename = h.name

    @property
    def path(self):
        return self._filename

    def open(self, mode: str):
        return open(self._filename, mode)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        try:
            os.unlink(self._filename)
        except FileNotFoundError:
            pass


def write_files(directory: str, files: Dict[str, bytes]) -> List[str]:
    """Write ``files`` into ``directory``; returns their paths in insertion order."""
    paths = []
    for name, data in files.items():
        path = os.path.join(directory, name)
        with open(path, "wb") as h:
            h.write(data)
        paths.append(path)
    return paths

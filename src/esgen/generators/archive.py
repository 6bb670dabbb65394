"""
Plugin Archive

In-memory zip writer for generated plugins. Entries are deflated and carry a
fixed timestamp, so the same content always produces the same bytes.
"""

import io
import zipfile
from typing import List

from esgen.errors import ArchiveError

# Earliest timestamp the zip format can represent
FIXED_DATE_TIME = (1980, 1, 1, 0, 0, 0)


class PluginArchive:
    """
    Zip container for a plugin.

    Usage:
        archive = PluginArchive()
        archive.write_file("plugin.txt", b"name Example")
        archive.write_dir("data/")
        data = archive.finish()
    """

    def __init__(self):
        self._buffer = io.BytesIO()
        self._zip = zipfile.ZipFile(self._buffer, mode="w", compression=zipfile.ZIP_DEFLATED)
        self.entries: List[str] = []

    def write_file(self, path: str, data: bytes) -> None:
        info = zipfile.ZipInfo(path, date_time=FIXED_DATE_TIME)
        info.compress_type = zipfile.ZIP_DEFLATED
        info.external_attr = 0o644 << 16
        try:
            self._zip.writestr(info, data)
        except (OSError, ValueError, zipfile.BadZipFile) as e:
            raise ArchiveError(f"Could not add `{path}` to archive: {e}") from e
        self.entries.append(path)

    def write_dir(self, path: str) -> None:
        if not path.endswith("/"):
            path = f"{path}/"
        info = zipfile.ZipInfo(path, date_time=FIXED_DATE_TIME)
        info.external_attr = (0o40755 << 16) | 0x10
        try:
            self._zip.writestr(info, b"")
        except (OSError, ValueError, zipfile.BadZipFile) as e:
            raise ArchiveError(f"Could not add directory `{path}` to archive: {e}") from e
        self.entries.append(path)

    def finish(self) -> bytes:
        """Close the archive and return its bytes."""
        try:
            self._zip.close()
        except (OSError, ValueError) as e:
            raise ArchiveError(f"Could not finish archive: {e}") from e
        return self._buffer.getvalue()

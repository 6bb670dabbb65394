"""
Data Folder Loading

Reads a whole game data folder (or an uploaded list of files) into parsed
trees, keeping file order deterministic and collecting parser diagnostics
as advisory messages rather than failures.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Iterator, List, Tuple, Union

from esgen.errors import DataReadError
from esgen.parser.lexer import read_text
from esgen.parser.parser import DataNode, ParseDiagnostic, RootNode, parse_source_recovering

logger = logging.getLogger(__name__)


@dataclass
class DataFolder:
    """Every parsed file of a data folder, in load order."""
    roots: List[RootNode] = field(default_factory=list)
    diagnostics: List[ParseDiagnostic] = field(default_factory=list)

    @property
    def file_count(self) -> int:
        return len(self.roots)

    def root_nodes(self, *keys: str) -> Iterator[DataNode]:
        """Yield top-level nodes of every file, optionally filtered by first token."""
        for root in self.roots:
            yield from root.nodes(*keys)

    def __repr__(self):
        return f"DataFolder({self.file_count} files, {len(self.diagnostics)} diagnostics)"


def read_sources(sources: Iterable[Tuple[str, str]]) -> DataFolder:
    """
    Parse (path, text) pairs, e.g. files uploaded by a front end.

    Pairs are parsed in the order given.
    """
    folder = DataFolder()

    for path, text in sources:
        result = parse_source_recovering(text, path)
        folder.roots.append(result.ast)
        folder.diagnostics.extend(result.diagnostics)

    for diagnostic in folder.diagnostics:
        logger.warning(str(diagnostic))

    if not any(root.children for root in folder.roots):
        raise DataReadError("No data could be read from the provided files")

    return folder


def read_data_folder(path: Union[str, Path]) -> DataFolder:
    """
    Parse every .txt file below path, sorted by relative path.

    Raises:
        DataReadError: if the folder is missing, unreadable, or empty
    """
    path = Path(path)

    if path.is_file():
        files = [path]
    elif path.is_dir():
        files = sorted(p for p in path.rglob("*.txt") if p.is_file())
    else:
        raise DataReadError(f"Data folder not found: {path}")

    logger.info(f"Reading {len(files)} data files from {path}")

    base = path.parent if path.is_file() else path

    sources = []
    for file_path in files:
        try:
            sources.append((file_path.relative_to(base).as_posix(), read_text(str(file_path))))
        except OSError as e:
            raise DataReadError(f"Error reading {file_path}: {e}") from e

    return read_sources(sources)

"""
Shared Generator Plumbing

Every generator reads a data folder, builds synthetic node trees, and
writes them as text files into a plugin archive. This module holds the
parts they share.
"""

import logging
from dataclasses import dataclass, field
from typing import Iterable, List, Optional

from esgen.errors import SerializationError
from esgen.generators.archive import PluginArchive
from esgen.parser import DataFolder, DataNode, ParseDiagnostic, TokenEncodingError, node, write_nodes

logger = logging.getLogger(__name__)


@dataclass
class GenerationResult:
    """A finished plugin archive plus any advisory parser messages."""
    data: bytes
    files: List[str] = field(default_factory=list)
    diagnostics: List[ParseDiagnostic] = field(default_factory=list)

    @property
    def size(self) -> int:
        return len(self.data)


def copy_node(source: DataNode, disallowed_children: Iterable[str] = ()) -> Optional[DataNode]:
    """
    Deep copy a node, dropping any child subtree whose first token is disallowed.

    Returns None for a node without tokens.
    """
    if not source.tokens:
        return None

    disallowed = frozenset(disallowed_children)
    copied = DataNode(tokens=list(source.tokens), line=source.line, column=source.column)

    for child in source.children:
        if child.key in disallowed:
            continue
        child_copy = copy_node(child, disallowed)
        if child_copy is not None:
            copied.children.append(child_copy)

    return copied


class PluginGenerator:
    """
    Base class for generators.

    Subclasses set PLUGIN_NAME / PLUGIN_VERSION, provide description_lines(),
    and implement build() to write their data files.
    """

    PLUGIN_NAME = ""
    PLUGIN_VERSION = "0.1.0"

    def __init__(self):
        self.archive = PluginArchive()

    def description_lines(self) -> List[str]:
        return []

    def build(self, data: DataFolder) -> None:
        raise NotImplementedError

    def generate(self, data: DataFolder) -> GenerationResult:
        """Build the whole plugin and return the archive bytes."""
        self.description()
        self.build(data)
        archive_bytes = self.archive.finish()

        logger.info(f"{self.PLUGIN_NAME}: wrote {len(self.archive.entries)} entries, "
                    f"{len(archive_bytes):,} bytes")

        return GenerationResult(
            data=archive_bytes,
            files=list(self.archive.entries),
            diagnostics=list(data.diagnostics),
        )

    def zip_root_nodes(self, path: str, nodes: Iterable[DataNode]) -> None:
        """
        Serialize nodes and store them at path.

        Raises:
            SerializationError: if any token cannot be written
        """
        try:
            text = write_nodes(nodes)
            payload = text.strip().encode("utf-8")
        except (TokenEncodingError, UnicodeEncodeError) as e:
            raise SerializationError(path, str(e)) from e

        self.archive.write_file(path, payload)
        logger.debug(f"Wrote {path} ({len(payload):,} bytes)")

    def description(self) -> None:
        """Write plugin.txt."""
        nodes = [node("name", self.PLUGIN_NAME)]
        for about in (line.strip() for line in self.description_lines()):
            if about:
                nodes.append(node("about", about))
        nodes.append(node("version", self.PLUGIN_VERSION))

        self.zip_root_nodes("plugin.txt", nodes)

"""
Pytest configuration and shared fixtures.
"""

import io
import sys
import zipfile
from pathlib import Path

import pytest

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

# Import esgen modules
from esgen.parser import DataNode, RootNode, parse_source, read_data_folder, read_sources


# =============================================================================
# PATH FIXTURES
# =============================================================================

@pytest.fixture
def fixtures_dir():
    """Path to test fixtures directory."""
    return Path(__file__).parent / "fixtures"


@pytest.fixture
def data_dir(fixtures_dir):
    """Path to the sample game data folder."""
    return fixtures_dir / "data"


# =============================================================================
# PARSED DATA FIXTURES
# =============================================================================

@pytest.fixture
def sample_data(data_dir):
    """The sample data folder, parsed."""
    return read_data_folder(data_dir)


@pytest.fixture
def two_systems():
    """Scenario data: Sol and Rutilicus linked to each other, no wormholes."""
    return read_sources([("map.txt", TWO_SYSTEMS)])


TWO_SYSTEMS = """\
system Sol
\tpos 0 0
\tlink Rutilicus
system Rutilicus
\tpos 100 0
\tlink Sol
\t"jump range" 50
"""


# =============================================================================
# HELPER FUNCTIONS
# =============================================================================

def data_from(text: str, path: str = "data.txt"):
    """Build a DataFolder from one in-memory file."""
    return read_sources([(path, text)])


def read_archive(data: bytes) -> dict:
    """Return {entry name: decoded text} for every entry in a zip."""
    with zipfile.ZipFile(io.BytesIO(data)) as archive:
        return {name: archive.read(name).decode("utf-8") for name in archive.namelist()}


def parse_entry(data: bytes, name: str) -> RootNode:
    """Parse one text entry of a generated archive."""
    return parse_source(read_archive(data)[name], name)


def find_node(nodes, *tokens) -> DataNode:
    """First node whose leading tokens equal tokens."""
    for current in nodes:
        if tuple(current.tokens[:len(tokens)]) == tokens:
            return current
    return None


def lines_of(nodes) -> list:
    """Token lists of nodes, ignoring children."""
    return [list(n.tokens) for n in nodes]

"""
esgen - Endless Sky plugin generators

Reads the game's data files and writes plugins that remix them, most notably
the System Shuffler, which swaps star systems between seeded presets at
runtime using only missions and events.
"""

__version__ = "0.4.0"
__author__ = "esgen contributors"

from esgen.parser import parse_file, parse_source, read_data_folder
from esgen.generators import generate_full_map, generate_system_shuffler, SystemShufflerConfig

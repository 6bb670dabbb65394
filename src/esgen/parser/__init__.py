"""
esgen.parser - Endless Sky Data File Parser

Lexer, parser and writer for Endless Sky data files.
Converts .txt files into a tree of DataNodes and back.
"""

from esgen.parser.lexer import Lexer, Token, TokenType, LexerError
from esgen.parser.parser import (
    Parser,
    RecoveringParser,
    ParseDiagnostic,
    ParseResult,
    parse_file,
    parse_file_recovering,
    parse_source,
    parse_source_recovering,
    # Tree
    DataNode,
    RootNode,
    node,
    # Writer
    TokenEncodingError,
    WriterOptions,
    encode_token,
    write_nodes,
)
from esgen.parser.data_folder import DataFolder, read_data_folder, read_sources

__all__ = [
    # Lexer
    "Lexer",
    "Token",
    "TokenType",
    "LexerError",
    # Parser
    "Parser",
    "RecoveringParser",
    "ParseDiagnostic",
    "ParseResult",
    "parse_file",
    "parse_file_recovering",
    "parse_source",
    "parse_source_recovering",
    # Tree
    "DataNode",
    "RootNode",
    "node",
    # Writer
    "TokenEncodingError",
    "WriterOptions",
    "encode_token",
    "write_nodes",
    # Data folders
    "DataFolder",
    "read_data_folder",
    "read_sources",
]

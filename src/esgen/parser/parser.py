"""
Endless Sky Data File Parser

Converts a token stream from the lexer into a node tree.
Every line is a DataNode; a line belongs to the closest preceding line with
less indentation.

The tree can be written back to text with write_nodes() / to_text(). Writing
uses only the tokens, so synthetic nodes built by the generators serialize
the same way as parsed ones.
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, Iterator, List, Optional, Sequence

from esgen.errors import EsgenError
from esgen.parser.lexer import Lexer, LexerError, Token, TokenType, read_text


@dataclass(eq=False)
class DataNode:
    """
    One line of a data file: its tokens and the lines indented beneath it.

    Nodes compare by identity. Two ``link Sol`` lines in different files are
    different nodes, which is what attribute bookkeeping relies on.
    """
    tokens: List[str] = field(default_factory=list)
    children: List['DataNode'] = field(default_factory=list)
    line: int = 0
    column: int = 0

    def __repr__(self):
        return f"DataNode({' '.join(self.tokens)!r}, {len(self.children)} children)"

    @property
    def key(self) -> str:
        """The first token, which names what the line is."""
        return self.tokens[0] if self.tokens else ""

    @property
    def size(self) -> int:
        return len(self.tokens)

    def token(self, index: int, default: str = "") -> str:
        if 0 <= index < len(self.tokens):
            return self.tokens[index]
        return default

    @property
    def has_children(self) -> bool:
        return bool(self.children)

    def filter_children(self, predicate: Callable[[List[str]], bool]) -> Iterator['DataNode']:
        """Yield direct children whose token list satisfies the predicate."""
        for child in self.children:
            if predicate(child.tokens):
                yield child

    def children_with(self, *keys: str) -> Iterator['DataNode']:
        """Yield direct children whose first token is one of keys."""
        return self.filter_children(lambda tokens: bool(tokens) and tokens[0] in keys)

    def add(self, *tokens: Any) -> 'DataNode':
        """Append a new child built from tokens and return it."""
        child = DataNode(tokens=[str(t) for t in tokens])
        self.children.append(child)
        return child

    def to_text(self, indent: int = 0, options: 'WriterOptions' = None) -> str:
        """Serialize this node and its children."""
        return write_nodes([self], options, indent)


@dataclass(eq=False)
class RootNode:
    """Root of a parsed file, contains all top-level nodes."""
    children: List[DataNode] = field(default_factory=list)
    filename: str = "<unknown>"

    def __repr__(self):
        return f"Root({self.filename}, {len(self.children)} children)"

    def nodes(self, *keys: str) -> Iterator[DataNode]:
        """Yield top-level nodes, optionally only those whose first token is in keys."""
        for child in self.children:
            if not keys or child.key in keys:
                yield child

    def to_text(self, options: 'WriterOptions' = None) -> str:
        return write_nodes(self.children, options)


def node(*tokens: Any, children: Sequence[DataNode] = ()) -> DataNode:
    """Build a synthetic node. Non-string tokens (numbers) are stringified."""
    return DataNode(tokens=[str(t) for t in tokens], children=list(children))


# =============================================================================
# WRITER
# =============================================================================

class TokenEncodingError(EsgenError, ValueError):
    """A token cannot be represented in the data file syntax."""
    def __init__(self, token: str, reason: str):
        self.token = token
        super().__init__(f"Cannot encode token {token!r}: {reason}")


@dataclass
class WriterOptions:
    """Configuration for the writer."""
    indent_char: str = "\t"   # The game reads tabs or spaces; it writes tabs
    indent_size: int = 1      # Number of indent chars per level


def encode_token(token: str) -> str:
    """
    Quote a token the way the game's own writer does.

    Tokens containing a double quote are wrapped in backticks; empty tokens
    and tokens with whitespace (or a leading #) are wrapped in double quotes.
    """
    if '\n' in token or '\r' in token:
        raise TokenEncodingError(token, "line breaks are not allowed")

    has_double = '"' in token
    has_backtick = '`' in token

    if has_double and has_backtick:
        raise TokenEncodingError(token, "contains both quote characters")
    if has_double:
        return f"`{token}`"
    if not token or token.startswith('#') or has_backtick or any(c in token for c in ' \t'):
        return f'"{token}"'
    return token


def write_nodes(nodes: Iterable[DataNode], options: WriterOptions = None, indent: int = 0) -> str:
    """
    Serialize nodes to data file text.

    Raises:
        TokenEncodingError: if any token cannot be quoted
    """
    options = options or WriterOptions()
    unit = options.indent_char * options.indent_size
    lines: List[str] = []

    def emit(current: DataNode, depth: int) -> None:
        if not current.tokens:
            return
        lines.append(unit * depth + " ".join(encode_token(t) for t in current.tokens))
        for child in current.children:
            emit(child, depth + 1)

    for top in nodes:
        emit(top, indent)

    return "\n".join(lines)


# =============================================================================
# DIAGNOSTICS
# =============================================================================

@dataclass
class ParseDiagnostic:
    """A diagnostic message from parsing (error, warning, or info)."""
    line: int
    column: int
    severity: str  # "error", "warning", "info"
    code: str
    message: str
    filename: str = "<unknown>"

    def __str__(self):
        return f"{self.filename}:{self.line}:{self.column}: {self.severity}: {self.message} [{self.code}]"


@dataclass
class ParseResult:
    """Result of parsing with error recovery."""
    ast: Optional[RootNode]
    diagnostics: List[ParseDiagnostic]
    success: bool

    @property
    def errors(self) -> List[ParseDiagnostic]:
        return [d for d in self.diagnostics if d.severity == "error"]

    @property
    def warnings(self) -> List[ParseDiagnostic]:
        return [d for d in self.diagnostics if d.severity == "warning"]


# =============================================================================
# PARSER
# =============================================================================

class Parser:
    """
    Parser for Endless Sky data files.

    Usage:
        parser = Parser(tokens)
        root = parser.parse()
    """

    def __init__(self, tokens: List[Token], filename: str = "<unknown>"):
        self.tokens = tokens
        self.filename = filename
        self.pos = 0
        self.length = len(tokens)

    def _current(self) -> Optional[Token]:
        """Get current token or None if at end."""
        if self.pos >= self.length:
            return None
        return self.tokens[self.pos]

    def _advance(self) -> Optional[Token]:
        """Advance one token and return the previous one."""
        token = self._current()
        if token is not None:
            self.pos += 1
        return token

    def _check_indent(self, indent: Token) -> None:
        """Hook for indentation diagnostics."""

    def parse(self) -> RootNode:
        """Parse the token stream into a node tree."""
        root = RootNode(filename=self.filename)

        # (indent width, node) pairs; the root sits below every real indent
        stack: List[tuple] = [(-1, None)]

        while True:
            token = self._current()
            if token is None or token.type == TokenType.EOF:
                break

            if token.type != TokenType.INDENT:
                # Comments between lines
                self._advance()
                continue

            indent = self._advance()
            self._check_indent(indent)
            current = self._parse_line(indent)
            width = len(indent.value)

            while stack[-1][0] >= width:
                stack.pop()

            parent = stack[-1][1]
            if parent is None:
                root.children.append(current)
            else:
                parent.children.append(current)
            stack.append((width, current))

        return root

    def _parse_line(self, indent: Token) -> DataNode:
        """Collect the symbols of one line into a node."""
        current = DataNode(line=indent.line, column=len(indent.value) + 1)

        while True:
            token = self._advance()
            if token is None or token.type in (TokenType.NEWLINE, TokenType.EOF):
                break
            if token.type == TokenType.SYMBOL:
                current.tokens.append(token.value)

        return current


class RecoveringParser(Parser):
    """
    Parser that also reports indentation problems.

    The game accepts mixed tabs and spaces but counts each character as one
    level, which is rarely what the author meant.
    """

    def __init__(self, tokens: List[Token], filename: str = "<unknown>"):
        super().__init__(tokens, filename)
        self.diagnostics: List[ParseDiagnostic] = []

    def _check_indent(self, indent: Token) -> None:
        if ' ' in indent.value and '\t' in indent.value:
            self.diagnostics.append(ParseDiagnostic(
                line=indent.line,
                column=1,
                severity="warning",
                code="MIXED_INDENTATION",
                message="Mixed tabs and spaces in indentation",
                filename=self.filename,
            ))


def parse_source(source: str, filename: str = "<unknown>") -> RootNode:
    """Parse source text into a node tree. Raises LexerError on malformed quotes."""
    lexer = Lexer(source, filename)
    tokens = lexer.tokenize_all()
    parser = Parser(tokens, filename)
    return parser.parse()


def parse_source_recovering(source: str, filename: str = "<unknown>") -> ParseResult:
    """
    Parse source with error recovery, collecting all problems.

    Unlike parse_source(), this never raises for content problems and
    returns a ParseResult with both the tree and all diagnostics.

    Args:
        source: Source text
        filename: For diagnostics

    Returns:
        ParseResult with ast, diagnostics, and success flag
    """
    lexer = Lexer(source, filename, strict=False)
    tokens = lexer.tokenize_all()

    diagnostics = [
        ParseDiagnostic(
            line=e.line,
            column=e.column,
            severity="error",
            code="LEXER_ERROR",
            message=e.message,
            filename=filename,
        )
        for e in lexer.errors
    ]

    parser = RecoveringParser(tokens, filename)
    ast = parser.parse()
    diagnostics.extend(parser.diagnostics)
    diagnostics.sort(key=lambda d: (d.line, d.column))

    return ParseResult(
        ast=ast,
        diagnostics=diagnostics,
        success=not any(d.severity == "error" for d in diagnostics),
    )


def parse_file(filepath: str) -> RootNode:
    """Parse a file into a node tree. Handles encoding fallback."""
    return parse_source(read_text(filepath), str(filepath))


def parse_file_recovering(filepath: str) -> ParseResult:
    """Parse a file with error recovery."""
    return parse_source_recovering(read_text(filepath), str(filepath))


__all__ = [
    "DataNode",
    "RootNode",
    "node",
    "TokenEncodingError",
    "WriterOptions",
    "encode_token",
    "write_nodes",
    "ParseDiagnostic",
    "ParseResult",
    "Parser",
    "RecoveringParser",
    "LexerError",
    "parse_source",
    "parse_source_recovering",
    "parse_file",
    "parse_file_recovering",
]

"""
Endless Sky Data File Lexer (Tokenizer)

Converts raw data file text into a stream of tokens.
Handles: indentation, bare words, "double" and `backtick` quoted tokens, comments.

The format is line oriented: every non-blank, non-comment line becomes one
node, and its leading whitespace decides which earlier node it belongs to.
"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Iterator, List, Optional

from esgen.errors import EsgenError


class TokenType(Enum):
    """Types of tokens in an Endless Sky data file."""
    INDENT = auto()     # leading whitespace of a line with content
    SYMBOL = auto()     # system, "jump range", `quoted "text"`
    COMMENT = auto()    # # comment to end of line
    NEWLINE = auto()    # \n
    EOF = auto()        # End of file


QUOTE_CHARS = ('"', '`')


@dataclass
class Token:
    """A single token from the lexer."""
    type: TokenType
    value: str
    line: int
    column: int

    def __repr__(self):
        if self.type == TokenType.NEWLINE:
            return f"Token({self.type.name}, '\\n', L{self.line}:{self.column})"
        return f"Token({self.type.name}, {self.value!r}, L{self.line}:{self.column})"


class LexerError(EsgenError):
    """Error during lexical analysis."""
    def __init__(self, message: str, line: int, column: int):
        self.line = line
        self.column = column
        self.message = message
        super().__init__(f"Lexer error at line {line}, column {column}: {message}")


class Lexer:
    """
    Tokenizer for Endless Sky data files.

    Usage:
        lexer = Lexer(source_text)
        tokens = list(lexer.tokenize())

    With strict=False, problems the game itself tolerates (an unterminated
    quote runs to the end of the line) are collected in ``errors`` instead
    of being raised.
    """

    WHITESPACE = (' ', '\t', '\r')

    def __init__(self, source: str, filename: str = "<unknown>", strict: bool = True):
        self.source = source
        self.filename = filename
        self.strict = strict
        self.errors: List[LexerError] = []
        self.pos = 0
        self.line = 1
        self.column = 1
        self.length = len(source)

    def _current(self) -> Optional[str]:
        """Get current character or None if at end."""
        if self.pos >= self.length:
            return None
        return self.source[self.pos]

    def _advance(self) -> Optional[str]:
        """Advance one character and return it."""
        ch = self._current()
        if ch is not None:
            self.pos += 1
            if ch == '\n':
                self.line += 1
                self.column = 1
            else:
                self.column += 1
        return ch

    def _at_line_end(self) -> bool:
        return self._current() in (None, '\n')

    def _read_indent(self) -> str:
        """Read the leading whitespace of a line (tabs and spaces only)."""
        result = []
        while self._current() in (' ', '\t'):
            result.append(self._advance())
        # A stray carriage return is whitespace, not indentation
        while self._current() == '\r':
            self._advance()
        return ''.join(result)

    def _skip_whitespace(self) -> None:
        """Skip spaces and tabs (but not newlines)."""
        while self._current() in self.WHITESPACE:
            self._advance()

    def _read_quoted(self) -> str:
        """Read a quoted token. There are no escapes: the token ends at the matching quote."""
        start_line = self.line
        start_col = self.column
        quote_char = self._advance()

        result = []
        while True:
            ch = self._current()
            if ch is None or ch == '\n':
                self._problem(f"Unterminated {quote_char} quote", start_line, start_col)
                break
            if ch == quote_char:
                self._advance()
                break
            result.append(ch)
            self._advance()

        return ''.join(result)

    def _read_symbol(self) -> str:
        """Read a bare token, which runs until whitespace."""
        result = []
        while True:
            ch = self._current()
            if ch is None or ch == '\n' or ch in self.WHITESPACE:
                break
            result.append(ch)
            self._advance()
        return ''.join(result)

    def _read_comment(self) -> str:
        """Read a comment from # to end of line."""
        result = []
        # Skip the #
        self._advance()
        while not self._at_line_end():
            result.append(self._advance())
        return ''.join(result).rstrip('\r')

    def _problem(self, message: str, line: int, column: int) -> None:
        error = LexerError(message, line, column)
        if self.strict:
            raise error
        self.errors.append(error)

    def tokenize(self, include_comments: bool = False) -> Iterator[Token]:
        """
        Generate tokens from the source.

        Each line with content yields INDENT, one or more SYMBOLs, then NEWLINE.
        Blank lines and comment-only lines yield nothing (or just a COMMENT).

        Args:
            include_comments: If True, emit COMMENT tokens. Otherwise skip them.
        """
        while self._current() is not None:
            line_start = self.line
            indent = self._read_indent()

            ch = self._current()
            if ch is None:
                break

            if ch == '\n':
                self._advance()
                continue

            if ch == '#':
                comment = self._read_comment()
                if include_comments:
                    yield Token(TokenType.COMMENT, comment, line_start, len(indent) + 1)
                continue

            yield Token(TokenType.INDENT, indent, line_start, 1)

            while True:
                self._skip_whitespace()
                ch = self._current()
                start_col = self.column

                if ch is None or ch == '\n':
                    break

                if ch == '#':
                    comment = self._read_comment()
                    if include_comments:
                        yield Token(TokenType.COMMENT, comment, line_start, start_col)
                    break

                if ch in QUOTE_CHARS:
                    value = self._read_quoted()
                    yield Token(TokenType.SYMBOL, value, line_start, start_col)
                    continue

                value = self._read_symbol()
                yield Token(TokenType.SYMBOL, value, line_start, start_col)

            yield Token(TokenType.NEWLINE, '\n', line_start, self.column)
            if self._current() == '\n':
                self._advance()

        yield Token(TokenType.EOF, '', self.line, self.column)

    def tokenize_all(self, include_comments: bool = False) -> List[Token]:
        """Convenience method to get all tokens as a list."""
        return list(self.tokenize(include_comments))


def read_text(filepath: str) -> str:
    """Read a data file. Handles encoding fallback."""
    # Try UTF-8 with BOM first, then fall back to latin-1 (which always succeeds)
    try:
        with open(filepath, 'r', encoding='utf-8-sig', newline='') as f:
            return f.read()
    except UnicodeDecodeError:
        pass
    with open(filepath, 'r', encoding='latin-1', newline='') as f:
        return f.read()


"""
Tests for the esgen parser module.
"""

import pytest
from esgen.errors import DataReadError
from esgen.parser import (
    Lexer,
    LexerError,
    TokenEncodingError,
    TokenType,
    WriterOptions,
    encode_token,
    node,
    parse_source,
    parse_source_recovering,
    read_data_folder,
    read_sources,
    write_nodes,
)


class TestBasicParsing:
    """Test basic parsing functionality."""

    def test_empty_source(self):
        """Parse empty source."""
        root = parse_source("")
        assert len(root.children) == 0

    def test_single_line(self):
        """One line is one node."""
        root = parse_source("system Sol")
        assert len(root.children) == 1
        assert root.children[0].tokens == ["system", "Sol"]
        assert root.children[0].key == "system"

    def test_nested_lines(self):
        """Indented lines become children of the line above."""
        source = "system Sol\n\tobject Earth\n\t\tsprite planet/earth\n\tpos 0 0\n"
        root = parse_source(source)
        sol = root.children[0]
        assert [c.key for c in sol.children] == ["object", "pos"]
        assert sol.children[0].children[0].tokens == ["sprite", "planet/earth"]

    def test_dedent_returns_to_parent(self):
        """A line returns to whichever ancestor has less indentation."""
        source = "a\n\tb\n\t\tc\n\td\ne\n"
        root = parse_source(source)
        assert [c.key for c in root.children] == ["a", "e"]
        assert [c.key for c in root.children[0].children] == ["b", "d"]

    def test_spaces_count_as_indentation(self):
        """Each whitespace character is one indentation unit."""
        root = parse_source("a\n  b\n c\n")
        a = root.children[0]
        assert [c.key for c in a.children] == ["b", "c"]

    def test_line_numbers(self):
        """Nodes remember the line they came from."""
        root = parse_source("\n\nsystem Sol\n")
        assert root.children[0].line == 3

    def test_crlf_line_endings(self):
        """Windows line endings do not leak into tokens."""
        root = parse_source("system Sol\r\n\tpos 1 2\r\n")
        assert root.children[0].tokens == ["system", "Sol"]
        assert root.children[0].children[0].tokens == ["pos", "1", "2"]


class TestQuoting:
    """Test quoted tokens."""

    def test_double_quotes(self):
        root = parse_source('"jump range" 100')
        assert root.children[0].tokens == ["jump range", "100"]

    def test_backticks(self):
        root = parse_source('description `He said "hi".`')
        assert root.children[0].tokens == ["description", 'He said "hi".']

    def test_empty_quoted_token(self):
        root = parse_source('name ""')
        assert root.children[0].tokens == ["name", ""]

    def test_unterminated_quote_strict(self):
        """The strict parser refuses an unterminated quote."""
        with pytest.raises(LexerError):
            parse_source('name "unterminated')

    def test_unterminated_quote_recovering(self):
        """The recovering parser keeps the token and reports it."""
        result = parse_source_recovering('name "runs to the end\nnext line')
        assert not result.success
        assert result.ast.children[0].tokens == ["name", "runs to the end"]
        assert result.ast.children[1].tokens == ["next", "line"]
        assert result.errors[0].code == "LEXER_ERROR"
        assert result.errors[0].line == 1


class TestComments:
    """Test comment handling."""

    def test_comment_lines_ignored(self):
        """Comment-only lines produce no nodes and do not break nesting."""
        source = "system Sol\n# a comment\n\tpos 0 0\n"
        root = parse_source(source)
        assert len(root.children) == 1
        assert root.children[0].children[0].key == "pos"

    def test_trailing_comment(self):
        root = parse_source("pos 0 0 # origin")
        assert root.children[0].tokens == ["pos", "0", "0"]

    def test_hash_inside_token_is_not_comment(self):
        root = parse_source("color a#b")
        assert root.children[0].tokens == ["color", "a#b"]

    def test_comment_tokens_on_request(self):
        lexer = Lexer("# hello\nsystem Sol")
        types = [t.type for t in lexer.tokenize(include_comments=True)]
        assert types[0] == TokenType.COMMENT
        assert types[-1] == TokenType.EOF


class TestDiagnostics:
    """Test recovering parser diagnostics."""

    def test_mixed_indentation_warning(self):
        result = parse_source_recovering("a\n \tb\n")
        assert result.success
        assert [w.code for w in result.warnings] == ["MIXED_INDENTATION"]
        assert result.warnings[0].line == 2

    def test_diagnostic_string(self):
        result = parse_source_recovering("a\n \tb\n", "map.txt")
        assert str(result.warnings[0]).startswith("map.txt:2:1: warning:")


class TestSerialization:
    """Test writing nodes back to text."""

    def test_encode_plain(self):
        assert encode_token("Sol") == "Sol"

    def test_encode_whitespace(self):
        assert encode_token("jump range") == '"jump range"'

    def test_encode_empty(self):
        assert encode_token("") == '""'

    def test_encode_leading_hash(self):
        assert encode_token("#1") == '"#1"'

    def test_encode_double_quote(self):
        assert encode_token('say "hi"') == '`say "hi"`'

    def test_encode_both_quotes_fails(self):
        with pytest.raises(TokenEncodingError):
            encode_token('"`')

    def test_encode_newline_fails(self):
        with pytest.raises(TokenEncodingError):
            encode_token("a\nb")

    def test_write_nested(self):
        tree = node("system", "Sol", children=[node("pos", 0, 0), node("jump range", 100)])
        assert write_nodes([tree]) == 'system Sol\n\tpos 0 0\n\t"jump range" 100'

    def test_write_with_spaces(self):
        tree = node("a", children=[node("b")])
        assert write_nodes([tree], WriterOptions(indent_char=" ", indent_size=2)) == "a\n  b"

    def test_round_trip(self):
        """Parse and serialize should produce the same text for canonical input."""
        source = 'system "Sol Prime"\n\tobject Earth\n\t\tdescription `A "blue" planet.`\n\tpos 0 0'
        assert parse_source(source).to_text() == source

    def test_add_child(self):
        parent = node("mission", "Test")
        child = parent.add("offer precedence", -5)
        assert child.tokens == ["offer precedence", "-5"]
        assert parent.children == [child]


class TestDataFolder:
    """Test loading whole data folders."""

    def test_read_directory(self, data_dir):
        data = read_data_folder(data_dir)
        assert data.file_count == 2
        systems = [n.token(1) for n in data.root_nodes("system")]
        assert systems == ["Sol", "Rutilicus", "Alpha"]

    def test_files_sorted(self, data_dir):
        data = read_data_folder(data_dir)
        assert [root.filename for root in data.roots] == ["events.txt", "map.txt"]

    def test_read_single_file(self, data_dir):
        data = read_data_folder(data_dir / "map.txt")
        assert data.file_count == 1
        assert data.roots[0].filename == "map.txt"

    def test_missing_folder(self, tmp_path):
        with pytest.raises(DataReadError):
            read_data_folder(tmp_path / "nope")

    def test_empty_sources(self):
        with pytest.raises(DataReadError):
            read_sources([("empty.txt", "# nothing here\n")])

    def test_diagnostics_collected(self):
        data = read_sources([("bad.txt", 'system "Sol\n')])
        assert len(data.diagnostics) == 1
        assert data.diagnostics[0].filename == "bad.txt"


if __name__ == "__main__":
    pytest.main([__file__, "-v"])

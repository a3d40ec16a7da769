"""Tests for error handling paths."""

import tempfile
from pathlib import Path

import pytest

from codenav.core.exceptions import (
    CodeNavError,
    IndexNotReadyError,
    ParseError,
    SnapshotError,
    SymbolNotFoundError,
    UnsupportedOperationError,
)
from codenav.indexing import Indexer, PythonParser
from codenav.model.base import Project, SymbolKind
from codenav.model.languages import PYTHON
from codenav.model.memory import InMemoryCodeModel
from codenav.navigator import Navigator


@pytest.fixture
def temp_dir():
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as td:
        yield Path(td)


@pytest.fixture
def navigator() -> Navigator:
    """Navigator over a model holding a single function."""
    model = InMemoryCodeModel()
    model.declare("run", SymbolKind.FUNCTION, PYTHON, qualified_name="app.run", file="app.py", line=1, end_line=2)
    return Navigator(Project(model, name="app"))


class TestParserErrors:
    """Tests for parser error handling."""

    def test_parse_syntax_error(self, temp_dir: Path) -> None:
        """Test that syntax errors raise ParseError."""
        bad_code = """
def broken(
    # Missing closing paren and colon
"""
        file_path = temp_dir / "bad_syntax.py"
        file_path.write_text(bad_code)

        parser = PythonParser()
        with pytest.raises(ParseError) as exc_info:
            parser.parse(file_path)

        assert "Syntax error" in str(exc_info.value)

    def test_parse_encoding_error(self, temp_dir: Path) -> None:
        """Test that encoding errors raise ParseError."""
        file_path = temp_dir / "bad_encoding.py"
        file_path.write_bytes(b"\xff\xfe invalid utf-8 \x80\x81")

        parser = PythonParser()
        with pytest.raises(ParseError) as exc_info:
            parser.parse(file_path)

        assert "Cannot read" in str(exc_info.value)

    def test_parse_empty_file(self, temp_dir: Path) -> None:
        """Test that empty files parse without error."""
        file_path = temp_dir / "empty.py"
        file_path.write_text("")

        result = PythonParser().parse(file_path)

        assert result.symbols == []
        assert result.bases == []
        assert result.calls == []


class TestIndexerErrors:
    """Tests for indexer error handling."""

    def test_index_file_with_syntax_error(self, temp_dir: Path) -> None:
        file_path = temp_dir / "bad.py"
        file_path.write_text("def broken(")

        with pytest.raises(ParseError):
            Indexer().index_file(file_path)

    def test_index_directory_collects_errors(self, temp_dir: Path) -> None:
        """A bad file is reported in the stats and the run continues."""
        (temp_dir / "good.py").write_text("def foo(): pass")
        (temp_dir / "bad.py").write_text("def broken(")

        indexer = Indexer()
        stats = indexer.index_directory(temp_dir)

        assert stats.files == 1
        assert len(stats.errors) == 1
        assert "Syntax error" in stats.errors[0]
        assert indexer.model.find_by_qualified_name("good.foo") is not None


class TestNavigatorErrors:
    """Tests for target resolution and precondition failures."""

    def test_unknown_name(self, navigator: Navigator) -> None:
        with pytest.raises(SymbolNotFoundError) as exc_info:
            navigator.resolve("nonexistent.symbol")

        assert "nonexistent.symbol" in str(exc_info.value)

    def test_nothing_at_position(self, navigator: Navigator) -> None:
        with pytest.raises(SymbolNotFoundError, match="app.py:40"):
            navigator.resolve(file="app.py", line=40)

    def test_no_target(self, navigator: Navigator) -> None:
        with pytest.raises(SymbolNotFoundError):
            navigator.resolve()

    def test_search_without_matches_is_empty(self, navigator: Navigator) -> None:
        """No matches is an empty result, not an error."""
        assert navigator.find_symbols("zzz") == []


class TestExceptionHierarchy:
    """Tests for exception class hierarchy."""

    @pytest.mark.parametrize(
        "error_type",
        [
            SymbolNotFoundError,
            UnsupportedOperationError,
            IndexNotReadyError,
            SnapshotError,
            ParseError,
        ],
    )
    def test_is_codenav_error(self, error_type: type[Exception]) -> None:
        error = error_type("test")
        assert isinstance(error, CodeNavError)
        assert isinstance(error, Exception)

"""
Tests for diagnostics and the error hierarchy.
"""

import json

import pytest

from minilang import (
    Diagnostic, DiagnosticCollector,
    ScriptError, LexerError, ParserError, ExecutionError,
    SourceLocation, SourceSpan,
)
from minilang.errors import (
    error_unexpected_character,
    error_unexpected_token,
    error_division_by_zero,
    error_step_budget_exceeded,
    error_integer_too_long,
    error_nesting_too_deep,
    error_value_too_large,
    error_nesting_too_deep_at_runtime,
)


def make_span(line=1, col=1, end_col=2, filename=None):
    start = SourceLocation(line, col, col - 1, filename)
    end = SourceLocation(line, end_col, end_col - 1, filename)
    return SourceSpan(start, end)


class TestDiagnostic:
    """Test diagnostic formatting."""

    def test_header(self):
        diag = error_unexpected_character("@", make_span(1, 5, 6))
        assert diag.format(show_source=False) == "1:5: error[E001]: unexpected character '@'"

    def test_header_with_filename(self):
        diag = error_unexpected_character("@", make_span(3, 2, 3, "prog.mini"))
        assert str(diag).startswith("prog.mini:3:2: error[E001]")

    def test_caret_under_span(self):
        diag = error_division_by_zero(make_span(1, 5, 10), "x = 5 / 0;")
        lines = diag.format().splitlines()
        assert lines[2] == "  1 | x = 5 / 0;"
        assert lines[3] == "    |     ^^^^^"

    def test_hints_rendered(self):
        diag = error_step_budget_exceeded(10, make_span())
        assert "= hint:" in diag.format()
        assert "10" in diag.message

    def test_to_json(self):
        diag = error_unexpected_character("@", make_span(2, 3, 4, "f.mini"))
        data = diag.to_json()
        assert data["code"] == "E001"
        assert data["file"] == "f.mini"
        assert data["range"]["start"] == {"line": 2, "column": 3, "offset": 2}
        # Must be serialisable as-is
        json.dumps(data)

    def test_positional_fields(self):
        diag = Diagnostic("E001", "unexpected character '@'", make_span(1, 3, 4))
        assert diag.span.start.column == 3
        assert diag.source_line is None
        assert diag.hints == []


class TestErrorHierarchy:
    """Test exception classes."""

    def test_subclasses(self):
        assert issubclass(LexerError, ScriptError)
        assert issubclass(ParserError, ScriptError)
        assert issubclass(ExecutionError, ScriptError)

    def test_factory_returns_exception(self):
        error = error_unexpected_token("';'", "identifier 'y'", make_span())
        assert isinstance(error, ParserError)
        assert error.diagnostic.code == "E101"
        assert error.diagnostic.message == "expected ';', found identifier 'y'"

    def test_str_is_formatted_diagnostic(self):
        error = error_division_by_zero(make_span(), "1/0")
        assert "error[E401]" in str(error)
        assert error.args[0] == "division by zero"

    def test_limit_codes(self):
        """Conversion and recursion limits have their own codes."""
        assert error_integer_too_long(5000, make_span()).code == "E004"
        assert "5000 digits" in error_integer_too_long(5000, make_span()).message
        assert isinstance(error_nesting_too_deep(make_span()), ParserError)
        assert error_nesting_too_deep(make_span()).diagnostic.code == "E105"
        assert isinstance(error_value_too_large(make_span()), ExecutionError)
        assert error_value_too_large(make_span()).diagnostic.code == "E404"
        assert error_nesting_too_deep_at_runtime(make_span()).diagnostic.code == "E405"


class TestDiagnosticCollector:
    """Test diagnostic aggregation."""

    def test_counts(self):
        collector = DiagnosticCollector()
        collector.add(error_unexpected_character("@", make_span()))
        collector.add_error(error_division_by_zero(make_span()))
        assert collector.error_count == 2
        assert collector.has_errors
        assert len(collector) == 2

    def test_empty(self):
        collector = DiagnosticCollector()
        assert collector.error_count == 0
        assert not collector.has_errors

    def test_should_stop(self):
        collector = DiagnosticCollector(max_errors=2)
        collector.add_error(error_division_by_zero(make_span()))
        assert not collector.should_stop
        collector.add_error(error_division_by_zero(make_span()))
        assert collector.should_stop

    def test_format_all_summary(self):
        collector = DiagnosticCollector()
        collector.extend([
            error_unexpected_character("@", make_span()),
            error_unexpected_character("$", make_span()),
        ])
        assert collector.format_all(show_source=False).endswith("2 error(s)")

    def test_empty_format(self):
        assert DiagnosticCollector().format_all() == ""

    def test_to_json(self):
        collector = DiagnosticCollector()
        collector.add(error_unexpected_character("@", make_span()))
        data = collector.to_json()
        assert data["error_count"] == 1
        assert data["diagnostics"][0]["code"] == "E001"
        assert set(data) == {"diagnostics", "error_count"}


if __name__ == '__main__':
    pytest.main([__file__, '-v'])

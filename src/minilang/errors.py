"""
Interpreter exceptions and diagnostics.

Error code ranges:
- E0xx: Lexer errors
- E1xx: Parser errors
- E4xx: Runtime errors
"""

from dataclasses import dataclass, field
from typing import Optional, List
from .tokens import SourceSpan


@dataclass
class Diagnostic:
    """A single error report with its location."""
    code: str                       # E001, E101, etc.
    message: str                    # Human-readable message
    span: SourceSpan
    source_line: Optional[str] = None   # The actual line of source code
    hints: List[str] = field(default_factory=list)

    def format(self, show_source: bool = True) -> str:
        """Format the diagnostic for display."""
        parts = []

        # Header: location: error[code]: message
        loc = f"{self.span.start}"
        parts.append(f"{loc}: error[{self.code}]: {self.message}")

        # Source line with caret
        if show_source and self.source_line is not None:
            parts.append("  |")
            line_num = str(self.span.start.line)
            parts.append(f"{line_num:>3} | {self.source_line}")

            col = self.span.start.column
            if self.span.start.line == self.span.end.line:
                end_col = self.span.end.column
            else:
                end_col = len(self.source_line) + 1
            underline_len = max(1, end_col - col)
            parts.append(f"    | {' ' * (col - 1)}{'^' * underline_len}")

        for hint in self.hints:
            parts.append(f"    = hint: {hint}")

        return "\n".join(parts)

    def to_json(self) -> dict:
        """Convert to JSON-serializable dict for tooling integration."""
        return {
            "code": self.code,
            "message": self.message,
            "file": self.span.start.filename,
            "range": {
                "start": {
                    "line": self.span.start.line,
                    "column": self.span.start.column,
                    "offset": self.span.start.offset,
                },
                "end": {
                    "line": self.span.end.line,
                    "column": self.span.end.column,
                    "offset": self.span.end.offset,
                },
            },
            "hints": self.hints,
        }

    def __str__(self) -> str:
        return self.format(show_source=False)


class ScriptError(Exception):
    """Base exception for interpreter errors."""

    def __init__(self, diagnostic: Diagnostic):
        self.diagnostic = diagnostic
        super().__init__(diagnostic.message)

    def __str__(self) -> str:
        return self.diagnostic.format()


class LexerError(ScriptError):
    """Error during lexical analysis (E0xx)."""
    pass


class ParserError(ScriptError):
    """Error during parsing (E1xx)."""
    pass


class ExecutionError(ScriptError):
    """Error while executing a program (E4xx)."""
    pass


# --- Lexer error codes ---
# Lexer diagnostics are returned rather than raised: the lexer never aborts,
# it hands the diagnostic to the parser inside an UNKNOWN token.

def error_unexpected_character(char: str, span: SourceSpan, source_line: str = None) -> Diagnostic:
    """E001: Unexpected character."""
    return Diagnostic(
        code="E001",
        message=f"unexpected character {char!r}",
        span=span,
        source_line=source_line,
    )


def error_unterminated_string(span: SourceSpan, source_line: str = None) -> Diagnostic:
    """E002: Unterminated string literal."""
    return Diagnostic(
        code="E002",
        message="unterminated string literal",
        span=span,
        source_line=source_line,
        hints=['string literals must be closed with a matching \'"\''],
    )


def error_reserved_operator(text: str, hint: str, span: SourceSpan,
                            source_line: str = None) -> Diagnostic:
    """E003: Reserved operator."""
    return Diagnostic(
        code="E003",
        message=f"operator '{text}' is reserved",
        span=span,
        source_line=source_line,
        hints=[hint],
    )


def error_integer_too_long(digits: int, span: SourceSpan, source_line: str = None) -> Diagnostic:
    """E004: Integer literal too long to convert."""
    return Diagnostic(
        code="E004",
        message=f"integer literal too long ({digits} digits)",
        span=span,
        source_line=source_line,
    )


# --- Parser error codes ---

def error_unexpected_token(expected: str, found: str, span: SourceSpan,
                           source_line: str = None) -> ParserError:
    """E101: Unexpected token."""
    diag = Diagnostic(
        code="E101",
        message=f"expected {expected}, found {found}",
        span=span,
        source_line=source_line,
    )
    return ParserError(diag)


def error_unexpected_eof(expected: str, span: SourceSpan,
                         source_line: str = None) -> ParserError:
    """E102: Unexpected end of input."""
    diag = Diagnostic(
        code="E102",
        message=f"unexpected end of input, expected {expected}",
        span=span,
        source_line=source_line,
    )
    return ParserError(diag)


def error_invalid_expression(found: str, span: SourceSpan,
                             source_line: str = None) -> ParserError:
    """E103: Invalid expression."""
    diag = Diagnostic(
        code="E103",
        message=f"expected expression, found {found}",
        span=span,
        source_line=source_line,
        hints=["an expression starts with a number, a name, a string or '('"],
    )
    return ParserError(diag)


def error_unknown_statement(found: str, span: SourceSpan,
                            source_line: str = None) -> ParserError:
    """E104: Token starts no statement."""
    diag = Diagnostic(
        code="E104",
        message=f"expected statement, found {found}",
        span=span,
        source_line=source_line,
        hints=["statements are assignments, print, if, while or a '{ ... }' block"],
    )
    return ParserError(diag)


def error_nesting_too_deep(span: SourceSpan, source_line: str = None) -> ParserError:
    """E105: Nesting exceeds the parser's recursion limit."""
    diag = Diagnostic(
        code="E105",
        message="expression or block nesting too deep",
        span=span,
        source_line=source_line,
        hints=["split the expression using intermediate variables"],
    )
    return ParserError(diag)


# --- Runtime error codes ---

def error_division_by_zero(span: SourceSpan, source_line: str = None) -> ExecutionError:
    """E401: Division by zero."""
    diag = Diagnostic(
        code="E401",
        message="division by zero",
        span=span,
        source_line=source_line,
    )
    return ExecutionError(diag)


def error_remainder_by_zero(span: SourceSpan, source_line: str = None) -> ExecutionError:
    """E402: Remainder by zero."""
    diag = Diagnostic(
        code="E402",
        message="remainder by zero",
        span=span,
        source_line=source_line,
    )
    return ExecutionError(diag)


def error_step_budget_exceeded(max_steps: int, span: SourceSpan,
                               source_line: str = None) -> ExecutionError:
    """E403: Step budget exceeded."""
    diag = Diagnostic(
        code="E403",
        message=f"step budget of {max_steps} exceeded",
        span=span,
        source_line=source_line,
        hints=["the program may not terminate; raise max_steps if it is expected to run longer"],
    )
    return ExecutionError(diag)


def error_value_too_large(span: SourceSpan, source_line: str = None) -> ExecutionError:
    """E404: Value too large to print."""
    diag = Diagnostic(
        code="E404",
        message="integer value too large to print as decimal text",
        span=span,
        source_line=source_line,
    )
    return ExecutionError(diag)


def error_nesting_too_deep_at_runtime(span: SourceSpan,
                                      source_line: str = None) -> ExecutionError:
    """E405: Evaluation exceeds the recursion limit."""
    diag = Diagnostic(
        code="E405",
        message="expression or block nesting too deep to execute",
        span=span,
        source_line=source_line,
    )
    return ExecutionError(diag)


class DiagnosticCollector:
    """Collects diagnostics during lexing, parsing and execution."""

    def __init__(self, max_errors: int = 20):
        self.diagnostics: List[Diagnostic] = []
        self.max_errors = max_errors

    def add(self, diagnostic: Diagnostic) -> None:
        """Add a diagnostic."""
        self.diagnostics.append(diagnostic)

    def add_error(self, error: ScriptError) -> None:
        """Add an error exception as a diagnostic."""
        self.add(error.diagnostic)

    def extend(self, diagnostics: List[Diagnostic]) -> None:
        for diagnostic in diagnostics:
            self.add(diagnostic)

    @property
    def error_count(self) -> int:
        return len(self.diagnostics)

    @property
    def has_errors(self) -> bool:
        return bool(self.diagnostics)

    @property
    def should_stop(self) -> bool:
        """Check if we've hit the max error limit."""
        return self.error_count >= self.max_errors

    def __len__(self) -> int:
        return len(self.diagnostics)

    def __iter__(self):
        return iter(self.diagnostics)

    def format_all(self, show_source: bool = True) -> str:
        """Format all diagnostics for display."""
        parts = [d.format(show_source) for d in self.diagnostics]
        if self.diagnostics:
            parts.append(f"{self.error_count} error(s)")
        return "\n\n".join(parts)

    def to_json(self) -> dict:
        """Convert all diagnostics to JSON format."""
        return {
            "diagnostics": [d.to_json() for d in self.diagnostics],
            "error_count": self.error_count,
        }

"""
Lexer for minilang.

Converts source text into tokens on demand. The parser pulls one token at a
time through `next_token()`; `tokenize()` drains the whole stream for tools
and tests.

Supports:
- Identifiers (ASCII letters, then letters or digits) and the keywords
  print, if, else, while
- Decimal integer literals (no sign, no radix prefix)
- Double-quoted string literals without escape processing
- The operators = == <= % + - * / and delimiters ; ( ) { }

The lexer never raises. An unexpected character, a reserved operator, an
unterminated string or an over-long integer literal produces an UNKNOWN
token carrying the diagnostic, and the diagnostic is also recorded in
`Lexer.diagnostics`.
"""

from typing import Iterator, List, Optional

from .tokens import (
    Token, TokenType, SourceLocation, SourceSpan, KEYWORDS,
    SINGLE_CHAR_TOKENS, get_reserved_hint,
)
from .errors import (
    Diagnostic,
    DiagnosticCollector,
    error_unexpected_character,
    error_unterminated_string,
    error_reserved_operator,
    error_integer_too_long,
)
from .tracing import Tracer


def _is_letter(ch: str) -> bool:
    return ch.isascii() and ch.isalpha()


def _is_digit(ch: str) -> bool:
    return '0' <= ch <= '9'


class Lexer:
    """
    Pull-based tokenizer over an immutable source string.

    Usage:
        lexer = Lexer(source_code)
        token = lexer.next_token()

    Or for streaming:
        lexer = Lexer(source_code)
        for token in lexer:
            process(token)
    """

    def __init__(self, source: str, filename: Optional[str] = None,
                 tracer: Optional[Tracer] = None):
        self.source = source
        self.filename = filename
        self.tracer = tracer or Tracer()
        self.pos = 0            # Current position in source
        self.line = 1           # Current line (1-indexed)
        self.column = 1         # Current column (1-indexed)
        self._lines: Optional[List[str]] = None  # Cached line list
        self.diagnostics = DiagnosticCollector()

    @property
    def lines(self) -> List[str]:
        """Lazy-load line list for error reporting."""
        if self._lines is None:
            self._lines = self.source.split('\n')
        return self._lines

    def get_source_line(self, line_num: int) -> Optional[str]:
        """Get a specific line of source (1-indexed)."""
        if 1 <= line_num <= len(self.lines):
            return self.lines[line_num - 1]
        return None

    def _location(self) -> SourceLocation:
        """Get current source location."""
        return SourceLocation(self.line, self.column, self.pos, self.filename)

    def _span(self, start: SourceLocation) -> SourceSpan:
        """Create a span from start to current position."""
        return SourceSpan(start, self._location())

    def _peek(self, offset: int = 0) -> str:
        """Look at character at current position + offset without consuming."""
        idx = self.pos + offset
        if idx >= len(self.source):
            return '\0'
        return self.source[idx]

    def _advance(self) -> str:
        """Consume and return current character."""
        if self.pos >= len(self.source):
            return '\0'
        ch = self.source[self.pos]
        self.pos += 1
        if ch == '\n':
            self.line += 1
            self.column = 1
        else:
            self.column += 1
        return ch

    def _match(self, expected: str) -> bool:
        """Consume character if it matches expected."""
        if not self._is_at_end() and self._peek() == expected:
            self._advance()
            return True
        return False

    def _is_at_end(self) -> bool:
        """Check if we've reached end of source."""
        return self.pos >= len(self.source)

    def _skip_whitespace(self) -> None:
        while not self._is_at_end() and self._peek().isspace():
            self._advance()

    def _make_token(self, token_type: TokenType, value, start: SourceLocation) -> Token:
        """Create a token whose lexeme is the source text from start to here."""
        lexeme = self.source[start.offset:self.pos]
        return Token(token_type, value, lexeme, self._span(start))

    def _unknown(self, diagnostic: Diagnostic, start: SourceLocation) -> Token:
        """Report a lexical problem and hand it to the caller as a token."""
        self.diagnostics.add(diagnostic)
        self.tracer.on_diagnostic(diagnostic)
        return self._make_token(TokenType.UNKNOWN, diagnostic, start)

    def _scan_identifier_or_keyword(self) -> Token:
        """Scan an identifier or keyword (longest match)."""
        start = self._location()

        while _is_letter(self._peek()) or _is_digit(self._peek()):
            self._advance()

        lexeme = self.source[start.offset:self.pos]
        token_type = KEYWORDS.get(lexeme, TokenType.IDENTIFIER)
        return self._make_token(token_type, lexeme, start)

    def _scan_number(self) -> Token:
        """Scan a run of decimal digits."""
        start = self._location()
        while _is_digit(self._peek()):
            self._advance()
        lexeme = self.source[start.offset:self.pos]
        try:
            value = int(lexeme)
        except ValueError:
            # Digit run exceeds the interpreter's int string-conversion limit
            diag = error_integer_too_long(
                len(lexeme), self._span(start), self.get_source_line(start.line)
            )
            return self._unknown(diag, start)
        return self._make_token(TokenType.INT_LITERAL, value, start)

    def _scan_string(self) -> Token:
        """Scan a string literal. The span covers both quotes."""
        start = self._location()
        self._advance()  # consume opening quote
        content_start = self.pos

        while not self._is_at_end() and self._peek() != '"':
            self._advance()

        if self._is_at_end():
            diag = error_unterminated_string(
                self._span(start), self.get_source_line(start.line)
            )
            return self._unknown(diag, start)

        value = self.source[content_start:self.pos]
        self._advance()  # consume closing quote
        return self._make_token(TokenType.STRING_LITERAL, value, start)

    def _scan_token(self) -> Token:
        """Scan the next token."""
        self._skip_whitespace()

        start = self._location()
        if self._is_at_end():
            return self._make_token(TokenType.EOF, None, start)

        ch = self._peek()

        if _is_letter(ch):
            return self._scan_identifier_or_keyword()

        if _is_digit(ch):
            return self._scan_number()

        if ch == '"':
            return self._scan_string()

        self._advance()

        # Two-character operators
        if ch == '=':
            if self._match('='):
                return self._make_token(TokenType.EQ, "==", start)
            return self._make_token(TokenType.ASSIGN, "=", start)
        if ch == '<':
            if self._match('='):
                return self._make_token(TokenType.LE, "<=", start)
            diag = error_reserved_operator(
                ch, get_reserved_hint(ch), self._span(start),
                self.get_source_line(start.line)
            )
            return self._unknown(diag, start)

        if ch in SINGLE_CHAR_TOKENS:
            return self._make_token(SINGLE_CHAR_TOKENS[ch], ch, start)

        diag = error_unexpected_character(
            ch, self._span(start), self.get_source_line(start.line)
        )
        return self._unknown(diag, start)

    def next_token(self) -> Token:
        """Produce the next token. Returns EOF forever once input is exhausted."""
        token = self._scan_token()
        self.tracer.on_token(token)
        return token

    def tokenize(self) -> List[Token]:
        """Tokenize the entire source, returning a list of tokens."""
        return list(self)

    def __iter__(self) -> Iterator[Token]:
        """Iterate over tokens, ending with EOF."""
        while True:
            token = self.next_token()
            yield token
            if token.type == TokenType.EOF:
                break


def tokenize(source: str, filename: Optional[str] = None) -> List[Token]:
    """
    Convenience function to tokenize source code.

    Args:
        source: The source code to tokenize
        filename: Optional filename for error messages

    Returns:
        List of tokens ending with EOF. Lexical problems appear as
        UNKNOWN tokens whose value is the Diagnostic.
    """
    lexer = Lexer(source, filename)
    return lexer.tokenize()

"""
Token types for the minilang lexer.

Token kinds map one-to-one onto the language's lexical grammar:
- identifiers and the four keywords (print, if, else, while)
- decimal integer literals and double-quoted string literals
- the punctuation/operator set = == <= % + - * / ; ( ) { }
- EOF, and UNKNOWN for anything the lexer could not classify

Error code ranges used by diagnostics:
- E0xx: Lexer errors
- E1xx: Parser errors
- E4xx: Runtime errors
"""

from enum import Enum, auto
from dataclasses import dataclass
from typing import Any, Optional


class TokenType(Enum):
    """All token types recognized by the lexer."""

    # --- Literals ---
    INT_LITERAL = auto()        # 42
    STRING_LITERAL = auto()     # "hello"

    # --- Identifiers ---
    IDENTIFIER = auto()         # user-defined names

    # --- Keywords ---
    PRINT = auto()              # print
    IF = auto()                 # if
    ELSE = auto()               # else
    WHILE = auto()              # while

    # --- Arithmetic operators ---
    PLUS = auto()               # +
    MINUS = auto()              # -
    STAR = auto()               # *
    SLASH = auto()              # / (truncating integer division)
    PERCENT = auto()            # %

    # --- Comparison operators ---
    EQ = auto()                 # ==
    LE = auto()                 # <=

    # --- Assignment ---
    ASSIGN = auto()             # =

    # --- Delimiters ---
    SEMICOLON = auto()          # ;
    LPAREN = auto()             # (
    RPAREN = auto()             # )
    LBRACE = auto()             # {
    RBRACE = auto()             # }

    # --- Special ---
    EOF = auto()                # end of input
    UNKNOWN = auto()            # unrecognized character or unterminated string


@dataclass(frozen=True)
class SourceLocation:
    """Represents a position in source code."""
    line: int           # 1-indexed line number
    column: int         # 1-indexed column number
    offset: int         # 0-indexed character offset from start
    filename: Optional[str] = None

    def __str__(self) -> str:
        if self.filename:
            return f"{self.filename}:{self.line}:{self.column}"
        return f"{self.line}:{self.column}"


@dataclass(frozen=True)
class SourceSpan:
    """Represents a range in source code."""
    start: SourceLocation
    end: SourceLocation

    def text(self, source: str) -> str:
        """Slice the spanned text out of the original source buffer."""
        return source[self.start.offset:self.end.offset]

    def __str__(self) -> str:
        if self.start.filename:
            return f"{self.start.filename}:{self.start.line}:{self.start.column}-{self.end.line}:{self.end.column}"
        return f"{self.start.line}:{self.start.column}-{self.end.line}:{self.end.column}"


@dataclass(frozen=True)
class Token:
    """A single token from the lexer."""
    type: TokenType
    value: Any              # int, string contents, name, or a Diagnostic for UNKNOWN
    lexeme: str             # The original source text
    span: SourceSpan        # Location in source

    def __str__(self) -> str:
        if self.type in (TokenType.INT_LITERAL, TokenType.STRING_LITERAL,
                         TokenType.IDENTIFIER):
            return f"{self.type.name}({self.value!r})"
        if self.type == TokenType.UNKNOWN:
            return f"UNKNOWN({self.lexeme!r})"
        return self.type.name


# Keyword mapping - exact, case-sensitive match on the whole identifier
KEYWORDS: dict[str, TokenType] = {
    "print": TokenType.PRINT,
    "if": TokenType.IF,
    "else": TokenType.ELSE,
    "while": TokenType.WHILE,
}


# Single-character punctuation that never needs lookahead
SINGLE_CHAR_TOKENS: dict[str, TokenType] = {
    "%": TokenType.PERCENT,
    "+": TokenType.PLUS,
    "-": TokenType.MINUS,
    "*": TokenType.STAR,
    "/": TokenType.SLASH,
    ";": TokenType.SEMICOLON,
    "(": TokenType.LPAREN,
    ")": TokenType.RPAREN,
    "{": TokenType.LBRACE,
    "}": TokenType.RBRACE,
}


# Operators that look valid but are reserved, with a suggestion
RESERVED_OPERATORS: dict[str, str] = {
    "<": "only '<=' is supported; write 'a <= b - 1' for a strict less-than",
}


# Human-readable names used in "expected X, found Y" messages
TOKEN_DESCRIPTIONS: dict[TokenType, str] = {
    TokenType.INT_LITERAL: "integer literal",
    TokenType.STRING_LITERAL: "string literal",
    TokenType.IDENTIFIER: "identifier",
    TokenType.PRINT: "'print'",
    TokenType.IF: "'if'",
    TokenType.ELSE: "'else'",
    TokenType.WHILE: "'while'",
    TokenType.PLUS: "'+'",
    TokenType.MINUS: "'-'",
    TokenType.STAR: "'*'",
    TokenType.SLASH: "'/'",
    TokenType.PERCENT: "'%'",
    TokenType.EQ: "'=='",
    TokenType.LE: "'<='",
    TokenType.ASSIGN: "'='",
    TokenType.SEMICOLON: "';'",
    TokenType.LPAREN: "'('",
    TokenType.RPAREN: "')'",
    TokenType.LBRACE: "'{'",
    TokenType.RBRACE: "'}'",
    TokenType.EOF: "end of input",
    TokenType.UNKNOWN: "unknown token",
}


def is_keyword(token_type: TokenType) -> bool:
    """Check if a token type represents a keyword."""
    return token_type in KEYWORDS.values()


def describe(token_type: TokenType) -> str:
    """Describe a token type for error messages."""
    return TOKEN_DESCRIPTIONS.get(token_type, token_type.name)


def get_reserved_hint(text: str) -> Optional[str]:
    """Get the suggestion for a reserved operator, if any."""
    return RESERVED_OPERATORS.get(text)

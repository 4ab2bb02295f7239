"""
Recursive descent parser for minilang.

Pulls tokens from a Lexer with exactly one token of lookahead and builds a
Program AST.

Grammar:
    program    := statement* EOF
    statement  := assign | print | if | while | block
    assign     := IDENTIFIER "=" expression ";"
    print      := "print" ( IDENTIFIER | STRING )? ";"
    if         := "if" "(" expression ")" body ( "else" body )?
    while      := "while" "(" expression ")" body
    body       := block | statement
    block      := "{" statement* "}"
    expression := term ( ( "==" | "<=" ) term )*
    term       := factor ( ( "+" | "-" ) factor )*
    factor     := primary ( ( "*" | "/" | "%" ) primary )*
    primary    := INTEGER | IDENTIFIER | STRING | "(" expression ")"

By default the first lexical or syntax error is raised. With recover=True
the parser records the error, skips the broken statement and keeps going,
so one run can report several problems.
"""

from typing import List, Optional
from .tokens import Token, TokenType, SourceSpan, describe, is_keyword
from .lexer import Lexer
from .ast import (
    # Expressions
    Expression, NumberLiteral, StringLiteral, Identifier, BinaryOp,
    # Statements
    Statement, AssignStatement, PrintStatement, IfStatement, WhileStatement,
    Block, Program,
)
from .errors import (
    ScriptError,
    LexerError,
    ParserError,
    Diagnostic,
    DiagnosticCollector,
    error_unexpected_token,
    error_unexpected_eof,
    error_invalid_expression,
    error_unknown_statement,
    error_nesting_too_deep,
)
from .tracing import Tracer


class Parser:
    """
    Recursive descent parser with one token of lookahead.

    Usage:
        parser = Parser(Lexer(source))
        program = parser.parse_program()

    Binary operators are parsed by precedence climbing over three tiers,
    all left-associative:
        Lowest:  == <=
                 + -
        Highest: * / %
    """

    # Operator precedence levels (higher = tighter binding)
    PRECEDENCE = {
        TokenType.EQ: 1,
        TokenType.LE: 1,
        TokenType.PLUS: 2,
        TokenType.MINUS: 2,
        TokenType.STAR: 3,
        TokenType.SLASH: 3,
        TokenType.PERCENT: 3,
    }

    def __init__(self, lexer: Lexer, tracer: Optional[Tracer] = None,
                 recover: bool = False, max_errors: int = 20):
        self.lexer = lexer
        self.tracer = tracer or lexer.tracer
        self.recover = recover
        self.diagnostics = DiagnosticCollector(max_errors)
        self._block_depth = 0
        self.previous: Optional[Token] = None
        self.current: Token = self.lexer.next_token()

    @classmethod
    def from_source(cls, source: str, filename: Optional[str] = None,
                    tracer: Optional[Tracer] = None, recover: bool = False,
                    max_errors: int = 20) -> "Parser":
        """Create a parser with its own lexer over `source`."""
        return cls(Lexer(source, filename, tracer), tracer, recover, max_errors)

    # =========================================================================
    # Token Navigation
    # =========================================================================

    def _check(self, token_type: TokenType) -> bool:
        """Check if current token is of given type."""
        return self.current.type == token_type

    def _advance(self) -> Token:
        """Consume and return current token, pulling the next from the lexer."""
        token = self.current
        self.previous = token
        if token.type != TokenType.EOF:
            self.current = self.lexer.next_token()
        return token

    def _match(self, *token_types: TokenType) -> Optional[Token]:
        """Consume token if it matches any of the given types."""
        if self.current.type in token_types:
            return self._advance()
        return None

    def expect(self, token_type: TokenType, expected: Optional[str] = None) -> Token:
        """Consume a token of the expected type, or raise an error."""
        if self._check(token_type):
            return self._advance()
        self._error(expected or describe(token_type))

    def _source_line(self, token: Token) -> Optional[str]:
        return self.lexer.get_source_line(token.span.start.line)

    def _found(self, token: Token) -> str:
        """Describe a token for 'found X' messages."""
        if token.type == TokenType.IDENTIFIER:
            return f"identifier '{token.lexeme}'"
        if is_keyword(token.type):
            return f"keyword '{token.lexeme}'"
        if token.type in (TokenType.INT_LITERAL, TokenType.STRING_LITERAL):
            return f"{describe(token.type)} {token.lexeme}"
        return describe(token.type)

    def _error_for(self, expected: str) -> ScriptError:
        """Build the error for the current token not being `expected`."""
        token = self.current
        if token.type == TokenType.UNKNOWN:
            return LexerError(token.value)
        if token.type == TokenType.EOF:
            return error_unexpected_eof(expected, token.span, self._source_line(token))
        return error_unexpected_token(
            expected, self._found(token), token.span, self._source_line(token)
        )

    def _fail(self, error: ScriptError) -> None:
        """Record an error and raise it."""
        self.diagnostics.add_error(error)
        if isinstance(error, ParserError):
            # Lexical diagnostics were already reported by the lexer
            self.tracer.on_diagnostic(error.diagnostic)
        raise error

    def _error(self, expected: str) -> None:
        """Raise an error for the current token."""
        self._fail(self._error_for(expected))

    def _span_from(self, start: Token) -> SourceSpan:
        """Create a span from start token to the last consumed token."""
        return SourceSpan(start.span.start, self.previous.span.end)

    def all_diagnostics(self) -> List[Diagnostic]:
        """Lexical and syntax diagnostics together, in source order."""
        seen = {id(d) for d in self.diagnostics}
        merged = list(self.diagnostics)
        merged.extend(d for d in self.lexer.diagnostics if id(d) not in seen)
        return sorted(merged, key=lambda d: d.span.start.offset)

    # =========================================================================
    # Error Recovery
    # =========================================================================

    def _statement_with_recovery(self) -> Optional[Statement]:
        """Parse a statement; in recovery mode, skip it if it is broken."""
        if not self.recover:
            return self._parse_statement()
        try:
            return self._parse_statement()
        except ScriptError:
            if self.diagnostics.should_stop:
                raise
            self._synchronize()
            return None

    def _synchronize(self) -> None:
        """Skip to the end of the broken statement.

        Stops after a ';' or a closing '}' at the statement's own nesting
        level, or in front of the '}' that closes the enclosing block.
        """
        start_offset = self.current.span.start.offset
        depth = 0
        while not self._check(TokenType.EOF):
            if self._check(TokenType.RBRACE) and depth == 0:
                break
            token = self._advance()
            if token.type == TokenType.LBRACE:
                depth += 1
            elif token.type == TokenType.RBRACE:
                depth -= 1
                if depth == 0 and not self._check(TokenType.ELSE):
                    return
            elif token.type == TokenType.SEMICOLON and depth == 0:
                return

        # Step over a stray top-level '}'
        no_progress = self.current.span.start.offset == start_offset
        if no_progress and self._block_depth == 0 and not self._check(TokenType.EOF):
            self._advance()

    # =========================================================================
    # Expression Parsing (Precedence Climbing)
    # =========================================================================

    def _parse_expression(self) -> Expression:
        """Parse an expression."""
        self.tracer.on_rule("expression", self.current)
        return self._parse_binary_expr(1)

    def _parse_binary_expr(self, min_precedence: int) -> Expression:
        """Parse binary expressions with precedence climbing."""
        start = self.current
        left = self._parse_primary()

        while True:
            op_token = self.current
            precedence = self.PRECEDENCE.get(op_token.type)

            if precedence is None or precedence < min_precedence:
                break

            self._advance()  # consume operator

            # All operators are left-associative
            right = self._parse_binary_expr(precedence + 1)

            # Span includes any parentheses around the operands
            left = BinaryOp(
                span=self._span_from(start),
                left=left,
                operator=op_token.type,
                right=right
            )

        return left

    def _parse_primary(self) -> Expression:
        """Parse a literal, a variable reference or a parenthesized expression."""
        token = self.current
        self.tracer.on_rule("primary", token)

        if token.type == TokenType.INT_LITERAL:
            self._advance()
            return NumberLiteral(span=token.span, value=token.value)

        if token.type == TokenType.IDENTIFIER:
            self._advance()
            return Identifier(span=token.span, name=token.value)

        if token.type == TokenType.STRING_LITERAL:
            self._advance()
            return StringLiteral(span=token.span, value=token.value)

        if token.type == TokenType.LPAREN:
            self._advance()
            expr = self._parse_expression()
            self.expect(TokenType.RPAREN, "')'")
            return expr

        if token.type in (TokenType.UNKNOWN, TokenType.EOF):
            self._error("expression")

        self._fail(error_invalid_expression(
            self._found(token), token.span, self._source_line(token)
        ))

    # =========================================================================
    # Statement Parsing
    # =========================================================================

    def _parse_statement(self) -> Statement:
        """Parse a statement."""
        token = self.current
        self.tracer.on_rule("statement", token)

        if token.type == TokenType.IDENTIFIER:
            return self._parse_assign_statement()

        if token.type == TokenType.PRINT:
            return self._parse_print_statement()

        if token.type == TokenType.IF:
            return self._parse_if_statement()

        if token.type == TokenType.WHILE:
            return self._parse_while_statement()

        if token.type == TokenType.LBRACE:
            return self._parse_block()

        if token.type in (TokenType.UNKNOWN, TokenType.EOF):
            self._error("statement")

        self._fail(error_unknown_statement(
            self._found(token), token.span, self._source_line(token)
        ))

    def _parse_assign_statement(self) -> AssignStatement:
        """Parse an assignment: name = expression;"""
        start = self.expect(TokenType.IDENTIFIER, "identifier")
        self.expect(TokenType.ASSIGN, "'='")
        value = self._parse_expression()
        self.expect(TokenType.SEMICOLON, "';'")

        return AssignStatement(
            span=self._span_from(start),
            name=start.value,
            value=value
        )

    def _parse_print_statement(self) -> PrintStatement:
        """Parse a print statement.

        The argument is restricted to a bare variable name or a
        bare string literal; general expressions are not accepted here.
        """
        start = self._advance()  # consume 'print'

        argument = None
        token = self._match(TokenType.IDENTIFIER)
        if token is not None:
            argument = Identifier(span=token.span, name=token.value)
        else:
            token = self._match(TokenType.STRING_LITERAL)
            if token is not None:
                argument = StringLiteral(span=token.span, value=token.value)

        if not self._check(TokenType.SEMICOLON):
            error = self._error_for("';'")
            if isinstance(error, ParserError):
                error.diagnostic.hints.append(
                    "print takes one variable name or one string literal; "
                    "assign an expression to a variable before printing it"
                )
            self._fail(error)
        self._advance()  # consume ';'

        return PrintStatement(span=self._span_from(start), argument=argument)

    def _parse_if_statement(self) -> IfStatement:
        """Parse an if statement with optional else."""
        start = self._advance()  # consume 'if'
        self.expect(TokenType.LPAREN, "'('")
        condition = self._parse_expression()
        self.expect(TokenType.RPAREN, "')'")
        then_branch = self._parse_body()

        else_branch = None
        if self._match(TokenType.ELSE):
            else_branch = self._parse_body()

        return IfStatement(
            span=self._span_from(start),
            condition=condition,
            then_branch=then_branch,
            else_branch=else_branch
        )

    def _parse_while_statement(self) -> WhileStatement:
        """Parse a while loop."""
        start = self._advance()  # consume 'while'
        self.expect(TokenType.LPAREN, "'('")
        condition = self._parse_expression()
        self.expect(TokenType.RPAREN, "')'")
        body = self._parse_body()

        return WhileStatement(
            span=self._span_from(start),
            condition=condition,
            body=body
        )

    def _parse_body(self) -> Block:
        """Parse the body of an if/else/while: a block or a single statement."""
        if self._check(TokenType.LBRACE):
            return self._parse_block()
        statement = self._parse_statement()
        return Block(span=statement.span, statements=(statement,))

    def _parse_block(self) -> Block:
        """Parse a brace-delimited block of statements."""
        start = self.expect(TokenType.LBRACE, "'{'")
        self.tracer.on_rule("block", self.current)
        statements = []

        self._block_depth += 1
        try:
            while not self._check(TokenType.RBRACE) and not self._check(TokenType.EOF):
                statement = self._statement_with_recovery()
                if statement is not None:
                    statements.append(statement)
        finally:
            self._block_depth -= 1

        self.expect(TokenType.RBRACE, "'}'")

        return Block(span=self._span_from(start), statements=tuple(statements))

    # =========================================================================
    # Program Parsing
    # =========================================================================

    def parse_program(self) -> Program:
        """Parse statements until end of input.

        In recovery mode this returns whatever parsed cleanly; check
        `diagnostics.has_errors` (or `all_diagnostics()`) before running it.
        Nesting deeper than the Python recursion limit is reported as E105
        rather than RecursionError.
        """
        start = self.current
        self.tracer.on_rule("program", start)
        statements = []

        try:
            while not self._check(TokenType.EOF):
                statement = self._statement_with_recovery()
                if statement is not None:
                    statements.append(statement)
        except RecursionError:
            error = error_nesting_too_deep(self.current.span, self._source_line(self.current))
            self.diagnostics.add_error(error)
            self.tracer.on_diagnostic(error.diagnostic)
            if not self.recover:
                raise error from None
        except ScriptError:
            if not self.recover:
                raise
            # max_errors reached; stop here with what we have

        return Program(
            span=SourceSpan(start.span.start, self.current.span.end),
            statements=tuple(statements)
        )


def parse(source: str, filename: Optional[str] = None,
          tracer: Optional[Tracer] = None) -> Program:
    """
    Convenience function to parse source code into a program.

    Args:
        source: The source code to parse
        filename: Optional filename for error messages
        tracer: Optional observer for tokens and grammar rules

    Returns:
        Parsed Program AST

    Raises:
        LexerError: On the first unknown character, reserved operator or
            unterminated string the parser reaches
        ParserError: On the first syntax error
    """
    parser = Parser.from_source(source, filename, tracer)
    return parser.parse_program()

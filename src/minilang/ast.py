"""
Abstract Syntax Tree (AST) node definitions for minilang.

Nodes are frozen dataclasses: built bottom-up by the parser, never mutated
afterwards, and each owned by exactly one parent. Statement sequences are
tuples, in execution order.

Expressions:  NumberLiteral | StringLiteral | Identifier | BinaryOp
Statements:   AssignStatement | PrintStatement | IfStatement
              | WhileStatement | Block
"""

from dataclasses import dataclass, fields
from enum import Enum
from typing import Any, List, Optional, Tuple
from abc import ABC
from .tokens import SourceSpan, TokenType


# =============================================================================
# Base Classes
# =============================================================================

@dataclass(frozen=True)
class AstNode(ABC):
    """Base class for all AST nodes."""
    span: SourceSpan  # Source location for error reporting

    def accept(self, visitor: "AstVisitor") -> Any:
        """Accept a visitor for traversal."""
        method_name = f"visit_{self.__class__.__name__}"
        method = getattr(visitor, method_name, visitor.generic_visit)
        return method(self)


class AstVisitor(ABC):
    """Base class for AST visitors."""

    def generic_visit(self, node: AstNode) -> Any:
        """Default visit method."""
        raise NotImplementedError(f"No visitor for {node.__class__.__name__}")


# =============================================================================
# Expression Nodes
# =============================================================================

@dataclass(frozen=True)
class Expression(AstNode):
    """Base class for all expressions."""
    pass


@dataclass(frozen=True)
class NumberLiteral(Expression):
    """An integer literal."""
    value: int


@dataclass(frozen=True)
class StringLiteral(Expression):
    """A string literal. Evaluates to 0 in arithmetic; printed verbatim."""
    value: str


@dataclass(frozen=True)
class Identifier(Expression):
    """A variable reference."""
    name: str


@dataclass(frozen=True)
class BinaryOp(Expression):
    """A binary operation (e.g., a + b, i % 3 == 0)."""
    left: Expression
    operator: TokenType  # PLUS, MINUS, STAR, SLASH, PERCENT, EQ, LE
    right: Expression


# =============================================================================
# Statement Nodes
# =============================================================================

@dataclass(frozen=True)
class Statement(AstNode):
    """Base class for all statements."""
    pass


@dataclass(frozen=True)
class Block(Statement):
    """A brace-delimited sequence of statements.

    Blocks do not open a scope; every statement shares the global store.
    """
    statements: Tuple[Statement, ...]


@dataclass(frozen=True)
class AssignStatement(Statement):
    """An assignment (e.g., x = 5;). Creates or updates the variable."""
    name: str
    value: Expression


@dataclass(frozen=True)
class PrintStatement(Statement):
    """A print statement.

    Syntax:
        print x;        # Identifier argument, prints its integer value
        print "text";   # String literal, printed without quotes
        print;          # No argument, prints nothing
    """
    argument: Optional[Expression] = None


@dataclass(frozen=True)
class IfStatement(Statement):
    """An if statement with an optional else branch."""
    condition: Expression
    then_branch: Block
    else_branch: Optional[Block] = None


@dataclass(frozen=True)
class WhileStatement(Statement):
    """A while loop. The condition is re-evaluated before every iteration."""
    condition: Expression
    body: Block


@dataclass(frozen=True)
class Program(AstNode):
    """A complete parsed program: the top-level statement sequence."""
    statements: Tuple[Statement, ...]


# =============================================================================
# Visitor Helpers
# =============================================================================

class FormatVisitor(AstVisitor):
    """Debug visitor that renders the AST structure as indented text."""

    def __init__(self, indent: int = 0):
        self.indent = indent
        self.lines: List[str] = []

    def _emit(self, text: str) -> None:
        self.lines.append("  " * self.indent + text)

    def _nested(self, node: AstNode, extra: int) -> None:
        child = FormatVisitor(self.indent + extra)
        node.accept(child)
        self.lines.extend(child.lines)

    def generic_visit(self, node: AstNode) -> List[str]:
        self._emit(f"{node.__class__.__name__}")
        for f in fields(node):
            if f.name == "span":
                continue
            value = getattr(node, f.name)
            if isinstance(value, AstNode):
                self._emit(f"  {f.name}:")
                self._nested(value, 2)
            elif isinstance(value, tuple):
                self._emit(f"  {f.name}: [")
                for item in value:
                    self._nested(item, 2)
                self._emit("  ]")
            elif isinstance(value, Enum):
                self._emit(f"  {f.name}: {value.name}")
            else:
                self._emit(f"  {f.name}: {value!r}")
        return self.lines


def format_ast(node: AstNode) -> str:
    """Render an AST node as indented text."""
    visitor = FormatVisitor()
    node.accept(visitor)
    return "\n".join(visitor.lines)


def print_ast(node: AstNode) -> None:
    """Print an AST node for debugging."""
    print(format_ast(node))

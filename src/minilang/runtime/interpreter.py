"""
Tree-walking interpreter for minilang programs.

Executes a parsed Program statement by statement against a VariableStore,
collecting printed lines as it goes.
"""

import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Sequence

from .store import VariableStore
from ..ast import (
    AstNode, Program,
    Statement, AssignStatement, PrintStatement, IfStatement, WhileStatement,
    Block,
    Expression, NumberLiteral, StringLiteral, Identifier, BinaryOp,
)
from ..errors import (
    Diagnostic,
    ScriptError,
    ExecutionError,
    error_division_by_zero,
    error_remainder_by_zero,
    error_step_budget_exceeded,
    error_value_too_large,
    error_nesting_too_deep_at_runtime,
)
from ..tokens import TokenType
from ..tracing import Tracer, LoggingTracer

logger = logging.getLogger(__name__)

OutputCallback = Callable[[str], None]


@dataclass
class ExecutionResult:
    """Result of running a program."""
    success: bool
    output: List[str] = field(default_factory=list)
    diagnostics: List[Diagnostic] = field(default_factory=list)
    variables: Dict[str, int] = field(default_factory=dict)
    steps: int = 0

    @property
    def error_message(self) -> Optional[str]:
        """The first error, formatted on one line, or None."""
        if not self.diagnostics:
            return None
        return self.diagnostics[0].format(show_source=False)

    @property
    def exit_code(self) -> int:
        """Process exit status: 0 on success, 1 on any error."""
        return 0 if self.success else 1


def _truncating_div(a: int, b: int) -> int:
    """Integer quotient rounded toward zero."""
    q = abs(a) // abs(b)
    return q if (a >= 0) == (b >= 0) else -q


def _truncating_mod(a: int, b: int) -> int:
    """Remainder with the sign of the dividend, so a == b * (a / b) + a % b."""
    return a - b * _truncating_div(a, b)


class Interpreter:
    """
    Tree-walking interpreter.

    Usage:
        interpreter = Interpreter()
        result = interpreter.execute(program)
        print("\\n".join(result.output))

    The store is kept between calls to execute(), so a host can run
    several programs against the same variables.
    """

    def __init__(self, store: Optional[VariableStore] = None,
                 tracer: Optional[Tracer] = None,
                 max_steps: Optional[int] = None,
                 output: Optional[OutputCallback] = None):
        """
        Initialize the interpreter.

        Args:
            store: Variable store to run against (a fresh one if omitted)
            tracer: Optional observer for statements, assignments and output
            max_steps: Optional budget of statements plus loop condition checks
            output: Optional callback receiving each printed line immediately
        """
        self.store = store if store is not None else VariableStore()
        self.tracer = tracer or Tracer()
        self.max_steps = max_steps
        self.output = output
        self.steps = 0
        self.lines: List[str] = []
        self._source_lines: Optional[List[str]] = None
        self._statement: Optional[Statement] = None  # Innermost statement started

    def execute(self, program: Program, source: Optional[str] = None) -> ExecutionResult:
        """
        Execute a program.

        Args:
            program: The parsed program
            source: Original source text, used to quote lines in runtime errors

        Returns:
            ExecutionResult with the printed lines and final variables. On a
            runtime error the lines printed before the fault are kept.
        """
        self.steps = 0
        self.lines = []
        self._source_lines = source.split('\n') if source is not None else None
        self._statement = None

        try:
            try:
                self._execute_statements(program.statements)
            except RecursionError:
                node = self._statement or program
                raise error_nesting_too_deep_at_runtime(
                    node.span, self._source_line(node)
                ) from None
        except ExecutionError as e:
            self.tracer.on_diagnostic(e.diagnostic)
            return ExecutionResult(
                success=False,
                output=self.lines,
                diagnostics=[e.diagnostic],
                variables=self.store.snapshot(),
                steps=self.steps,
            )

        return ExecutionResult(
            success=True,
            output=self.lines,
            variables=self.store.snapshot(),
            steps=self.steps,
        )

    def _source_line(self, node: AstNode) -> Optional[str]:
        if self._source_lines is None:
            return None
        line = node.span.start.line
        if 1 <= line <= len(self._source_lines):
            return self._source_lines[line - 1]
        return None

    def _step(self, node: AstNode) -> None:
        """Charge one step against the budget."""
        self.steps += 1
        if self.max_steps is not None and self.steps > self.max_steps:
            raise error_step_budget_exceeded(self.max_steps, node.span, self._source_line(node))

    def _emit(self, line: str) -> None:
        self.lines.append(line)
        self.tracer.on_output(line)
        if self.output is not None:
            self.output(line)

    # =========================================================================
    # Statements
    # =========================================================================

    def _execute_statements(self, statements: Sequence[Statement]) -> None:
        for stmt in statements:
            self._execute_statement(stmt)

    def _execute_statement(self, stmt: Statement) -> None:
        """Execute a statement."""
        self._statement = stmt
        self._step(stmt)
        self.tracer.on_statement(stmt)

        if isinstance(stmt, AssignStatement):
            self._execute_assign(stmt)
        elif isinstance(stmt, PrintStatement):
            self._execute_print(stmt)
        elif isinstance(stmt, IfStatement):
            self._execute_if(stmt)
        elif isinstance(stmt, WhileStatement):
            self._execute_while(stmt)
        elif isinstance(stmt, Block):
            self._execute_statements(stmt.statements)
        else:
            raise RuntimeError(f"Unknown statement type: {type(stmt).__name__}")

    def _execute_assign(self, stmt: AssignStatement) -> None:
        value = self._evaluate(stmt.value)
        self.store.set(stmt.name, value)
        self.tracer.on_assign(stmt.name, value)

    def _execute_print(self, stmt: PrintStatement) -> None:
        """Print a string verbatim, anything else as a decimal integer."""
        argument = stmt.argument
        if argument is None:
            return
        if isinstance(argument, StringLiteral):
            self._emit(argument.value)
        else:
            value = self._evaluate(argument)
            try:
                text = str(value)
            except ValueError:
                # Beyond the int string-conversion limit
                raise error_value_too_large(stmt.span, self._source_line(stmt)) from None
            self._emit(text)

    def _execute_if(self, stmt: IfStatement) -> None:
        if self._evaluate(stmt.condition) != 0:
            self._execute_statements(stmt.then_branch.statements)
        elif stmt.else_branch is not None:
            self._execute_statements(stmt.else_branch.statements)

    def _execute_while(self, stmt: WhileStatement) -> None:
        """Run the body until the condition evaluates to 0.

        Each condition check is charged one step, so a step budget also
        stops loops whose body is empty.
        """
        while True:
            self._step(stmt.condition)
            if self._evaluate(stmt.condition) == 0:
                break
            self._execute_statements(stmt.body.statements)

    # =========================================================================
    # Expressions
    # =========================================================================

    def _evaluate(self, expr: Expression) -> int:
        """Evaluate an expression to an integer."""
        if isinstance(expr, NumberLiteral):
            return expr.value
        elif isinstance(expr, StringLiteral):
            return 0
        elif isinstance(expr, Identifier):
            return self.store.get(expr.name)
        elif isinstance(expr, BinaryOp):
            return self._eval_binary_op(expr)
        else:
            raise RuntimeError(f"Unknown expression type: {type(expr).__name__}")

    def _eval_binary_op(self, op: BinaryOp) -> int:
        """Evaluate a binary operation and the operations nested on its left.

        Left-associative chains such as 1 + 2 + ... + n nest on the left, so
        the left spine is walked in a loop and only right operands recurse.
        Operands are still evaluated left to right.
        """
        spine = []
        node = op
        while isinstance(node, BinaryOp):
            spine.append(node)
            node = node.left

        value = self._evaluate(node)
        for binary in reversed(spine):
            value = self._apply_operator(binary, value, self._evaluate(binary.right))
        return value

    def _apply_operator(self, op: BinaryOp, left: int, right: int) -> int:
        """Apply one operator to evaluated operands. Comparisons yield 1 or 0."""
        if op.operator == TokenType.PLUS:
            return left + right
        elif op.operator == TokenType.MINUS:
            return left - right
        elif op.operator == TokenType.STAR:
            return left * right
        elif op.operator == TokenType.SLASH:
            if right == 0:
                raise error_division_by_zero(op.span, self._source_line(op))
            return _truncating_div(left, right)
        elif op.operator == TokenType.PERCENT:
            if right == 0:
                raise error_remainder_by_zero(op.span, self._source_line(op))
            return _truncating_mod(left, right)
        elif op.operator == TokenType.EQ:
            return 1 if left == right else 0
        elif op.operator == TokenType.LE:
            return 1 if left <= right else 0
        else:
            raise RuntimeError(f"Unknown operator: {op.operator.name}")


# Convenience function for simple execution
def execute(
    program: Program,
    store: Optional[VariableStore] = None,
    tracer: Optional[Tracer] = None,
    max_steps: Optional[int] = None,
    output: Optional[OutputCallback] = None,
    source: Optional[str] = None,
) -> ExecutionResult:
    """
    Execute a parsed program.

    This is a convenience wrapper around Interpreter.execute().
    """
    interpreter = Interpreter(store, tracer, max_steps, output)
    return interpreter.execute(program, source)


def run_source(
    source: str,
    filename: Optional[str] = None,
    config=None,
    tracer: Optional[Tracer] = None,
    output: Optional[OutputCallback] = None,
) -> ExecutionResult:
    """
    Lex, parse and execute source text in one call.

    This is the simplest way to run a program:

        from minilang import run_source

        result = run_source('''
            i = 1;
            while (i <= 3) { print i; i = i + 1; }
        ''')

        if result.success:
            print("\\n".join(result.output))
        else:
            print(f"Error: {result.error_message}")

    A program with any lexical or syntax error is never executed.

    Args:
        source: Program text
        filename: Optional filename for diagnostics
        config: InterpreterConfig (defaults if omitted)
        tracer: Optional observer; a LoggingTracer is used when the config
            enables tracing and none is given
        output: Optional callback receiving each printed line immediately

    Returns:
        ExecutionResult with output, diagnostics and final variables
    """
    from ..config import InterpreterConfig
    from ..parser import Parser

    config = config or InterpreterConfig()
    if tracer is None and config.trace:
        tracer = LoggingTracer()

    parser = Parser.from_source(
        source, filename, tracer, recover=config.recover, max_errors=config.max_errors
    )
    try:
        program = parser.parse_program()
    except ScriptError as e:
        return ExecutionResult(success=False, diagnostics=[e.diagnostic])

    diagnostics = parser.all_diagnostics()
    if diagnostics:
        logger.debug("not executing %s: %d diagnostic(s)", filename or "<source>", len(diagnostics))
        return ExecutionResult(success=False, diagnostics=diagnostics)

    logger.debug("executing %d statement(s)", len(program.statements))
    interpreter = Interpreter(tracer=tracer, max_steps=config.max_steps, output=output)
    return interpreter.execute(program, source)

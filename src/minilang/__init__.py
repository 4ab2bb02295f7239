"""
minilang - a minimal imperative scripting language interpreter.

This module provides:
- Lexer: Pull-based tokenizer over source text
- Parser: Recursive descent parser building an AST
- Interpreter: Tree-walking evaluator over a global variable store
- Tracer: Optional observer hooks for every pipeline stage

Usage:
    from minilang import tokenize, parse, execute, run_source

    # Run source text in one call
    result = run_source('''
        i = 1;
        while (i <= 5) { print i; i = i + 1; }
    ''')
    for line in result.output:
        print(line)

    # Or drive the stages separately
    program = parse('x = 7 / 2; print x;')
    result = execute(program)
    if not result.success:
        for diag in result.diagnostics:
            print(diag)
"""

__version__ = "0.1.0"

from .tokens import (
    Token,
    TokenType,
    SourceLocation,
    SourceSpan,
    KEYWORDS,
    is_keyword,
)

from .lexer import (
    Lexer,
    tokenize,
)

from .ast import (
    # Base classes
    AstNode,
    AstVisitor,
    Expression,
    Statement,
    # Expressions
    NumberLiteral,
    StringLiteral,
    Identifier,
    BinaryOp,
    # Statements
    AssignStatement,
    PrintStatement,
    IfStatement,
    WhileStatement,
    Block,
    Program,
    # Utilities
    format_ast,
    print_ast,
)

from .parser import (
    Parser,
    parse,
)

from .errors import (
    Diagnostic,
    ScriptError,
    LexerError,
    ParserError,
    ExecutionError,
    DiagnosticCollector,
)

from .tracing import (
    Tracer,
    LoggingTracer,
    RecordingTracer,
    setup_logging,
)

from .config import (
    ConfigError,
    InterpreterConfig,
    load_config,
)

from .runtime import (
    VariableStore,
    Interpreter,
    ExecutionResult,
    execute,
    run_source,
)

__all__ = [
    '__version__',

    # Tokens
    'Token',
    'TokenType',
    'SourceLocation',
    'SourceSpan',
    'KEYWORDS',
    'is_keyword',

    # Lexer
    'Lexer',
    'tokenize',

    # AST
    'AstNode',
    'AstVisitor',
    'Expression',
    'Statement',
    'NumberLiteral',
    'StringLiteral',
    'Identifier',
    'BinaryOp',
    'AssignStatement',
    'PrintStatement',
    'IfStatement',
    'WhileStatement',
    'Block',
    'Program',
    'format_ast',
    'print_ast',

    # Parser
    'Parser',
    'parse',

    # Errors
    'Diagnostic',
    'ScriptError',
    'LexerError',
    'ParserError',
    'ExecutionError',
    'DiagnosticCollector',

    # Tracing
    'Tracer',
    'LoggingTracer',
    'RecordingTracer',
    'setup_logging',

    # Configuration
    'ConfigError',
    'InterpreterConfig',
    'load_config',

    # Runtime
    'VariableStore',
    'Interpreter',
    'ExecutionResult',
    'execute',
    'run_source',
]

"""
minilang runtime - tree-walking execution of parsed programs.

This module provides:
- Interpreter: Executes a Program against a variable store
- ExecutionResult: Printed output, diagnostics and final variables
- VariableStore: The single global name -> integer mapping
"""

from .store import VariableStore

from .interpreter import (
    Interpreter,
    ExecutionResult,
    execute,
    run_source,
)

__all__ = [
    # Store
    "VariableStore",
    # Interpreter
    "Interpreter",
    "ExecutionResult",
    "execute",
    "run_source",
]

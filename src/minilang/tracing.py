"""
Optional tracing hooks for the lexer, parser and interpreter.

The pipeline is silent by default. Hosts that want to watch what happens
pass a Tracer:

    from minilang import run_source, LoggingTracer, setup_logging

    setup_logging("DEBUG")
    run_source(source, tracer=LoggingTracer())

RecordingTracer keeps every event in memory, which is what tests and
embedding hosts usually want.
"""

import json
import logging
from datetime import datetime
from typing import Any, List, Optional, Tuple, Union

from .tokens import Token
from .errors import Diagnostic


class Tracer:
    """Observer interface. Every hook is a no-op; override what you need."""

    def on_token(self, token: Token) -> None:
        """A token was produced by the lexer."""

    def on_rule(self, rule: str, token: Token) -> None:
        """The parser entered a grammar rule with `token` as lookahead."""

    def on_diagnostic(self, diagnostic: Diagnostic) -> None:
        """A lexical, syntax or runtime diagnostic was reported."""

    def on_statement(self, statement: Any) -> None:
        """The interpreter is about to execute a statement."""

    def on_assign(self, name: str, value: int) -> None:
        """A variable was written."""

    def on_output(self, line: str) -> None:
        """A print statement produced a line."""


class LoggingTracer(Tracer):
    """Forwards trace events to the standard logging module."""

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger("minilang.trace")

    def on_token(self, token: Token) -> None:
        self.logger.debug("token %s at %s", token, token.span.start)

    def on_rule(self, rule: str, token: Token) -> None:
        self.logger.debug("parse %s, lookahead %s", rule, token)

    def on_diagnostic(self, diagnostic: Diagnostic) -> None:
        self.logger.warning("%s", diagnostic.format(show_source=False))

    def on_statement(self, statement: Any) -> None:
        self.logger.debug("exec %s at %s", type(statement).__name__, statement.span.start)

    def on_assign(self, name: str, value: int) -> None:
        self.logger.debug("assign %s = %d", name, value)

    def on_output(self, line: str) -> None:
        self.logger.debug("output %r", line)


class RecordingTracer(Tracer):
    """Keeps (event, payload) tuples in order of arrival."""

    def __init__(self):
        self.events: List[Tuple[str, Any]] = []

    def on_token(self, token: Token) -> None:
        self.events.append(("token", token))

    def on_rule(self, rule: str, token: Token) -> None:
        self.events.append(("rule", rule))

    def on_diagnostic(self, diagnostic: Diagnostic) -> None:
        self.events.append(("diagnostic", diagnostic))

    def on_statement(self, statement: Any) -> None:
        self.events.append(("statement", statement))

    def on_assign(self, name: str, value: int) -> None:
        self.events.append(("assign", (name, value)))

    def on_output(self, line: str) -> None:
        self.events.append(("output", line))

    def of_kind(self, event: str) -> List[Any]:
        """Payloads of every recorded event of one kind."""
        return [payload for kind, payload in self.events if kind == event]


class JSONFormatter(logging.Formatter):
    """JSON formatter for structured logging."""

    def format(self, record):
        log_entry = {
            "timestamp": datetime.fromtimestamp(record.created).isoformat() + "Z",
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_entry)


def setup_logging(level: Union[int, str] = logging.WARNING,
                  log_file: Optional[str] = None,
                  json_format: bool = False) -> logging.Logger:
    """Configure the `minilang` logger tree and return its root logger."""
    if isinstance(level, str):
        name = level
        level = logging.getLevelName(name.upper())
        if not isinstance(level, int):
            raise ValueError(f"unknown log level: {name}")

    logger = logging.getLogger("minilang")
    logger.setLevel(level)

    # Remove existing handlers so repeated setup does not duplicate output
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)

    if json_format:
        formatter = JSONFormatter()
    else:
        formatter = logging.Formatter("%(levelname)s %(name)s: %(message)s")

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    console_handler.setLevel(level)
    logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(formatter)
        file_handler.setLevel(level)
        logger.addHandler(file_handler)

    return logger

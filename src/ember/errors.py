"""
Ember exceptions and diagnostics.

Error code ranges:
- E0xx: Scan errors
- E1xx: Parse errors
- E4xx: Eval errors
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, List
from .tokens import SourceSpan


class ErrorSeverity(Enum):
    """Severity levels for diagnostics."""
    ERROR = "error"
    WARNING = "warning"


class Stage(Enum):
    """Pipeline stage a diagnostic came from."""
    SCAN = "Scan"
    PARSE = "Parse"
    EVAL = "Eval"


@dataclass
class Diagnostic:
    """A single diagnostic message."""
    code: str                       # E001, E101, etc.
    message: str                    # Human-readable message
    stage: Stage
    span: SourceSpan
    severity: ErrorSeverity = ErrorSeverity.ERROR
    source_line: Optional[str] = None   # The actual line of source code
    hints: List[str] = field(default_factory=list)

    @property
    def line(self) -> int:
        return self.span.start.line

    def summary(self) -> str:
        """One-line form: ``[line N] Stage error: message``."""
        return f"[line {self.line}] {self.stage.value} {self.severity.value}: {self.message}"

    def format(self, show_source: bool = True) -> str:
        """Format the diagnostic for display."""
        parts = []

        # Header: location: severity[code]: message
        loc = f"{self.span.start}"
        parts.append(f"{loc}: {self.stage.value} {self.severity.value}[{self.code}]: {self.message}")

        # Source line with caret
        if show_source and self.source_line is not None:
            parts.append("  |")
            line_num = str(self.span.start.line)
            parts.append(f"{line_num:>3} | {self.source_line}")

            col = self.span.start.column
            end_col = self.span.end.column if self.span.start.line == self.span.end.line else len(self.source_line) + 1
            underline_len = max(1, end_col - col)
            parts.append(f"    | {' ' * (col - 1)}{'^' * underline_len}")

        for hint in self.hints:
            parts.append(f"    = hint: {hint}")

        return "\n".join(parts)

    def to_json(self) -> dict:
        """Convert to JSON-serializable dict for tooling integration."""
        return {
            "code": self.code,
            "stage": self.stage.value,
            "message": self.message,
            "severity": self.severity.value,
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


class EmberError(Exception):
    """Base exception for language errors."""

    def __init__(self, diagnostic: Diagnostic):
        self.diagnostic = diagnostic
        super().__init__(diagnostic.message)

    @property
    def line(self) -> int:
        return self.diagnostic.line

    def __str__(self) -> str:
        return self.diagnostic.summary()


class ScanError(EmberError):
    """Error during lexical analysis (E0xx)."""
    pass


class ParseError(EmberError):
    """Error during parsing (E1xx)."""
    pass


class EvalError(EmberError):
    """Error during evaluation (E4xx)."""
    pass


# --- Scan error codes ---

def error_unexpected_character(char: str, span: SourceSpan, source_line: str = None) -> ScanError:
    """E001: Unexpected character."""
    diag = Diagnostic(
        code="E001",
        message=f"unexpected character '{char}'",
        stage=Stage.SCAN,
        span=span,
        source_line=source_line,
    )
    return ScanError(diag)


def error_unterminated_string(span: SourceSpan, source_line: str = None) -> ScanError:
    """E002: Unterminated string literal."""
    diag = Diagnostic(
        code="E002",
        message="unterminated string",
        stage=Stage.SCAN,
        span=span,
        source_line=source_line,
        hints=["string literals must be closed with a matching '\"'"],
    )
    return ScanError(diag)


# --- Parse error codes ---

def error_expected_token(expected: str, found: str, span: SourceSpan,
                         source_line: str = None) -> ParseError:
    """E101: Expected a specific token."""
    diag = Diagnostic(
        code="E101",
        message=f"expected {expected}, found {found}",
        stage=Stage.PARSE,
        span=span,
        source_line=source_line,
    )
    return ParseError(diag)


def error_unexpected_eof(expected: str, span: SourceSpan) -> ParseError:
    """E102: Unexpected end of input."""
    diag = Diagnostic(
        code="E102",
        message=f"unexpected end of input, expected {expected}",
        stage=Stage.PARSE,
        span=span,
    )
    return ParseError(diag)


def error_expected_expression(found: str, span: SourceSpan, source_line: str = None,
                              hint: str = None) -> ParseError:
    """E103: Token cannot start an expression."""
    diag = Diagnostic(
        code="E103",
        message=f"expected expression, found {found}",
        stage=Stage.PARSE,
        span=span,
        source_line=source_line,
        hints=[hint] if hint else [],
    )
    return ParseError(diag)


def error_invalid_assignment_target(span: SourceSpan, source_line: str = None) -> ParseError:
    """E104: Left-hand side of '=' is not a variable."""
    diag = Diagnostic(
        code="E104",
        message="invalid assignment target",
        stage=Stage.PARSE,
        span=span,
        source_line=source_line,
        hints=["only a bare variable name can be assigned to"],
    )
    return ParseError(diag)


def error_unterminated_block(span: SourceSpan, source_line: str = None) -> ParseError:
    """E105: Block is missing its closing brace."""
    diag = Diagnostic(
        code="E105",
        message="expected '}' after block",
        stage=Stage.PARSE,
        span=span,
        source_line=source_line,
    )
    return ParseError(diag)


def error_nested_too_deeply(span: SourceSpan, source_line: str = None) -> ParseError:
    """E106: Nesting exceeds what the parser can recurse through."""
    diag = Diagnostic(
        code="E106",
        message="expression nested too deeply",
        stage=Stage.PARSE,
        span=span,
        source_line=source_line,
    )
    return ParseError(diag)


# --- Eval error codes ---

def error_operand_type(message: str, span: SourceSpan, source_line: str = None) -> EvalError:
    """E401: Operator applied to operands of the wrong type."""
    diag = Diagnostic(
        code="E401",
        message=message,
        stage=Stage.EVAL,
        span=span,
        source_line=source_line,
    )
    return EvalError(diag)


def error_undefined_variable(name: str, span: SourceSpan, source_line: str = None) -> EvalError:
    """E402: Reference to an undefined variable."""
    diag = Diagnostic(
        code="E402",
        message=f"undefined variable '{name}'",
        stage=Stage.EVAL,
        span=span,
        source_line=source_line,
    )
    return EvalError(diag)


def error_undefined_assignment(name: str, span: SourceSpan, source_line: str = None) -> EvalError:
    """E403: Assignment to a variable that was never declared."""
    diag = Diagnostic(
        code="E403",
        message=f"assignment to undefined variable '{name}'",
        stage=Stage.EVAL,
        span=span,
        source_line=source_line,
        hints=[f"declare it first with 'var {name} = ...;'"],
    )
    return EvalError(diag)


def error_evaluation_too_deep(span: SourceSpan, source_line: str = None) -> EvalError:
    """E404: Statement nests deeper than the evaluator can recurse through."""
    diag = Diagnostic(
        code="E404",
        message="expression nested too deeply",
        stage=Stage.EVAL,
        span=span,
        source_line=source_line,
    )
    return EvalError(diag)


class DiagnosticCollector:
    """Collects diagnostics across the pipeline."""

    def __init__(self, max_errors: int = 20):
        self.diagnostics: List[Diagnostic] = []
        self.max_errors = max_errors
        self._error_count = 0

    def add(self, diagnostic: Diagnostic) -> None:
        """Add a diagnostic."""
        self.diagnostics.append(diagnostic)
        if diagnostic.severity == ErrorSeverity.ERROR:
            self._error_count += 1

    def add_error(self, error: EmberError) -> None:
        """Add an error exception as a diagnostic."""
        self.add(error.diagnostic)

    @property
    def error_count(self) -> int:
        return self._error_count

    @property
    def warning_count(self) -> int:
        return sum(1 for d in self.diagnostics if d.severity == ErrorSeverity.WARNING)

    @property
    def has_errors(self) -> bool:
        return self._error_count > 0

    @property
    def should_stop(self) -> bool:
        """Check if we've hit the max error limit."""
        return self._error_count >= self.max_errors

    def summaries(self) -> List[str]:
        return [d.summary() for d in self.diagnostics]

    def format_all(self, show_source: bool = True) -> str:
        """Format all diagnostics for display."""
        parts = [d.format(show_source) for d in self.diagnostics]
        if self._error_count > 0:
            parts.append(f"{self._error_count} error(s), {self.warning_count} warning(s)")
        elif self.warning_count > 0:
            parts.append(f"{self.warning_count} warning(s)")
        return "\n\n".join(parts)

    def to_json(self) -> dict:
        """Convert all diagnostics to JSON format."""
        return {
            "diagnostics": [d.to_json() for d in self.diagnostics],
            "error_count": self._error_count,
            "warning_count": self.warning_count,
        }

"""
Tree-walking interpreter for Ember.

Executes statements against an Environment and evaluates expressions to
runtime values. ``run_source`` wires the full lex -> parse -> evaluate
pipeline for one unit of source text.
"""

import math
import operator
import sys
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterator, List, Optional, TextIO

from .environment import Environment, UndefinedVariable
from .values import (
    Value, is_number, is_string, is_boolean, type_name, values_equal, stringify,
)
from ..ast import (
    Stmt, ExpressionStatement, PrintStatement, VarDeclaration, Block,
    Expr, Literal, Grouping, Unary, Binary, Variable, Assign,
)
from ..errors import (
    EvalError, ScanError, DiagnosticCollector,
    error_operand_type, error_undefined_variable, error_undefined_assignment,
    error_evaluation_too_deep,
)
from ..lexer import tokenize
from ..parser import parse
from ..tokens import Token, TokenType


@dataclass
class ExecutionResult:
    """Outcome of running one unit of source."""
    success: bool
    diagnostics: DiagnosticCollector = field(default_factory=DiagnosticCollector)
    statements_executed: int = 0

    def error_lines(self) -> Iterator[str]:
        """``[line N] Stage error: message`` for each diagnostic, in order."""
        for diagnostic in self.diagnostics.diagnostics:
            yield diagnostic.summary()

    @property
    def error_message(self) -> Optional[str]:
        """The first error line, if any."""
        return next(self.error_lines(), None)


# Number x Number -> Number
ARITHMETIC: Dict[TokenType, Callable[[float, float], float]] = {
    TokenType.MINUS: operator.sub,
    TokenType.STAR: operator.mul,
}

# Number x Number -> Boolean
COMPARISON: Dict[TokenType, Callable[[float, float], bool]] = {
    TokenType.GREATER: operator.gt,
    TokenType.GREATER_EQUAL: operator.ge,
    TokenType.LESS: operator.lt,
    TokenType.LESS_EQUAL: operator.le,
}


def _divide(left: float, right: float) -> float:
    """IEEE division: x/0 is +-inf, 0/0 is NaN."""
    if right == 0.0:
        if left == 0.0 or math.isnan(left):
            return math.nan
        # Sign follows both operands, including a negative zero divisor
        negative = (math.copysign(1.0, left) < 0) != (math.copysign(1.0, right) < 0)
        return -math.inf if negative else math.inf
    return left / right


class Interpreter:
    """
    Tree-walking interpreter.

    Owns the environment chain; nothing else reads or writes it while a
    program runs. ``print`` output goes to ``output`` (stdout by default).
    """

    def __init__(self, output: Optional[TextIO] = None, source: str = ""):
        self.output = output if output is not None else sys.stdout
        self.environment = Environment()
        self.source_lines = source.splitlines() if source else []

    # =========================================================================
    # Program
    # =========================================================================

    def interpret(self, statements: List[Stmt]) -> ExecutionResult:
        """Run statements in order; stop at the first EvalError."""
        result = ExecutionResult(success=True)
        for stmt in statements:
            try:
                self.execute(stmt)
            except EvalError as e:
                result.diagnostics.add_error(e)
                result.success = False
                break
            except RecursionError:
                result.diagnostics.add_error(error_evaluation_too_deep(
                    stmt.span, self._source_line(stmt.span.line)
                ))
                result.success = False
                break
            result.statements_executed += 1
        return result

    # =========================================================================
    # Statements
    # =========================================================================

    def execute(self, stmt: Stmt) -> None:
        """Execute a statement."""
        if isinstance(stmt, ExpressionStatement):
            self.evaluate(stmt.expression)
        elif isinstance(stmt, PrintStatement):
            value = self.evaluate(stmt.expression)
            self.output.write(stringify(value) + "\n")
        elif isinstance(stmt, VarDeclaration):
            value = self.evaluate(stmt.initializer)
            self.environment.define(stmt.name.lexeme, value)
        elif isinstance(stmt, Block):
            self._execute_block(stmt)
        else:
            raise RuntimeError(f"Unknown statement type: {type(stmt).__name__}")

    def _execute_block(self, block: Block) -> None:
        with self.environment.new_scope():
            for stmt in block.statements:
                self.execute(stmt)

    # =========================================================================
    # Expressions
    # =========================================================================

    def evaluate(self, expr: Expr) -> Value:
        """Evaluate an expression to produce a value."""
        if isinstance(expr, Literal):
            return expr.value
        elif isinstance(expr, Grouping):
            return self.evaluate(expr.expression)
        elif isinstance(expr, Unary):
            return self._eval_unary(expr)
        elif isinstance(expr, Binary):
            return self._eval_binary(expr)
        elif isinstance(expr, Variable):
            return self._eval_variable(expr)
        elif isinstance(expr, Assign):
            return self._eval_assign(expr)
        else:
            raise RuntimeError(f"Unknown expression type: {type(expr).__name__}")

    def _eval_unary(self, expr: Unary) -> Value:
        right = self.evaluate(expr.right)
        op = expr.operator

        if op.type == TokenType.MINUS:
            if not is_number(right):
                raise self._operand_error(op, f"operand of '-' must be a number, got {type_name(right)}")
            return -right
        if op.type == TokenType.BANG:
            if not is_boolean(right):
                raise self._operand_error(op, f"operand of '!' must be a boolean, got {type_name(right)}")
            return not right

        raise RuntimeError(f"Unknown unary operator: {op.type}")

    def _eval_binary(self, expr: Binary) -> Value:
        left = self.evaluate(expr.left)
        right = self.evaluate(expr.right)
        op = expr.operator

        if op.type == TokenType.EQUAL_EQUAL:
            return values_equal(left, right)
        if op.type == TokenType.BANG_EQUAL:
            return not values_equal(left, right)

        if op.type == TokenType.PLUS:
            if is_number(left) and is_number(right):
                return left + right
            if is_string(left) and is_string(right):
                return left + right
            raise self._operand_error(
                op, f"operands of '+' must be two numbers or two strings, "
                    f"got {type_name(left)} and {type_name(right)}"
            )

        if op.type in ARITHMETIC or op.type in COMPARISON or op.type == TokenType.SLASH:
            if not (is_number(left) and is_number(right)):
                raise self._operand_error(
                    op, f"operands of '{op.lexeme}' must be numbers, "
                        f"got {type_name(left)} and {type_name(right)}"
                )
            if op.type == TokenType.SLASH:
                return _divide(left, right)
            if op.type in ARITHMETIC:
                return ARITHMETIC[op.type](left, right)
            return COMPARISON[op.type](left, right)

        raise RuntimeError(f"Unknown binary operator: {op.type}")

    def _eval_variable(self, expr: Variable) -> Value:
        try:
            return self.environment.retrieve(expr.name.lexeme)
        except UndefinedVariable:
            raise error_undefined_variable(
                expr.name.lexeme, expr.name.span, self._source_line(expr.name.line)
            ) from None

    def _eval_assign(self, expr: Assign) -> Value:
        value = self.evaluate(expr.value)
        try:
            self.environment.assign(expr.name.lexeme, value)
        except UndefinedVariable:
            raise error_undefined_assignment(
                expr.name.lexeme, expr.name.span, self._source_line(expr.name.line)
            ) from None
        return value

    # =========================================================================
    # Helpers
    # =========================================================================

    def _operand_error(self, op: Token, message: str) -> EvalError:
        return error_operand_type(message, op.span, self._source_line(op.line))

    def _source_line(self, line_num: int) -> Optional[str]:
        """Get a source line for error messages."""
        if 1 <= line_num <= len(self.source_lines):
            return self.source_lines[line_num - 1]
        return None


def execute(statements: List[Stmt], output: Optional[TextIO] = None) -> ExecutionResult:
    """
    Execute already-parsed statements with a fresh interpreter.

    Args:
        statements: Program from the parser
        output: Stream for print output (default stdout)

    Returns:
        ExecutionResult; on an EvalError, success is False
    """
    return Interpreter(output).interpret(statements)


def run_source(
    source: str,
    output: Optional[TextIO] = None,
    filename: Optional[str] = None,
    max_errors: int = 20,
) -> ExecutionResult:
    """
    Run one unit of source text through the whole pipeline.

    A scan error stops immediately. Parse errors are all collected and the
    program is not executed. Otherwise statements run until the first
    EvalError.

    Args:
        source: Program text
        output: Stream for print output (default stdout)
        filename: Optional filename for diagnostics
        max_errors: Cap on collected parse errors

    Returns:
        ExecutionResult with success flag and diagnostics
    """
    try:
        tokens = tokenize(source, filename)
    except ScanError as e:
        result = ExecutionResult(success=False)
        result.diagnostics.add_error(e)
        return result

    parsed = parse(tokens, filename, source, max_errors)
    if parsed.has_errors:
        return ExecutionResult(success=False, diagnostics=parsed.diagnostics)

    interpreter = Interpreter(output, source)
    return interpreter.interpret(parsed.statements)

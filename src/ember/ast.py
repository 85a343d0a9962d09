"""
Abstract Syntax Tree (AST) node definitions for Ember.

The grammar is closed, so nodes are a fixed set of dataclasses grouped into
two unions, ``Expr`` and ``Stmt``. Consumers dispatch with ``isinstance``
over the union members; there is no visitor machinery. Child nodes are owned
by their parent and never shared.
"""

from dataclasses import dataclass, field, fields
from typing import List, Union

from .tokens import SourceSpan, Token


# =============================================================================
# Expression Nodes
# =============================================================================

@dataclass(frozen=True)
class Literal:
    """A literal value: float, str, bool, or None for nil."""
    span: SourceSpan
    value: Union[float, str, bool, None]


@dataclass(frozen=True)
class Grouping:
    """A parenthesized expression."""
    span: SourceSpan
    expression: "Expr"


@dataclass(frozen=True)
class Unary:
    """A prefix operation (e.g., -n, !flag)."""
    span: SourceSpan
    operator: Token
    right: "Expr"


@dataclass(frozen=True)
class Binary:
    """An infix operation (e.g., a + b, x < y)."""
    span: SourceSpan
    left: "Expr"
    operator: Token
    right: "Expr"


@dataclass(frozen=True)
class Variable:
    """A variable reference."""
    span: SourceSpan
    name: Token


@dataclass(frozen=True)
class Assign:
    """An assignment expression (e.g., x = 1). Evaluates to the assigned value."""
    span: SourceSpan
    name: Token
    value: "Expr"


Expr = Union[Literal, Grouping, Unary, Binary, Variable, Assign]


# =============================================================================
# Statement Nodes
# =============================================================================

@dataclass(frozen=True)
class ExpressionStatement:
    """An expression evaluated for its side effects."""
    span: SourceSpan
    expression: Expr


@dataclass(frozen=True)
class PrintStatement:
    """print expression;"""
    span: SourceSpan
    expression: Expr


@dataclass(frozen=True)
class VarDeclaration:
    """var name = initializer;"""
    span: SourceSpan
    name: Token
    initializer: Expr


@dataclass(frozen=True)
class Block:
    """A braced sequence of statements with its own scope."""
    span: SourceSpan
    statements: List["Stmt"] = field(default_factory=list)


Stmt = Union[ExpressionStatement, PrintStatement, VarDeclaration, Block]

EXPRESSION_TYPES = (Literal, Grouping, Unary, Binary, Variable, Assign)
STATEMENT_TYPES = (ExpressionStatement, PrintStatement, VarDeclaration, Block)


# =============================================================================
# Printing
# =============================================================================

class AstPrinter:
    """
    Renders nodes back to source text.

    Every unary, binary and assignment expression is wrapped in parentheses
    so the output shows how the parser grouped it, e.g. ``1 + 2 * 3``
    becomes ``(1 + (2 * 3))``. The output is valid source; formatting it
    again after a re-parse gives the same text.
    """

    def __init__(self, indent: str = "  "):
        self.indent = indent

    def expression(self, expr: Expr) -> str:
        if isinstance(expr, Literal):
            return self._literal(expr.value)
        if isinstance(expr, Grouping):
            inner = self.expression(expr.expression)
            # Already parenthesized by its own rule
            if isinstance(expr.expression, (Grouping, Unary, Binary, Assign)):
                return inner
            return f"({inner})"
        if isinstance(expr, Unary):
            return f"({expr.operator.lexeme}{self.expression(expr.right)})"
        if isinstance(expr, Binary):
            return f"({self.expression(expr.left)} {expr.operator.lexeme} {self.expression(expr.right)})"
        if isinstance(expr, Variable):
            return expr.name.lexeme
        if isinstance(expr, Assign):
            return f"({expr.name.lexeme} = {self.expression(expr.value)})"
        raise TypeError(f"not an expression node: {type(expr).__name__}")

    def statement(self, stmt: Stmt, depth: int = 0) -> str:
        pad = self.indent * depth
        if isinstance(stmt, ExpressionStatement):
            return f"{pad}{self.expression(stmt.expression)};"
        if isinstance(stmt, PrintStatement):
            return f"{pad}print {self.expression(stmt.expression)};"
        if isinstance(stmt, VarDeclaration):
            return f"{pad}var {stmt.name.lexeme} = {self.expression(stmt.initializer)};"
        if isinstance(stmt, Block):
            if not stmt.statements:
                return f"{pad}{{}}"
            body = "\n".join(self.statement(s, depth + 1) for s in stmt.statements)
            return f"{pad}{{\n{body}\n{pad}}}"
        raise TypeError(f"not a statement node: {type(stmt).__name__}")

    def program(self, statements: List[Stmt]) -> str:
        return "\n".join(self.statement(s) for s in statements)

    @staticmethod
    def _literal(value) -> str:
        # Imported here; runtime imports this module
        from .runtime.values import stringify
        if isinstance(value, str):
            return f'"{value}"'
        return stringify(value)


def format_ast(node: Union[Expr, Stmt, List[Stmt]]) -> str:
    """Render an expression, a statement, or a whole program as source text."""
    printer = AstPrinter()
    if isinstance(node, list):
        return printer.program(node)
    if isinstance(node, STATEMENT_TYPES):
        return printer.statement(node)
    return printer.expression(node)


def dump_ast(node, indent: int = 0) -> str:
    """Debug tree view of a node, one field per line."""
    pad = "  " * indent
    if isinstance(node, list):
        return "\n".join(dump_ast(item, indent) for item in node)
    lines = [f"{pad}{node.__class__.__name__}"]
    for f in fields(node):
        if f.name == "span":
            continue
        value = getattr(node, f.name)
        if isinstance(value, EXPRESSION_TYPES + STATEMENT_TYPES):
            lines.append(f"{pad}  {f.name}:")
            lines.append(dump_ast(value, indent + 2))
        elif isinstance(value, list):
            lines.append(f"{pad}  {f.name}: [")
            for item in value:
                lines.append(dump_ast(item, indent + 2))
            lines.append(f"{pad}  ]")
        elif isinstance(value, Token):
            lines.append(f"{pad}  {f.name}: {value.lexeme!r}")
        else:
            lines.append(f"{pad}  {f.name}: {value!r}")
    return "\n".join(lines)


def print_ast(node) -> None:
    """Print an AST node for debugging."""
    print(dump_ast(node))

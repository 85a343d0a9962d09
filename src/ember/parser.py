"""
Recursive descent parser for Ember.

Converts a token list into a list of statements. Expressions use one method
per precedence level; statement-level errors are recorded and the parser
skips ahead to the next statement boundary instead of giving up.
"""

from dataclasses import dataclass, field
from typing import List, Optional

from .tokens import Token, TokenType, SourceSpan, STATEMENT_STARTS, is_reserved_keyword
from .ast import (
    # Expressions
    Expr, Literal, Grouping, Unary, Binary, Variable, Assign,
    # Statements
    Stmt, ExpressionStatement, PrintStatement, VarDeclaration, Block,
)
from .errors import (
    ParseError,
    DiagnosticCollector,
    error_expected_token,
    error_unexpected_eof,
    error_expected_expression,
    error_invalid_assignment_target,
    error_unterminated_block,
    error_nested_too_deeply,
)


@dataclass
class ParseResult:
    """Statements that parsed cleanly plus every error met along the way."""
    statements: List[Stmt] = field(default_factory=list)
    errors: List[ParseError] = field(default_factory=list)
    diagnostics: DiagnosticCollector = field(default_factory=DiagnosticCollector)

    @property
    def has_errors(self) -> bool:
        return bool(self.errors)


class Parser:
    """
    Recursive descent parser for Ember.

    Usage:
        parser = Parser(tokens)
        result = parser.parse()

    Expression precedence, lowest to highest:
        Lowest:  =          (right-associative)
                 == !=
                 < <= > >=
                 + -
                 * /
        Highest: ! -        (unary)
    """

    EQUALITY = (TokenType.BANG_EQUAL, TokenType.EQUAL_EQUAL)
    COMPARISON = (TokenType.GREATER, TokenType.GREATER_EQUAL,
                  TokenType.LESS, TokenType.LESS_EQUAL)
    TERM = (TokenType.MINUS, TokenType.PLUS)
    FACTOR = (TokenType.SLASH, TokenType.STAR)
    UNARY = (TokenType.BANG, TokenType.MINUS)

    def __init__(self, tokens: List[Token], filename: Optional[str] = None,
                 source: Optional[str] = None, max_errors: int = 20):
        if not tokens or tokens[-1].type != TokenType.EOF:
            raise ValueError("token list must end with an EOF token")
        self.tokens = tokens
        self.filename = filename
        self.source_lines = source.splitlines() if source else []
        self.pos = 0
        self.block_depth = 0
        self.errors: List[ParseError] = []
        self.diagnostics = DiagnosticCollector(max_errors=max_errors)

    # =========================================================================
    # Token Navigation
    # =========================================================================

    def _current(self) -> Token:
        """Get current token."""
        return self.tokens[self.pos]

    def _previous(self) -> Token:
        """Get the most recently consumed token."""
        return self.tokens[max(0, self.pos - 1)]

    def _is_at_end(self) -> bool:
        """Check if at end of tokens."""
        return self._current().type == TokenType.EOF

    def _check(self, token_type: TokenType) -> bool:
        """Check if current token is of given type."""
        return self._current().type == token_type

    def _advance(self) -> Token:
        """Consume and return current token."""
        token = self._current()
        if not self._is_at_end():
            self.pos += 1
        return token

    def _match(self, *token_types: TokenType) -> Optional[Token]:
        """Consume token if it matches any of the given types."""
        if self._current().type in token_types:
            return self._advance()
        return None

    def _consume(self, token_type: TokenType, expected: str) -> Token:
        """Consume token of expected type, or raise error."""
        if self._check(token_type):
            return self._advance()
        raise self._error(expected)

    def _source_line(self, line: int) -> Optional[str]:
        if 1 <= line <= len(self.source_lines):
            return self.source_lines[line - 1]
        return None

    @staticmethod
    def _describe(token: Token) -> str:
        if token.type == TokenType.EOF:
            return "end of input"
        return f"'{token.lexeme}'"

    def _error(self, expected: str, token: Optional[Token] = None) -> ParseError:
        """Build a parser error for the current (or given) token."""
        token = token or self._current()
        if token.type == TokenType.EOF:
            return error_unexpected_eof(expected, token.span)
        return error_expected_token(expected, self._describe(token), token.span,
                                    self._source_line(token.line))

    def _report(self, error: ParseError) -> None:
        self.errors.append(error)
        self.diagnostics.add_error(error)

    def _span_from(self, start: Token) -> SourceSpan:
        """Create a span from start token to the last consumed token."""
        return SourceSpan(start.span.start, self._previous().span.end)

    # =========================================================================
    # Recovery
    # =========================================================================

    def _synchronize(self, start_pos: int) -> None:
        """
        Skip tokens until a statement boundary.

        Stops after a consumed ';' or in front of a token that starts a new
        statement. Inside a block a '}' also stops, so the block can close.
        At least one token is skipped when the failed statement consumed none.
        """
        if self.pos == start_pos:
            self._advance()

        while not self._is_at_end():
            if self._previous().type == TokenType.SEMICOLON:
                return
            if self._current().type in STATEMENT_STARTS:
                return
            if self.block_depth > 0 and self._check(TokenType.RIGHT_BRACE):
                return
            self._advance()

    # =========================================================================
    # Statement Parsing
    # =========================================================================

    def _parse_declaration(self) -> Optional[Stmt]:
        """Parse one declaration, recovering on error. Returns None on error."""
        start_pos = self.pos
        try:
            if self._match(TokenType.VAR):
                return self._parse_var_declaration()
            return self._parse_statement()
        except ParseError as e:
            self._report(e)
            self._synchronize(start_pos)
            return None
        except RecursionError:
            token = self._current()
            self._report(error_nested_too_deeply(token.span, self._source_line(token.line)))
            self._synchronize(start_pos)
            return None

    def _parse_var_declaration(self) -> VarDeclaration:
        """Parse: var IDENTIFIER = expression ;  ('var' already consumed)."""
        start = self._previous()
        name = self._consume(TokenType.IDENTIFIER, "variable name")
        self._consume(TokenType.EQUAL, "'=' after variable name")
        initializer = self._parse_expression()
        self._consume(TokenType.SEMICOLON, "';' after variable declaration")
        return VarDeclaration(span=self._span_from(start), name=name, initializer=initializer)

    def _parse_statement(self) -> Stmt:
        if self._match(TokenType.PRINT):
            return self._parse_print_statement()
        if self._match(TokenType.LEFT_BRACE):
            return self._parse_block()
        return self._parse_expression_statement()

    def _parse_print_statement(self) -> PrintStatement:
        """Parse: print expression ;  ('print' already consumed)."""
        start = self._previous()
        value = self._parse_expression()
        self._consume(TokenType.SEMICOLON, "';' after value")
        return PrintStatement(span=self._span_from(start), expression=value)

    def _parse_block(self) -> Block:
        """Parse declarations up to the matching '}'  ('{' already consumed)."""
        start = self._previous()
        statements = []
        self.block_depth += 1
        try:
            while not self._check(TokenType.RIGHT_BRACE) and not self._is_at_end():
                if self.diagnostics.should_stop:
                    # Error cap reached; the caller stops without further reports
                    return Block(span=self._span_from(start), statements=statements)
                stmt = self._parse_declaration()
                if stmt is not None:
                    statements.append(stmt)
        finally:
            self.block_depth -= 1

        if not self._match(TokenType.RIGHT_BRACE):
            token = self._current()
            raise error_unterminated_block(token.span, self._source_line(token.line))
        return Block(span=self._span_from(start), statements=statements)

    def _parse_expression_statement(self) -> ExpressionStatement:
        start = self._current()
        expr = self._parse_expression()
        self._consume(TokenType.SEMICOLON, "';' after expression")
        return ExpressionStatement(span=self._span_from(start), expression=expr)

    # =========================================================================
    # Expression Parsing
    # =========================================================================

    def _parse_expression(self) -> Expr:
        return self._parse_assignment()

    def _parse_assignment(self) -> Expr:
        """Parse assignment (right-associative) or fall through to equality."""
        expr = self._parse_equality()

        equals = self._match(TokenType.EQUAL)
        if equals is None:
            return expr

        value = self._parse_assignment()
        if isinstance(expr, Variable):
            return Assign(
                span=SourceSpan(expr.span.start, value.span.end),
                name=expr.name,
                value=value
            )

        # Reported without unwinding; the statement itself is still well formed
        self._report(error_invalid_assignment_target(
            equals.span, self._source_line(equals.line)
        ))
        return expr

    def _parse_left_assoc(self, operators, operand) -> Expr:
        """Fold `operand (op operand)*` to the left."""
        expr = operand()
        while True:
            op = self._match(*operators)
            if op is None:
                return expr
            right = operand()
            expr = Binary(
                span=SourceSpan(expr.span.start, right.span.end),
                left=expr,
                operator=op,
                right=right
            )

    def _parse_equality(self) -> Expr:
        return self._parse_left_assoc(self.EQUALITY, self._parse_comparison)

    def _parse_comparison(self) -> Expr:
        return self._parse_left_assoc(self.COMPARISON, self._parse_term)

    def _parse_term(self) -> Expr:
        return self._parse_left_assoc(self.TERM, self._parse_factor)

    def _parse_factor(self) -> Expr:
        return self._parse_left_assoc(self.FACTOR, self._parse_unary)

    def _parse_unary(self) -> Expr:
        """Parse unary expressions (!, -)."""
        op = self._match(*self.UNARY)
        if op is not None:
            right = self._parse_unary()
            return Unary(
                span=SourceSpan(op.span.start, right.span.end),
                operator=op,
                right=right
            )
        return self._parse_primary()

    def _parse_primary(self) -> Expr:
        """Parse literals, variables and parenthesized groups."""
        token = self._current()

        if token.type == TokenType.NUMBER or token.type == TokenType.STRING:
            self._advance()
            return Literal(span=token.span, value=token.value)

        if token.type == TokenType.TRUE:
            self._advance()
            return Literal(span=token.span, value=True)

        if token.type == TokenType.FALSE:
            self._advance()
            return Literal(span=token.span, value=False)

        if token.type == TokenType.NIL:
            self._advance()
            return Literal(span=token.span, value=None)

        if token.type == TokenType.IDENTIFIER:
            self._advance()
            return Variable(span=token.span, name=token)

        if token.type == TokenType.LEFT_PAREN:
            self._advance()
            inner = self._parse_expression()
            if not self._match(TokenType.RIGHT_PAREN):
                # Reported at the opening parenthesis
                raise error_expected_token(
                    "')' after expression", self._describe(self._current()),
                    token.span, self._source_line(token.line)
                )
            return Grouping(span=self._span_from(token), expression=inner)

        if token.type == TokenType.EOF:
            raise error_unexpected_eof("expression", token.span)

        hint = None
        if is_reserved_keyword(token.lexeme):
            hint = f"'{token.lexeme}' is a reserved keyword"
        raise error_expected_expression(
            self._describe(token), token.span, self._source_line(token.line), hint
        )

    # =========================================================================
    # Entry Points
    # =========================================================================

    def parse(self) -> ParseResult:
        """Parse the whole token list as a program."""
        statements = []
        while not self._is_at_end():
            if self.diagnostics.should_stop:
                break
            stmt = self._parse_declaration()
            if stmt is not None:
                statements.append(stmt)
        return ParseResult(statements=statements, errors=list(self.errors),
                           diagnostics=self.diagnostics)

    def parse_expression(self) -> Expr:
        """Parse a single expression that must span the whole token list."""
        try:
            expr = self._parse_expression()
        except RecursionError:
            token = self._current()
            raise error_nested_too_deeply(token.span, self._source_line(token.line)) from None
        if not self._is_at_end():
            raise self._error("end of input")
        if self.errors:
            raise self.errors[0]
        return expr


def parse(tokens: List[Token], filename: Optional[str] = None,
          source: Optional[str] = None, max_errors: int = 20) -> ParseResult:
    """
    Convenience function to parse tokens into a program.

    Args:
        tokens: List of tokens from the lexer (ending in EOF)
        filename: Optional filename for error messages
        source: Optional original source, used to quote lines in diagnostics
        max_errors: Stop collecting after this many errors

    Returns:
        ParseResult with the statements and all parse errors
    """
    parser = Parser(tokens, filename, source, max_errors)
    return parser.parse()


def parse_expression(tokens: List[Token]) -> Expr:
    """
    Parse a standalone expression.

    Raises:
        ParseError: If the tokens are not exactly one valid expression
    """
    return Parser(tokens).parse_expression()

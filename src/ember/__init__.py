"""
Ember - a small dynamically typed, C-like scripting language.

This package provides:
- Lexer: Tokenizes source text
- Parser: Builds statements from tokens, recovering from errors
- Interpreter: Executes statements against a lexical scope chain

Usage:
    from ember import tokenize, parse, Interpreter, run_source

    # Whole pipeline
    result = run_source('var a = 1; var b = 2; print a + b;')
    if not result.success:
        for line in result.error_lines():
            print(line)

    # Stage by stage
    tokens = tokenize('print "x" + "y";')
    parsed = parse(tokens)
    Interpreter().interpret(parsed.statements)
"""

__version__ = "0.1.0"

from .tokens import (
    Token,
    TokenType,
    SourceLocation,
    SourceSpan,
    KEYWORDS,
)

from .lexer import (
    Lexer,
    tokenize,
)

from .parser import (
    Parser,
    ParseResult,
    parse,
    parse_expression,
)

from .ast import (
    # Expressions
    Expr,
    Literal,
    Grouping,
    Unary,
    Binary,
    Variable,
    Assign,
    # Statements
    Stmt,
    ExpressionStatement,
    PrintStatement,
    VarDeclaration,
    Block,
    # Helpers
    AstPrinter,
    format_ast,
    dump_ast,
    print_ast,
)

from .errors import (
    EmberError,
    ScanError,
    ParseError,
    EvalError,
    Diagnostic,
    DiagnosticCollector,
    ErrorSeverity,
    Stage,
)

from .runtime import (
    Interpreter,
    ExecutionResult,
    Environment,
    UndefinedVariable,
    execute,
    run_source,
    stringify,
)

__all__ = [
    # Tokens
    'Token',
    'TokenType',
    'SourceLocation',
    'SourceSpan',
    'KEYWORDS',

    # Lexer
    'Lexer',
    'tokenize',

    # Parser
    'Parser',
    'ParseResult',
    'parse',
    'parse_expression',

    # AST
    'Expr',
    'Literal',
    'Grouping',
    'Unary',
    'Binary',
    'Variable',
    'Assign',
    'Stmt',
    'ExpressionStatement',
    'PrintStatement',
    'VarDeclaration',
    'Block',
    'AstPrinter',
    'format_ast',
    'dump_ast',
    'print_ast',

    # Errors
    'EmberError',
    'ScanError',
    'ParseError',
    'EvalError',
    'Diagnostic',
    'DiagnosticCollector',
    'ErrorSeverity',
    'Stage',

    # Runtime
    'Interpreter',
    'ExecutionResult',
    'Environment',
    'UndefinedVariable',
    'execute',
    'run_source',
    'stringify',
]

"""
Ember runtime - tree-walking interpreter.

This module provides:
- Interpreter: Executes statements and evaluates expressions
- Environment: Scope chain for variable bindings
- Value helpers: Type tests, equality and the canonical print form
"""

from .values import (
    Value,
    is_number,
    is_string,
    is_boolean,
    type_name,
    values_equal,
    format_number,
    stringify,
)

from .environment import (
    Environment,
    UndefinedVariable,
)

from .interpreter import (
    Interpreter,
    ExecutionResult,
    execute,
    run_source,
)

__all__ = [
    # Values
    'Value',
    'is_number',
    'is_string',
    'is_boolean',
    'type_name',
    'values_equal',
    'format_number',
    'stringify',

    # Environment
    'Environment',
    'UndefinedVariable',

    # Interpreter
    'Interpreter',
    'ExecutionResult',
    'execute',
    'run_source',
]

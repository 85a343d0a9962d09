"""
Runtime values for the Ember interpreter.

Values are plain immutable Python objects:

    Number  -> float
    String  -> str
    Boolean -> bool
    Nil     -> None

Being immutable, a value read from a variable can never be changed through
another binding.
"""

import math
from decimal import Decimal
from typing import Union

Value = Union[float, str, bool, None]


def is_number(value: Value) -> bool:
    """bool is an int subclass in Python, so it is excluded explicitly."""
    return isinstance(value, float) and not isinstance(value, bool)


def is_string(value: Value) -> bool:
    return isinstance(value, str)


def is_boolean(value: Value) -> bool:
    return isinstance(value, bool)


def type_name(value: Value) -> str:
    """Name of the value's runtime type, as used in error messages."""
    if value is None:
        return "nil"
    if is_boolean(value):
        return "boolean"
    if is_number(value):
        return "number"
    if is_string(value):
        return "string"
    raise TypeError(f"not a runtime value: {value!r}")


def values_equal(left: Value, right: Value) -> bool:
    """
    Equality for ``==`` and ``!=``.

    Values of different types are never equal, so ``1 == "1"`` and
    ``true == 1`` are false. Numbers follow IEEE comparison.
    """
    if type_name(left) != type_name(right):
        return False
    return left == right


def format_number(n: float) -> str:
    """
    Natural decimal form of a number.

    Integral values drop the fractional part (``3``, ``-0``); other finite
    values use the shortest positional form (``0.1``, ``0.0000001``).
    """
    if math.isnan(n):
        return "NaN"
    if math.isinf(n):
        return "inf" if n > 0 else "-inf"
    if n.is_integer():
        text = str(int(n))
        if n == 0 and math.copysign(1.0, n) < 0:
            return "-0"
        return text
    return format(Decimal(repr(n)), "f")


def stringify(value: Value) -> str:
    """Canonical text form used by ``print``."""
    if value is None:
        return "nil"
    if is_boolean(value):
        return "true" if value else "false"
    if is_number(value):
        return format_number(value)
    if is_string(value):
        return value
    raise TypeError(f"not a runtime value: {value!r}")

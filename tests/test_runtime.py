"""
Tests for the Ember runtime: values, scopes and the interpreter.
"""

import io
import math

import pytest
from ember import (
    tokenize, parse, parse_expression, run_source, execute, Interpreter, EvalError,
    Literal, Unary, PrintStatement,
)
from ember.runtime import (
    Environment,
    UndefinedVariable,
    stringify,
    format_number,
    type_name,
    values_equal,
    is_number,
)


def run(source: str):
    """Run source, returning (result, printed output)."""
    out = io.StringIO()
    result = run_source(source, output=out)
    return result, out.getvalue()


def output_of(source: str) -> str:
    result, printed = run(source)
    assert result.success, list(result.error_lines())
    return printed


def evaluate(source: str):
    """Evaluate a single expression in a fresh interpreter."""
    return Interpreter(output=io.StringIO()).evaluate(parse_expression(tokenize(source)))


# =============================================================================
# Values
# =============================================================================

class TestValues:
    """Test runtime value helpers."""

    def test_type_names(self):
        assert type_name(None) == "nil"
        assert type_name(True) == "boolean"
        assert type_name(1.0) == "number"
        assert type_name("s") == "string"

    def test_bool_is_not_a_number(self):
        assert is_number(1.0)
        assert not is_number(True)

    def test_values_equal_same_type(self):
        assert values_equal(1.0, 1.0)
        assert values_equal("a", "a")
        assert values_equal(None, None)
        assert not values_equal(1.0, 2.0)

    def test_values_equal_across_types(self):
        assert not values_equal(1.0, "1")
        assert not values_equal(True, 1.0)
        assert not values_equal(None, False)

    def test_nan_not_equal_to_itself(self):
        assert not values_equal(math.nan, math.nan)

    @pytest.mark.parametrize("value,expected", [
        (3.0, "3"),
        (-2.0, "-2"),
        (0.0, "0"),
        (-0.0, "-0"),
        (2.5, "2.5"),
        (0.1, "0.1"),
        (1e-7, "0.0000001"),
        (1e21, "1000000000000000000000"),
        (math.inf, "inf"),
        (-math.inf, "-inf"),
        (math.nan, "NaN"),
    ])
    def test_format_number(self, value, expected):
        assert format_number(value) == expected

    def test_stringify(self):
        assert stringify(None) == "nil"
        assert stringify(True) == "true"
        assert stringify(False) == "false"
        assert stringify("raw text") == "raw text"
        assert stringify(7.0) == "7"

    def test_stringify_rejects_foreign_values(self):
        with pytest.raises(TypeError):
            stringify([1, 2])


# =============================================================================
# Environment
# =============================================================================

class TestEnvironment:
    """Test the scope chain."""

    def test_define_and_retrieve(self):
        env = Environment()
        env.define("x", 1.0)
        assert env.retrieve("x") == 1.0
        assert "x" in env

    def test_retrieve_undefined(self):
        env = Environment()
        with pytest.raises(UndefinedVariable) as exc_info:
            env.retrieve("missing")
        assert exc_info.value.name == "missing"

    def test_redefine_overwrites(self):
        env = Environment()
        env.define("x", 1.0)
        env.define("x", "now a string")
        assert env.retrieve("x") == "now a string"

    def test_inner_scope_shadows(self):
        env = Environment()
        env.define("x", 1.0)
        with env.new_scope():
            env.define("x", 2.0)
            assert env.retrieve("x") == 2.0
        assert env.retrieve("x") == 1.0

    def test_inner_scope_sees_outer(self):
        env = Environment()
        env.define("x", 1.0)
        with env.new_scope():
            assert env.retrieve("x") == 1.0

    def test_assign_updates_nearest_binding(self):
        env = Environment()
        env.define("x", 1.0)
        with env.new_scope():
            env.assign("x", 2.0)
        assert env.retrieve("x") == 2.0

    def test_assign_to_shadow_leaves_outer(self):
        env = Environment()
        env.define("x", 1.0)
        with env.new_scope():
            env.define("x", 5.0)
            env.assign("x", 6.0)
            assert env.retrieve("x") == 6.0
        assert env.retrieve("x") == 1.0

    def test_assign_never_creates(self):
        env = Environment()
        with pytest.raises(UndefinedVariable):
            env.assign("y", 1.0)
        assert "y" not in env

    def test_scope_popped_on_exception(self):
        env = Environment()
        with pytest.raises(ValueError):
            with env.new_scope():
                env.define("tmp", 1.0)
                raise ValueError("boom")
        assert env.depth == 1
        assert "tmp" not in env

    def test_push_pop(self):
        env = Environment()
        env.push()
        assert env.depth == 2
        env.pop()
        assert env.depth == 1

    def test_cannot_pop_global(self):
        with pytest.raises(RuntimeError):
            Environment().pop()

    def test_snapshot(self):
        env = Environment()
        env.define("a", 1.0)
        env.define("b", 2.0)
        with env.new_scope():
            env.define("b", 3.0)
            assert env.snapshot() == {"a": 1.0, "b": 3.0}


# =============================================================================
# Expressions
# =============================================================================

class TestExpressions:
    """Test expression evaluation."""

    def test_arithmetic(self):
        assert evaluate("1 + 2 * 3") == 7.0
        assert evaluate("(1 + 2) * 3") == 9.0
        assert evaluate("10 - 4 - 3") == 3.0
        assert evaluate("8 / 4 / 2") == 1.0

    def test_division_by_zero_is_infinity(self):
        assert evaluate("1 / 0") == math.inf
        assert evaluate("-1 / 0") == -math.inf

    def test_zero_over_zero_is_nan(self):
        assert math.isnan(evaluate("0 / 0"))

    def test_negation(self):
        assert evaluate("-3") == -3.0
        assert evaluate("--3") == 3.0

    def test_not(self):
        assert evaluate("!true") is False
        assert evaluate("!!false") is False

    def test_string_concatenation(self):
        assert evaluate('"a" + "b"') == "ab"

    def test_comparisons(self):
        assert evaluate("1 < 2") is True
        assert evaluate("2 <= 2") is True
        assert evaluate("1 > 2") is False
        assert evaluate("3 >= 4") is False

    def test_equality(self):
        assert evaluate("1 == 1") is True
        assert evaluate('"a" != "b"') is True
        assert evaluate("nil == nil") is True
        assert evaluate('1 == "1"') is False
        assert evaluate("true != 1") is True

    @pytest.mark.parametrize("source,code", [
        ('1 + "a"', "E401"),
        ('"a" + 1', "E401"),
        ("true + true", "E401"),
        ('"a" - "b"', "E401"),
        ('"a" * 2', "E401"),
        ("nil / 1", "E401"),
        ('1 < "2"', "E401"),
        ('-"a"', "E401"),
        ("!1", "E401"),
        ("!nil", "E401"),
        ("undefined_name", "E402"),
        ("nope = 1", "E403"),
    ])
    def test_eval_errors(self, source, code):
        with pytest.raises(EvalError) as exc_info:
            evaluate(source)
        assert exc_info.value.diagnostic.code == code

    def test_operand_error_message(self):
        with pytest.raises(EvalError) as exc_info:
            evaluate('1 + "a"')
        assert exc_info.value.diagnostic.message == (
            "operands of '+' must be two numbers or two strings, got number and string"
        )

    def test_assignment_value(self):
        interpreter = Interpreter(output=io.StringIO())
        interpreter.environment.define("a", 0.0)
        interpreter.environment.define("b", 0.0)
        value = interpreter.evaluate(parse_expression(tokenize("a = b = 4")))
        assert value == 4.0
        assert interpreter.environment.retrieve("a") == 4.0
        assert interpreter.environment.retrieve("b") == 4.0


# =============================================================================
# Programs
# =============================================================================

class TestPrograms:
    """End-to-end programs through run_source."""

    def test_print_sum(self):
        assert output_of("var a = 1; var b = 2; print a + b;") == "3\n"

    def test_print_concatenation(self):
        assert output_of('print "x" + "y";') == "xy\n"

    def test_cross_type_equality_prints_false(self):
        assert output_of('print 1 == "1";') == "false\n"

    def test_print_forms(self):
        assert output_of('print nil; print true; print 2.5; print "s";') == \
            "nil\ntrue\n2.5\ns\n"

    def test_print_division_by_zero(self):
        assert output_of("print 1 / 0;") == "inf\n"

    def test_block_shadowing(self):
        source = "var x = 1; { var x = 2; print x; } print x;"
        assert output_of(source) == "2\n1\n"

    def test_block_assignment_reaches_outer(self):
        source = "var x = 1; { x = 2; } print x;"
        assert output_of(source) == "2\n"

    def test_nested_scopes(self):
        source = """
        var a = "global";
        {
            var a = "outer";
            {
                print a;
                a = "changed";
            }
            print a;
        }
        print a;
        """
        assert output_of(source) == "outer\nchanged\nglobal\n"

    def test_redeclare_overwrites(self):
        assert output_of("var a = 1; var a = a + 1; print a;") == "2\n"

    def test_assignment_is_an_expression(self):
        assert output_of("var a = 1; print a = 5; print a;") == "5\n5\n"

    def test_block_locals_vanish(self):
        result, printed = run("{ var inner = 1; } print inner;")
        assert not result.success
        assert list(result.error_lines()) == ["[line 1] Eval error: undefined variable 'inner'"]

    def test_undefined_assignment_line(self):
        result, printed = run("var a = 1;\n\ny = 1;")
        assert not result.success
        assert result.error_message == \
            "[line 3] Eval error: assignment to undefined variable 'y'"

    def test_eval_error_stops_program(self):
        result, printed = run('print 1;\nprint -"a";\nprint 2;')
        assert printed == "1\n"
        assert result.statements_executed == 1
        assert result.error_message == \
            "[line 2] Eval error: operand of '-' must be a number, got string"

    def test_error_inside_block_pops_scope(self):
        interpreter = Interpreter(output=io.StringIO())
        statements = parse(tokenize("{ var t = 1; print t + nil; }")).statements
        result = interpreter.interpret(statements)
        assert not result.success
        assert interpreter.environment.depth == 1
        assert "t" not in interpreter.environment

    def test_parse_errors_prevent_execution(self):
        result, printed = run("print 1;\nprint ;\nvar = 2;\nprint 3;")
        assert printed == ""
        assert list(result.error_lines()) == [
            "[line 2] Parse error: expected expression, found ';'",
            "[line 3] Parse error: expected variable name, found '='",
        ]

    def test_scan_error_reported(self):
        result, printed = run('print 1;\nprint "open')
        assert printed == ""
        assert list(result.error_lines()) == ["[line 2] Scan error: unterminated string"]

    def test_deep_nesting_reported(self):
        result, printed = run("print " + "(" * 2000 + "1" + ")" * 2000 + ";")
        assert not result.success
        assert printed == ""
        assert result.error_message == "[line 1] Parse error: expression nested too deeply"

    def test_evaluation_too_deep(self):
        """A tree deeper than the evaluator can recurse stops with E404."""
        minus, one = tokenize("-1")[:2]
        expr = Literal(span=one.span, value=1.0)
        for _ in range(5000):
            expr = Unary(span=minus.span, operator=minus, right=expr)
        interpreter = Interpreter(output=io.StringIO())
        result = interpreter.interpret([PrintStatement(span=minus.span, expression=expr)])
        assert not result.success
        assert result.diagnostics.diagnostics[0].code == "E404"
        assert result.error_message == "[line 1] Eval error: expression nested too deeply"
        assert interpreter.environment.depth == 1

    def test_crlf_source_lines(self):
        """Diagnostics quote lines without the carriage return."""
        result, printed = run("var a = 1;\r\nprint b;\r\n")
        diagnostic = result.diagnostics.diagnostics[0]
        assert diagnostic.line == 2
        assert diagnostic.source_line == "print b;"

    def test_success_result(self):
        result, printed = run("print 1;")
        assert result.success
        assert result.error_message is None
        assert result.statements_executed == 1

    def test_execute_helper(self):
        out = io.StringIO()
        result = execute(parse(tokenize("print 4 * 2;")).statements, output=out)
        assert result.success
        assert out.getvalue() == "8\n"

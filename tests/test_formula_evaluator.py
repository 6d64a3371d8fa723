"""Tests de la conversión a postfija, la evaluación y la compilación."""

import math

import pytest
from mpmath import mp

from calculator_errors import (
    DivisionByZeroError,
    IndeterminateZeroOverZeroError,
    IndeterminateZeroPowerZeroError,
    InvalidExpressionError,
    MathDomainError,
    NegativeRootError,
    NonPositiveLogarithmError,
)
from formula_evaluator import FormulaEvaluator, PythonMathProvider


@pytest.fixture
def evaluator():
    return FormulaEvaluator(PythonMathProvider())


class TestToPostfix:

    @pytest.mark.parametrize(
        "infix, postfix",
        [
            ("1 + 2", "1 2 +"),
            ("1 - 2 * 4", "1 2 4 * -"),
            ("( 1 - 2 ) * 4", "1 2 - 4 *"),
            ("2 * 3 ^ 2", "2 3 2 ^ *"),
            ("2 ^ 3 ^ 2", "2 3 2 ^ ^"),
            ("6 ÷ 3 × 2", "6 3 / 2 *"),
            ("sin 0 * 2", "0 sin 2 *"),
            ("sqrt 4 ^ 2", "4 sqrt 2 ^"),
            ("ln e * 2", "e 2 * ln"),
            ("sign ( 0 - 3 )", "0 3 - sign"),
            ("p * x + e", "p x * e +"),
        ],
    )
    def test_conversion(self, evaluator, infix, postfix):
        assert evaluator.to_postfix(infix) == postfix

    def test_numbers_use_a_fixed_decimal_point(self, evaluator):
        assert evaluator.to_postfix("1,5 + 2.") == "1.5 2 +"

    def test_unmatched_closing_parenthesis_is_tolerated(self, evaluator):
        assert evaluator.to_postfix("1 + 2 )") == "1 2 +"

    def test_surrounding_whitespace_is_ignored(self, evaluator):
        assert evaluator.to_postfix("  7 ") == "7"

    @pytest.mark.parametrize("infix", ["1 + y", "", "1 % 2", "tan 1", "1  + 2"])
    def test_unknown_lexeme(self, evaluator, infix):
        with pytest.raises(InvalidExpressionError):
            evaluator.to_postfix(infix)


class TestEvaluate:

    @pytest.mark.parametrize(
        "infix, expected",
        [
            ("1 + 2", 3.0),
            ("1 - 2 * 4", -7.0),
            ("( 1 - 2 ) * 4", -4.0),
            ("0 - 5 / 2", -2.5),
            ("2 * 3 ^ 2", 18.0),
            ("2 ^ 3 ^ 2", 512.0),
            ("sqrt 4 * 2", 4.0),
            ("sign ( 0 - 3 )", -1.0),
            ("sign 0", 0.0),
            ("abs ( 0 - 4 )", 4.0),
            ("floor ( 0 - 2.5 )", -3.0),
            ("ceil 2.1", 3.0),
            ("cos 0", 1.0),
            ("1,5 * 2", 3.0),
        ],
    )
    def test_values(self, evaluator, infix, expected):
        assert evaluator.evaluate(infix) == pytest.approx(expected)

    @pytest.mark.parametrize(
        "infix, reference",
        [
            ("sin 1", lambda: mp.sin(1)),
            ("cos 2", lambda: mp.cos(2)),
            ("tg 0.5", lambda: mp.tan(mp.mpf("0.5"))),
            ("ctg 0.5", lambda: mp.cot(mp.mpf("0.5"))),
            ("ln 2", lambda: mp.log(2)),
            ("lg 3", lambda: mp.log10(3)),
            ("√ 2", lambda: mp.sqrt(2)),
            ("2 ^ 0.5", lambda: mp.power(2, mp.mpf("0.5"))),
            ("p / 4", lambda: mp.pi / 4),
            ("e ^ 2", lambda: mp.e ** 2),
        ],
    )
    def test_matches_high_precision_reference(self, evaluator, infix, reference):
        with mp.workdps(50):
            expected = float(reference())
        assert evaluator.evaluate(infix) == pytest.approx(expected, rel=1e-14)

    def test_cyrillic_pi(self, evaluator):
        assert evaluator.evaluate("п") == math.pi

    def test_cotangent_of_zero_is_infinite(self, evaluator):
        assert evaluator.evaluate("ctg 0") == math.inf

    def test_negative_base_with_fractional_exponent_is_nan(self, evaluator):
        assert math.isnan(evaluator.evaluate("( 0 - 8 ) ^ 0.5"))

    def test_zero_to_negative_power_is_infinite(self, evaluator):
        assert evaluator.evaluate("0 ^ ( 0 - 1 )") == math.inf

    @pytest.mark.parametrize(
        "infix, expected",
        [
            ("10 ^ 400", math.inf),
            ("0.5 ^ ( 0 - 2000 )", math.inf),
            ("( 0 - 10 ) ^ 401", -math.inf),
            ("( 0 - 10 ) ^ 400", math.inf),
        ],
    )
    def test_power_overflow_is_infinite(self, evaluator, infix, expected):
        assert evaluator.evaluate(infix) == expected

    def test_power_overflows_like_product(self, evaluator):
        assert evaluator.evaluate("10 ^ 400") == evaluator.evaluate("10 ^ 200 * 10 ^ 200")

    def test_compiled_power_overflow(self, evaluator):
        assert evaluator.compile("x ^ 401")(-10) == -math.inf

    @pytest.mark.parametrize("infix", ["1 2", "+", "x + 1", "( 1 + 2", "sin"])
    def test_invalid_expression(self, evaluator, infix):
        with pytest.raises(InvalidExpressionError):
            evaluator.evaluate(infix)


class TestDomainErrors:

    @pytest.mark.parametrize(
        "infix, error",
        [
            ("5 / 0", DivisionByZeroError),
            ("1 / ( 2 - 2 )", DivisionByZeroError),
            ("1 / 0.0000000000000001", DivisionByZeroError),
            ("0 / 0", IndeterminateZeroOverZeroError),
            ("0 ^ 0", IndeterminateZeroPowerZeroError),
            ("sqrt ( 0 - 1 )", NegativeRootError),
            ("√ ( 0 - 4 )", NegativeRootError),
            ("ln 0", NonPositiveLogarithmError),
            ("lg ( 0 - 2 )", NonPositiveLogarithmError),
        ],
    )
    def test_errors(self, evaluator, infix, error):
        with pytest.raises(error):
            evaluator.evaluate(infix)

    def test_division_errors_are_zero_division_errors(self, evaluator):
        with pytest.raises(ZeroDivisionError):
            evaluator.evaluate("5 / 0")
        with pytest.raises(ZeroDivisionError):
            evaluator.evaluate("0 / 0")

    def test_domain_errors_are_arithmetic_errors(self, evaluator):
        with pytest.raises(ArithmeticError):
            evaluator.evaluate("ln 0")
        assert issubclass(IndeterminateZeroPowerZeroError, MathDomainError)


class TestCompile:

    def test_function_of_x(self, evaluator):
        f = evaluator.compile("x ^ 2 + 1")
        assert f(3) == 10.0
        assert f(0.5) == pytest.approx(1.25)

    def test_function_is_reusable(self, evaluator):
        f = evaluator.compile("2 * x")
        assert [f(v) for v in (0, 1, 2.5)] == [0.0, 2.0, 5.0]

    @pytest.mark.parametrize(
        "infix",
        ["1 + 2 * 3", "p * sin 1", "( 2 + e ) ^ 2", "ctg 1", "floor ( p * 2 )", "lg 1000 - 0.5"],
    )
    def test_same_result_as_evaluate(self, evaluator, infix):
        assert evaluator.compile(infix)(0.0) == evaluator.evaluate(infix)

    def test_domain_errors_are_raised_on_call(self, evaluator):
        root = evaluator.compile("sqrt x")
        assert root(4) == 2.0
        with pytest.raises(NegativeRootError):
            root(-1)
        with pytest.raises(DivisionByZeroError):
            evaluator.compile("1 / x")(0)

    @pytest.mark.parametrize("infix", ["1 +", "x x", "1 y"])
    def test_structure_is_checked_when_compiling(self, evaluator, infix):
        with pytest.raises(InvalidExpressionError):
            evaluator.compile(infix)

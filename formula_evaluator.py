"""Conversión a notación postfija y evaluación de expresiones de la calculadora.

Las expresiones llegan ya tokenizadas por ExpressionBuilder: lexemas
separados por un espacio. El evaluador no repara la sintaxis; todo lo que
no reconoce es un InvalidExpressionError.
"""

import logging
import math
import operator
import re
import sys

from calculator_errors import (
    DivisionByZeroError,
    IndeterminateZeroOverZeroError,
    IndeterminateZeroPowerZeroError,
    InvalidExpressionError,
    NegativeRootError,
    NonPositiveLogarithmError,
)
from expression_builder import DELIMITER, FUNCTIONS, VARIABLE

logger = logging.getLogger(__name__)


def _periodic(fn):
    # math.sin(inf) lanza ValueError; en coma flotante el resultado es NaN
    def w(x):
        if math.isinf(x):
            return math.nan
        return fn(x)

    return w


def _finite_only(fn):
    def w(x):
        if not math.isfinite(x):
            return x
        return float(fn(x))

    return w


class PythonMathProvider:
    """Provee constantes, operadores y funciones con sus políticas numéricas.

    La misma tabla la usan la evaluación inmediata y las funciones
    compiladas, así que ambas se comportan igual.
    """

    EPSILON = sys.float_info.epsilon
    BINARY_OPERATORS = frozenset("+-*/^")

    def build_namespace(self) -> dict:
        return {
            "p": math.pi,
            "п": math.pi,
            "e": math.e,
            "+": operator.add,
            "-": operator.sub,
            "*": operator.mul,
            "/": self._divide,
            "^": self._power,
            "sin": _periodic(math.sin),
            "cos": _periodic(math.cos),
            "tg": _periodic(math.tan),
            "ctg": self._cotangent,
            "sqrt": self._sqrt,
            "√": self._sqrt,
            "ln": self._ln,
            "lg": self._lg,
            "abs": abs,
            "floor": _finite_only(math.floor),
            "ceil": _finite_only(math.ceil),
            "sign": self._sign,
        }

    def _divide(self, left: float, right: float) -> float:
        if abs(right) > self.EPSILON:
            return left / right
        if abs(left) > self.EPSILON:
            raise DivisionByZeroError()
        raise IndeterminateZeroOverZeroError()

    def _power(self, base: float, exponent: float) -> float:
        """Potencia real; si no cabe en un float devuelve ±∞ como `*`."""
        if not (abs(base) > self.EPSILON or abs(exponent) > self.EPSILON):
            raise IndeterminateZeroPowerZeroError()
        try:
            return math.pow(base, exponent)
        except OverflowError:
            if base < 0 and float(exponent).is_integer() and exponent % 2 == 1:
                return -math.inf
            return math.inf
        except ValueError:
            # 0 ^ negativo → ∞ ; base negativa con exponente no entero → NaN
            if base == 0:
                return math.inf
            return math.nan

    @staticmethod
    def _cotangent(x: float) -> float:
        if math.isinf(x):
            return math.nan
        tangent = math.tan(x)
        if tangent == 0:
            return math.copysign(math.inf, tangent)
        return 1.0 / tangent

    @staticmethod
    def _sqrt(x: float) -> float:
        if x < 0:
            raise NegativeRootError()
        return math.sqrt(x)

    @staticmethod
    def _ln(x: float) -> float:
        if x <= 0:
            raise NonPositiveLogarithmError()
        return math.log(x)

    @staticmethod
    def _lg(x: float) -> float:
        if x <= 0:
            raise NonPositiveLogarithmError()
        return math.log10(x)

    @staticmethod
    def _sign(x: float) -> float:
        if math.isnan(x):
            return x
        return float((x > 0) - (x < 0))


class FormulaEvaluator:
    """Transforma expresiones infijas a postfijas y las evalúa."""

    _NUMBER = re.compile(r"(?:\d+(?:[.,]\d*)?|[.,]\d+)")
    _OPERAND_NAMES = {"p", "п", "e", VARIABLE}
    _OPERATOR_ALIASES = {"×": "*", "÷": "/"}

    # Lo que ya está en la pila y se resuelve antes que * y /
    _BEFORE_PRODUCT = {"*", "/", "^", "sin", "cos", "tg", "ctg", "sqrt", "√"}
    # Lo que se resuelve antes que ^
    _BEFORE_POWER = {"sin", "cos", "tg", "ctg", "sqrt", "√"}

    def __init__(self, provider: PythonMathProvider):
        self._provider = provider

    # ── Infija → postfija (shunting-yard) ────────────────────────

    def to_postfix(self, infix: str) -> str:
        """Convierte una expresión infija en postfija.

        Raises:
            InvalidExpressionError: un lexema no es número, operador,
                función, constante ni paréntesis.
        """
        output = []
        stack = []

        for lexeme in infix.strip().split(DELIMITER):
            lexeme = self._OPERATOR_ALIASES.get(lexeme, lexeme)

            if self._NUMBER.fullmatch(lexeme):
                output.append(self._normalize_number(lexeme))
            elif lexeme in self._OPERAND_NAMES:
                output.append(lexeme)
            elif lexeme in ("+", "-"):
                while stack and stack[-1] != "(":
                    output.append(stack.pop())
                stack.append(lexeme)
            elif lexeme in ("*", "/"):
                while stack and stack[-1] in self._BEFORE_PRODUCT:
                    output.append(stack.pop())
                stack.append(lexeme)
            elif lexeme == "^":
                while stack and stack[-1] in self._BEFORE_POWER:
                    output.append(stack.pop())
                stack.append(lexeme)
            elif lexeme in FUNCTIONS or lexeme == "(":
                stack.append(lexeme)
            elif lexeme == ")":
                while stack and stack[-1] != "(":
                    output.append(stack.pop())
                # Un ')' sin pareja se tolera
                if stack:
                    stack.pop()
            else:
                raise InvalidExpressionError(f"Lexema desconocido: {lexeme!r}")

        while stack:
            output.append(stack.pop())

        postfix = DELIMITER.join(output).strip()
        logger.debug("Postfija de %r: %r", infix, postfix)
        return postfix

    @staticmethod
    def _normalize_number(lexeme: str) -> str:
        number = lexeme.replace(",", ".")
        if number.endswith("."):
            number = number[:-1]
        if number.startswith("."):
            number = "0" + number
        return number

    # ── Evaluación ───────────────────────────────────────────────

    def evaluate(self, infix: str) -> float:
        """Evalúa la expresión y devuelve su valor.

        Raises:
            InvalidExpressionError: lexema desconocido (incluida la variable
                `x`, que aquí no tiene valor) o pila desequilibrada.
            MathDomainError: división por cero, 0/0, 0^0, raíz de un
                negativo o logaritmo de un no positivo.
        """
        tokens = self.to_postfix(infix).split(DELIMITER)
        return self._run(tokens, self._provider.build_namespace(), None)

    def compile(self, infix: str):
        """Compila la expresión en una función de un argumento (la variable `x`).

        La estructura se valida aquí; los errores de dominio aparecen al
        llamar a la función, igual que en evaluate().
        """
        tokens = self.to_postfix(infix).split(DELIMITER)
        namespace = self._provider.build_namespace()
        self._check_arity(tokens, namespace)

        def function(x: float) -> float:
            return self._run(tokens, namespace, float(x))

        return function

    def _run(self, tokens, namespace, variable):
        binary = self._provider.BINARY_OPERATORS
        stack = []

        for lexeme in tokens:
            if self._NUMBER.fullmatch(lexeme):
                stack.append(float(lexeme))
                continue
            if lexeme == VARIABLE and variable is not None:
                stack.append(variable)
                continue

            entry = namespace.get(lexeme)
            if entry is None:
                raise InvalidExpressionError(f"Lexema desconocido: {lexeme!r}")

            if lexeme in binary:
                if len(stack) < 2:
                    raise InvalidExpressionError()
                right = stack.pop()
                left = stack.pop()
                stack.append(entry(left, right))
            elif callable(entry):
                if not stack:
                    raise InvalidExpressionError()
                stack.append(entry(stack.pop()))
            else:
                stack.append(entry)

        if len(stack) != 1:
            raise InvalidExpressionError()
        return stack[0]

    def _check_arity(self, tokens, namespace):
        binary = self._provider.BINARY_OPERATORS
        depth = 0

        for lexeme in tokens:
            if self._NUMBER.fullmatch(lexeme) or lexeme == VARIABLE:
                depth += 1
            elif lexeme in binary:
                if depth < 2:
                    raise InvalidExpressionError()
                depth -= 1
            elif callable(namespace.get(lexeme)):
                if depth < 1:
                    raise InvalidExpressionError()
            elif lexeme in namespace:
                depth += 1
            else:
                raise InvalidExpressionError(f"Lexema desconocido: {lexeme!r}")

        if depth != 1:
            raise InvalidExpressionError()

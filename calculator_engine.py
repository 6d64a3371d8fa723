"""
Motor de cálculo para la calculadora.

Este módulo provee la clase CalculatorEngine, que convierte y evalúa las
expresiones producidas por ExpressionBuilder. No guarda estado entre
llamadas: cada evaluación es independiente.

Contrato de interfaz:
    - to_postfix(expression: str) -> str
    - evaluate(expression: str) -> str   (texto con punto decimal fijo)
    - compile(expression: str) -> función de un argumento
"""

import math

from formula_evaluator import FormulaEvaluator, PythonMathProvider


class CalculatorEngine:
    """Evalúa expresiones infijas separadas por espacios."""

    def __init__(self):
        self._provider = PythonMathProvider()
        self._evaluator = FormulaEvaluator(self._provider)

    def to_postfix(self, expression: str) -> str:
        return self._evaluator.to_postfix(expression)

    # ── Evaluación principal ─────────────────────────────────────

    def evaluate(self, expression: str) -> str:
        """Evalúa la expresión y devuelve el resultado como cadena.

        Raises:
            InvalidExpressionError: expresión mal formada.
            MathDomainError: división por cero, indeterminación o
                argumento fuera del dominio real.
        """
        result = self._evaluator.evaluate(expression)
        return self._format_result(result)

    def compile(self, expression: str):
        return self._evaluator.compile(expression)

    # ── Formato del resultado ────────────────────────────────────

    @staticmethod
    def _format_result(value: float) -> str:
        if math.isnan(value):
            return "NaN"
        if value == float("inf"):
            return "∞"
        if value == float("-inf"):
            return "-∞"
        if value == int(value) and abs(value) < 1e15:
            return str(int(value))
        return f"{value:.15g}"


_default_engine = CalculatorEngine()


def to_postfix(expression: str) -> str:
    return _default_engine.to_postfix(expression)


def evaluate(expression: str) -> str:
    return _default_engine.evaluate(expression)


def compile_function(expression: str):
    return _default_engine.compile(expression)

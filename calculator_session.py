"""Sesión de edición de la calculadora.

Une un ExpressionBuilder con un CalculatorEngine: reenvía las acciones de
la interfaz, limpia la expresión cuando se empieza a editar después de un
resultado y convierte los errores de evaluación en un mensaje para el
usuario sin tocar la expresión en curso.
"""

import logging
import re

from calculator_engine import CalculatorEngine
from calculator_errors import CalculatorError
from expression_builder import ExpressionBuilder

logger = logging.getLogger(__name__)


class CalculatorSession:
    """Una expresión en edición, su resultado y su último error."""

    _PLAIN_NUMBER = re.compile(r"[0-9.,]+")
    _DISPLAY_REPLACEMENTS = (
        (" ", ""),
        ("sqrt", "√"),
        ("*", "×"),
        ("/", "÷"),
        ("p", "π"),
    )

    def __init__(self, builder: ExpressionBuilder = None, engine: CalculatorEngine = None):
        self._subscribers = []
        self._display = ""
        self.builder = builder if builder is not None else ExpressionBuilder()
        self.engine = engine if engine is not None else CalculatorEngine()
        self.result: str | None = None
        self.error: str | None = None
        self.builder.subscribe(self._on_expression_changed)

    # ── Texto para mostrar ───────────────────────────────────────

    @property
    def display(self) -> str:
        return self._display

    @classmethod
    def format_display(cls, expression: str) -> str:
        """Convierte la expresión interna en el texto que ve el usuario."""
        for old, new in cls._DISPLAY_REPLACEMENTS:
            expression = expression.replace(old, new)
        return expression

    def subscribe(self, callback):
        """Registra `callback(display)`; recibe de inmediato el texto actual."""
        self._subscribers.append(callback)
        callback(self._display)

        def unsubscribe():
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def _on_expression_changed(self, expression: str):
        self._display = self.format_display(expression)
        for callback in list(self._subscribers):
            callback(self._display)

    # ── Acciones de edición ──────────────────────────────────────

    def add_digit(self, digit: str):
        self._clear_if_calculated()
        self.builder.add_digit(digit)

    def add_operator(self, op: str):
        self._clear_if_calculated()
        self.builder.add_operator(op)

    def add_decimal_separator(self):
        self._clear_if_calculated()
        self.builder.add_decimal_separator()

    def add_pi(self):
        self._clear_if_calculated()
        self.builder.add_pi()

    def add_e(self):
        self._clear_if_calculated()
        self.builder.add_e()

    def add_function(self, function: str):
        self._clear_if_calculated()
        self.builder.add_function(function)

    def add_opening_parenthesis(self):
        self._clear_if_calculated()
        self.builder.add_opening_parenthesis()

    def add_closing_parenthesis(self):
        self._clear_if_calculated()
        self.builder.add_closing_parenthesis()

    def remove_last_token(self):
        self._clear_if_calculated()
        return self.builder.remove_last_token()

    def clear(self):
        self.result = None
        self.error = None
        self.builder.clear()

    def _clear_if_calculated(self):
        self.error = None
        if self.result is not None:
            self.result = None
            self.builder.clear()

    # ── Cálculo ──────────────────────────────────────────────────

    def calculate(self) -> str | None:
        """Completa la expresión y la evalúa.

        Devuelve el resultado con el separador decimal configurado, o None
        si no hay nada que calcular o la evaluación falló (el mensaje queda
        en `error`).
        """
        if self.result is not None:
            return self.result

        expression = self.builder.finalize()
        if self._PLAIN_NUMBER.fullmatch(self._display):
            return None

        try:
            value = self.engine.evaluate(expression)
        except (CalculatorError, ArithmeticError) as exc:
            msg = str(exc) if str(exc) else type(exc).__name__
            logger.warning("No se pudo evaluar %r: %s", expression, msg)
            self.error = msg
            return None

        self.error = None
        self.result = value.replace(".", self.builder.decimal_separator)
        return self.result

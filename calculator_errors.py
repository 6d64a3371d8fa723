"""Excepciones de la calculadora.

Dos familias:
    - errores del llamador (argumento o expresión mal formados), que
      derivan de ValueError;
    - errores de dominio aritmético, que derivan de ArithmeticError y
      se muestran al usuario como mensaje recuperable.
"""


class CalculatorError(Exception):
    """Base de todos los errores de la calculadora."""


class InvalidArgumentError(CalculatorError, ValueError):
    """Entrada no válida para una operación del constructor."""


class InvalidExpressionError(CalculatorError, ValueError):
    """La expresión contiene un lexema desconocido o está desequilibrada."""

    def __init__(self, message: str = "Expresión inválida"):
        super().__init__(message)


class MathDomainError(CalculatorError, ArithmeticError):
    """Operación fuera del dominio real."""


class DivisionByZeroError(MathDomainError, ZeroDivisionError):
    def __init__(self):
        super().__init__("División por cero")


class IndeterminateZeroOverZeroError(MathDomainError, ZeroDivisionError):
    def __init__(self):
        super().__init__("0/0 es una indeterminación")


class IndeterminateZeroPowerZeroError(MathDomainError):
    def __init__(self):
        super().__init__("0^0 es una indeterminación")


class NegativeRootError(MathDomainError):
    def __init__(self):
        super().__init__("La raíz de un número negativo no es un número real")


class NonPositiveLogarithmError(MathDomainError):
    def __init__(self):
        super().__init__(
            "El logaritmo de un número no positivo no es un número real"
        )

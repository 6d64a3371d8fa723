"""
Constructor incremental de expresiones para la calculadora.

ExpressionBuilder traduce pulsaciones sueltas (dígitos, operadores,
funciones, constantes, paréntesis, separador decimal, retroceso) en una
expresión infija cuyos lexemas van separados por un espacio. Cada paso
deja la expresión coherente: decide si la inserción es legal y si hace
falta un operador implícito, de modo que la interfaz no tenga que saberlo.

Contrato de salida:
    - text: expresión en curso, nunca vacía ("0" por defecto); puede
      estar incompleta.
    - finalize(): expresión lista para FormulaEvaluator.
"""

import functools
import locale
import logging
from enum import Enum

from calculator_errors import InvalidArgumentError

logger = logging.getLogger(__name__)


DELIMITER = " "
DEFAULT_EXPRESSION = "0"
DEFAULT_DECIMAL_SEPARATOR = "."
# Los únicos que FormulaEvaluator reconoce dentro de un número
DECIMAL_SEPARATORS = (".", ",")

PI = "p"
E = "e"
VARIABLE = "x"

OPERATORS = "+-×*÷/^"
FUNCTIONS = (
    "sin",
    "cos",
    "tg",
    "ctg",
    "sqrt",
    "√",
    "ln",
    "lg",
    "abs",
    "floor",
    "ceil",
    "sign",
)
# Letras con las que puede terminar un número con nombre ("п" es la pi cirílica)
NAMED_NUMBERS = "xepп"

_OPERATOR_ALIASES = {"×": "*", "÷": "/"}


def detect_decimal_separator() -> str:
    """Devuelve el separador decimal de la configuración regional activa."""
    point = locale.localeconv().get("decimal_point") or DEFAULT_DECIMAL_SEPARATOR
    if point not in DECIMAL_SEPARATORS:
        logger.debug("Separador regional %r no soportado; se usa '.'", point)
        return DEFAULT_DECIMAL_SEPARATOR
    return point


class Token(Enum):
    """Tipo del último lexema añadido; gobierna todas las reglas de adyacencia."""

    NONE = "none"
    DIGIT = "digit"
    NAMED_NUMBER = "named_number"  # constante o variable
    DECIMAL_SEPARATOR = "decimal_separator"
    OPERATOR = "operator"
    FUNCTION = "function"
    OPENING_PARENTHESIS = "opening_parenthesis"
    CLOSING_PARENTHESIS = "closing_parenthesis"


# Tokens tras los cuales la yuxtaposición significa multiplicación
_NUMBER_LIKE = (Token.DIGIT, Token.NAMED_NUMBER, Token.CLOSING_PARENTHESIS)

# Tokens con los que una expresión no puede terminar
_INCOMPLETE = (
    Token.FUNCTION,
    Token.OPERATOR,
    Token.DECIMAL_SEPARATOR,
    Token.OPENING_PARENTHESIS,
)


def _publishes(method):
    """Notifica a los suscriptores una sola vez, al final de la operación."""

    @functools.wraps(method)
    def wrapper(self, *args, **kwargs):
        result = method(self, *args, **kwargs)
        self._publish()
        return result

    return wrapper


class ExpressionBuilder:
    """Construye paso a paso una expresión infija separada por espacios."""

    def __init__(
        self,
        decimal_separator: str = DEFAULT_DECIMAL_SEPARATOR,
        supports_variable: bool = False,
    ):
        if decimal_separator not in DECIMAL_SEPARATORS:
            raise InvalidArgumentError(
                f"Separador decimal no válido: {decimal_separator!r}"
            )

        self._decimal_separator = decimal_separator
        self._supports_variable = supports_variable
        self._subscribers = []
        self._published = DEFAULT_EXPRESSION

        self._lexemes = [DEFAULT_EXPRESSION]
        self._open_parentheses = 0
        self._last_token = Token.NONE
        self._can_add_decimal_separator = True

    # ── Estado ───────────────────────────────────────────────────

    @property
    def decimal_separator(self) -> str:
        return self._decimal_separator

    @property
    def supports_variable(self) -> bool:
        return self._supports_variable

    @property
    def text(self) -> str:
        """Expresión en curso, sin limpieza; puede no ser evaluable."""
        return DELIMITER.join(self._lexemes)

    @property
    def last_token(self) -> Token:
        return self._last_token

    @property
    def is_empty(self) -> bool:
        return self._last_token is Token.NONE

    @property
    def open_parentheses_count(self) -> int:
        return self._open_parentheses

    @property
    def can_add_decimal_separator(self) -> bool:
        return self._can_add_decimal_separator

    @property
    def can_add_closing_parenthesis(self) -> bool:
        return (
            self._open_parentheses > 0
            and self._last_token is not Token.OPENING_PARENTHESIS
        )

    def __str__(self):
        return self.text

    # ── Suscripción ──────────────────────────────────────────────

    def subscribe(self, callback):
        """Registra `callback(text)` para cada cambio del texto.

        El callback recibe de inmediato el texto actual. Devuelve una
        función que cancela la suscripción.
        """
        self._subscribers.append(callback)
        callback(self._published)

        def unsubscribe():
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def _publish(self):
        text = self.text
        if text == self._published:
            return
        self._published = text
        for callback in list(self._subscribers):
            callback(text)

    # ── Operaciones de edición ───────────────────────────────────

    @_publishes
    def add_digit(self, digit: str):
        """Añade un dígito, concatenándolo al número en curso si lo hay.

        Raises:
            InvalidArgumentError: el argumento no es un dígito 0-9.
        """
        if not isinstance(digit, str) or len(digit) != 1 or digit not in "0123456789":
            raise InvalidArgumentError(f"No es un dígito: {digit!r}")
        self._insert_digit(digit)
        return self

    @_publishes
    def add_pi(self):
        self._insert_named_number(PI)
        return self

    @_publishes
    def add_e(self):
        self._insert_named_number(E)
        return self

    @_publishes
    def add_variable(self):
        """Añade la variable `x`; no hace nada si la capacidad está desactivada."""
        if not self._supports_variable:
            logger.debug("Variable ignorada: el constructor no la admite")
            return self
        self._insert_named_number(VARIABLE)
        return self

    @_publishes
    def add_decimal_separator(self):
        """Añade el separador decimal; tras un no-dígito inserta antes un 0."""
        self._insert_decimal_separator()
        return self

    @_publishes
    def add_operator(self, op: str):
        """Añade un operador binario o el menos unario.

        Operadores admitidos: + - × * ÷ / ^ (× y ÷ se guardan como * y /).
        Un operador pendiente se sustituye en lugar de apilarse.

        Raises:
            InvalidArgumentError: el operador no está admitido.
        """
        if not isinstance(op, str) or len(op) != 1 or op not in OPERATORS:
            raise InvalidArgumentError(f"Operador no válido: {op!r}")
        self._insert_operator(op)
        return self

    @_publishes
    def add_function(self, function: str):
        """Añade una función unaria (sin, cos, tg, ctg, sqrt, √, ln, lg,
        abs, floor, ceil, sign), sin distinguir mayúsculas.

        Raises:
            InvalidArgumentError: la función no está admitida.
        """
        name = function.lower() if isinstance(function, str) else function
        if name not in FUNCTIONS:
            raise InvalidArgumentError(f"Función no válida: {function!r}")

        self._begin_operand()
        self._lexemes.append(name)
        self._set_last_token(Token.FUNCTION)
        return self

    @_publishes
    def add_opening_parenthesis(self):
        self._begin_operand()
        self._lexemes.append("(")
        self._open_parentheses += 1
        self._set_last_token(Token.OPENING_PARENTHESIS)
        return self

    @_publishes
    def add_closing_parenthesis(self):
        """Cierra un paréntesis si hay alguno abierto y no quedaría vacío."""
        self._insert_closing_parenthesis()
        return self

    @_publishes
    def remove_last_token(self):
        """Elimina el último lexema (una función completa o un carácter).

        Returns:
            El texto eliminado, o None si la expresión ya estaba vacía.
        """
        return self._remove_last()

    @_publishes
    def clear(self):
        self._reset()
        return self

    @_publishes
    def finalize(self) -> str:
        """Limpia la expresión y la devuelve lista para evaluar.

        Quita los tokens con los que no puede terminar una expresión y
        cierra los paréntesis abiertos.
        """
        while self._last_token in _INCOMPLETE:
            self._remove_last()
        while self.can_add_closing_parenthesis:
            self._insert_closing_parenthesis()
        return self.text

    # ── Transiciones internas (no notifican) ─────────────────────

    def _set_last_token(self, token: Token):
        if token is Token.DECIMAL_SEPARATOR:
            self._can_add_decimal_separator = False
        elif token is not Token.DIGIT:
            self._can_add_decimal_separator = True
        self._last_token = token

    def _reset(self):
        self._lexemes = [DEFAULT_EXPRESSION]
        self._open_parentheses = 0
        self._set_last_token(Token.NONE)

    def _multiply_if_juxtaposed(self):
        if self._last_token in _NUMBER_LIKE:
            self._insert_operator("*")

    def _begin_operand(self):
        # La expresión vacía se sustituye en vez de ampliarse
        if self._last_token is Token.NONE:
            self._lexemes.clear()
            return
        if self._last_token is Token.DECIMAL_SEPARATOR:
            self._remove_last()
        self._multiply_if_juxtaposed()

    def _insert_digit(self, digit: str):
        if self._lexemes == [DEFAULT_EXPRESSION]:
            self._lexemes.clear()

        if not self._lexemes:
            self._lexemes.append(digit)
        elif self._last_token in (Token.DIGIT, Token.DECIMAL_SEPARATOR):
            self._lexemes[-1] += digit
        else:
            self._multiply_if_juxtaposed()
            self._lexemes.append(digit)
        self._set_last_token(Token.DIGIT)

    def _insert_named_number(self, name: str):
        self._begin_operand()
        self._lexemes.append(name)
        self._set_last_token(Token.NAMED_NUMBER)

    def _insert_decimal_separator(self):
        if not self._can_add_decimal_separator:
            logger.debug("Separador decimal ignorado: el número ya tiene uno")
            return

        if self._last_token in (Token.NONE, Token.DIGIT):
            self._lexemes[-1] += self._decimal_separator
        else:
            self._multiply_if_juxtaposed()
            self._lexemes.append(DEFAULT_EXPRESSION + self._decimal_separator)
        self._set_last_token(Token.DECIMAL_SEPARATOR)

    def _insert_operator(self, op: str):
        op = _OPERATOR_ALIASES.get(op, op)

        if op == "-" and self._last_token is Token.OPENING_PARENTHESIS:
            self._insert_digit("0")
        elif op != "-" and self._last_token is Token.NONE:
            logger.debug("Operador %r ignorado: expresión vacía", op)
            return

        if self._last_token in (Token.OPERATOR, Token.DECIMAL_SEPARATOR):
            self._remove_last()

        if self._last_token in _NUMBER_LIKE or (
            op == "-" and self._last_token is Token.NONE
        ):
            self._lexemes.append(op)
            self._set_last_token(Token.OPERATOR)
        else:
            logger.debug("Operador %r ignorado tras %s", op, self._last_token.value)

    def _insert_closing_parenthesis(self):
        if not self.can_add_closing_parenthesis:
            return
        self._lexemes.append(")")
        self._open_parentheses -= 1
        self._set_last_token(Token.CLOSING_PARENTHESIS)

    def _remove_last(self):
        if self.is_empty:
            return None

        if self._last_token is Token.FUNCTION:
            removed = self._lexemes.pop()
        else:
            if self._last_token is Token.OPENING_PARENTHESIS:
                self._open_parentheses -= 1
            elif self._last_token is Token.CLOSING_PARENTHESIS:
                self._open_parentheses += 1

            last = self._lexemes[-1]
            removed = last[-1]
            if len(last) > 1:
                self._lexemes[-1] = last[:-1]
            else:
                self._lexemes.pop()

        if not self._lexemes:
            self._reset()
            return removed

        tail = self._lexemes[-1]
        self._set_last_token(self._classify(tail[-1]))
        if self._last_token in (Token.DIGIT, Token.DECIMAL_SEPARATOR):
            self._can_add_decimal_separator = self._decimal_separator not in tail
        return removed

    def _classify(self, char: str) -> Token:
        if char in "0123456789":
            return Token.DIGIT
        if char == self._decimal_separator:
            return Token.DECIMAL_SEPARATOR
        if char in NAMED_NUMBERS:
            return Token.NAMED_NUMBER
        if char in OPERATORS:
            return Token.OPERATOR
        if char == "(":
            return Token.OPENING_PARENTHESIS
        if char == ")":
            return Token.CLOSING_PARENTHESIS
        return Token.FUNCTION

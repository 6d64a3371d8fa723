"""Punto de entrada de la calculadora."""

import locale
import logging
import tkinter as tk

from calculator_engine import CalculatorEngine
from calculator_session import CalculatorSession
from calculator_ui import CalculatorApp
from expression_builder import ExpressionBuilder, detect_decimal_separator


DECIMAL_SEPARATOR = None   # None: el de la configuración regional
LOG_LEVEL = "WARNING"
WINDOW_GEOMETRY = "420x620"

logger = logging.getLogger(__name__)


def resolve_decimal_separator() -> str:
    if DECIMAL_SEPARATOR is not None:
        return DECIMAL_SEPARATOR
    try:
        locale.setlocale(locale.LC_NUMERIC, "")
    except locale.Error as exc:
        logger.warning("Configuración regional no disponible (%s); se usa '.'", exc)
    return detect_decimal_separator()


def main():
    logging.basicConfig(
        level=LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    builder = ExpressionBuilder(decimal_separator=resolve_decimal_separator())
    session = CalculatorSession(builder=builder, engine=CalculatorEngine())

    root = tk.Tk()
    root.geometry(WINDOW_GEOMETRY)
    root.minsize(380, 580)
    CalculatorApp(root, session=session)
    root.mainloop()


if __name__ == "__main__":
    main()

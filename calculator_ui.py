"""
Interfaz gráfica de la calculadora.

Usa tkinter. La ventana no edita texto por su cuenta: cada botón o tecla
se traduce en una acción de CalculatorSession, y la pantalla se limita a
mostrar lo que la sesión publica.
"""

import tkinter as tk
from tkinter import font as tkfont

from calculator_session import CalculatorSession


class CalculatorApp:
    """Ventana principal de la calculadora."""

    # ── Paleta de colores ────────────────────────────────────────
    C = {
        "bg":         "#1E1E2E",
        "display_bg": "#181825",
        "num":        "#313244",
        "num_fg":     "#CDD6F4",
        "op":         "#F38BA8",
        "op_fg":      "#1E1E2E",
        "func":       "#45475A",
        "func_fg":    "#CDD6F4",
        "special":    "#585B70",
        "special_fg": "#CDD6F4",
        "equals":     "#89B4FA",
        "equals_fg":  "#1E1E2E",
        "expr_fg":    "#BAC2DE",
        "result_fg":  "#A6E3A1",
        "error_fg":   "#F38BA8",
    }

    # ── Panel de funciones ───────────────────────────────────────
    #  (texto, función que se añade)

    FUNCTION_BUTTONS = [
        ("sin", "sin"), ("cos", "cos"), ("tg", "tg"), ("ctg", "ctg"),
        ("√", "sqrt"), ("ln", "ln"),
        ("lg", "lg"), ("|x|", "abs"), ("⌊x⌋", "floor"),
        ("⌈x⌉", "ceil"), ("sgn", "sign"),
    ]

    # ── Definiciones del teclado principal ────────────────────────
    #  Cada fila es una lista de (texto, acción, tipo_color)
    #  tipo_color: "num", "op", "func", "special", "equals"

    KEYPAD = [
        [("π", "pi", "func"), ("e", "e", "func"),
         ("(", "open", "func"), (")", "close", "func"),
         ("^", "op:^", "func")],

        [("AC", "clear", "special"), ("⌫", "backspace", "special"),
         ("÷", "op:÷", "op")],

        [("7", "digit:7", "num"), ("8", "digit:8", "num"),
         ("9", "digit:9", "num"), ("×", "op:×", "op")],

        [("4", "digit:4", "num"), ("5", "digit:5", "num"),
         ("6", "digit:6", "num"), ("−", "op:-", "op")],

        [("1", "digit:1", "num"), ("2", "digit:2", "num"),
         ("3", "digit:3", "num"), ("+", "op:+", "op")],

        [("0", "digit:0", "num"), ("sep", "separator", "num"),
         ("=", "equals", "equals")],
    ]

    # Teclas físicas → acción
    KEY_ACTIONS = {
        **{d: f"digit:{d}" for d in "0123456789"},
        **{op: f"op:{op}" for op in "+-*/^"},
        "(": "open",
        ")": "close",
        ".": "separator",
        ",": "separator",
        "p": "pi",
        "e": "e",
    }

    # ────────────────────────────────────────────────────────────

    def __init__(self, root: tk.Tk, session: CalculatorSession = None):
        self.root = root
        self.root.title("Calculadora")
        self.root.configure(bg=self.C["bg"])
        self.root.resizable(False, False)

        self.session = session if session is not None else CalculatorSession()

        self._init_fonts()
        self._create_display()
        self._create_function_panel()
        self._create_keypad()
        self._bind_keyboard()

        self.session.subscribe(self.expr_var.set)

    # ── Fuentes ──────────────────────────────────────────────────

    def _init_fonts(self):
        self._f_expr   = tkfont.Font(family="Consolas", size=16)
        self._f_result = tkfont.Font(family="Consolas", size=22, weight="bold")
        self._f_btn    = tkfont.Font(family="Segoe UI", size=15)
        self._f_func   = tkfont.Font(family="Segoe UI", size=12)

    # ── Pantalla ─────────────────────────────────────────────────

    def _create_display(self):
        frame = tk.Frame(self.root, bg=self.C["display_bg"], padx=12, pady=8)
        frame.pack(fill="x", padx=6, pady=(6, 2))

        # Expresión en curso (solo lectura: se edita con las acciones)
        self.expr_var = tk.StringVar()
        tk.Label(
            frame, textvariable=self.expr_var, anchor="e",
            font=self._f_expr, bg=self.C["display_bg"], fg=self.C["expr_fg"],
        ).pack(fill="x", pady=(4, 0))

        self.result_var = tk.StringVar(value="")
        self.result_label = tk.Label(
            frame, textvariable=self.result_var, anchor="e",
            font=self._f_result, bg=self.C["display_bg"],
            fg=self.C["result_fg"],
        )
        self.result_label.pack(fill="x", pady=(2, 4))

    # ── Panel de funciones ───────────────────────────────────────

    def _create_function_panel(self):
        frame = tk.Frame(self.root, bg=self.C["bg"])
        frame.pack(fill="x", padx=6, pady=2)
        columns = 6
        for col in range(columns):
            frame.columnconfigure(col, weight=1, uniform="fn")

        for idx, (text, function) in enumerate(self.FUNCTION_BUTTONS):
            btn = tk.Button(
                frame, text=text, font=self._f_func,
                bg=self.C["func"], fg=self.C["func_fg"],
                activebackground=self.C["special"], relief="flat",
                command=lambda f=function: self._on_key(f"func:{f}"),
            )
            btn.grid(row=idx // columns, column=idx % columns,
                     sticky="nsew", padx=2, pady=2, ipady=6)

    # ── Teclado numérico / operadores ────────────────────────────

    def _create_keypad(self):
        frame = tk.Frame(self.root, bg=self.C["bg"])
        frame.pack(fill="both", expand=True, padx=6, pady=(2, 6))

        max_cols = max(len(row) for row in self.KEYPAD)
        for c in range(max_cols):
            frame.columnconfigure(c, weight=1, uniform="key")

        separator = self.session.builder.decimal_separator
        for r, row_def in enumerate(self.KEYPAD):
            spans = self._compute_spans(len(row_def), max_cols)
            col_pos = 0
            for idx, (text, action, kind) in enumerate(row_def):
                if action == "separator":
                    text = separator
                btn = tk.Button(
                    frame, text=text, font=self._f_btn,
                    bg=self.C[kind], fg=self.C[f"{kind}_fg"],
                    activebackground=self.C["special"], relief="flat",
                    command=lambda a=action: self._on_key(a),
                )
                btn.grid(row=r, column=col_pos, columnspan=spans[idx],
                         sticky="nsew", padx=2, pady=2, ipady=8)
                col_pos += spans[idx]

        for r in range(len(self.KEYPAD)):
            frame.rowconfigure(r, weight=1)

    @staticmethod
    def _compute_spans(cols_in_row: int, max_cols: int) -> list[int]:
        """Reparte max_cols entre cols_in_row botones."""
        base, extra = divmod(max_cols, cols_in_row)
        spans = [base] * cols_in_row
        # Asignar columnas extra al último botón (generalmente '=')
        spans[-1] += extra
        return spans

    # ── Atajos de teclado ────────────────────────────────────────

    def _bind_keyboard(self):
        self.root.bind("<Return>", lambda _e: self._on_key("equals"))
        self.root.bind("<KP_Enter>", lambda _e: self._on_key("equals"))
        self.root.bind("<BackSpace>", lambda _e: self._on_key("backspace"))
        self.root.bind("<Escape>", lambda _e: self._on_key("clear"))
        self.root.bind("<Key>", self._on_keypress)

    def _on_keypress(self, event):
        action = self.KEY_ACTIONS.get(event.char)
        if action is not None:
            self._on_key(action)

    # ── Acciones ─────────────────────────────────────────────────

    def _on_key(self, action: str):
        session = self.session
        if action == "clear":
            session.clear()
        elif action == "backspace":
            session.remove_last_token()
        elif action == "equals":
            session.calculate()
        elif action == "separator":
            session.add_decimal_separator()
        elif action == "pi":
            session.add_pi()
        elif action == "e":
            session.add_e()
        elif action == "open":
            session.add_opening_parenthesis()
        elif action == "close":
            session.add_closing_parenthesis()
        elif action.startswith("digit:"):
            session.add_digit(action[6:])
        elif action.startswith("op:"):
            session.add_operator(action[3:])
        elif action.startswith("func:"):
            session.add_function(action[5:])
        self._show_outcome()

    def _show_outcome(self):
        if self.session.error is not None:
            self.result_label.config(fg=self.C["error_fg"])
            self.result_var.set(f"Error: {self.session.error}")
        else:
            self.result_label.config(fg=self.C["result_fg"])
            self.result_var.set(self.session.result or "")

from __future__ import annotations

import logging
import os
import signal
import tkinter as tk
from collections.abc import Mapping
from dataclasses import dataclass

from .control import InputControl, calc_input, numeric_input, parse_number
from .widgets import (
    ControlFactory,
    InputBox,
    display_text,
    display_valid,
    display_value,
)

_LOG = logging.getLogger(__name__)

LOG_LEVEL_ENV = "CALCINPUT_LOG_LEVEL"

UI_FONT = ("DejaVu Sans", 11)
UI_FONT_BOLD = ("DejaVu Sans", 11, "bold")
VALUE_FONT = ("DejaVu Sans Mono", 11)
APP_BG = "#f5f7fa"
PANEL_BG = "#ffffff"

BLOCKS: tuple[tuple[str, str, ControlFactory], ...] = (
    ("numeric", "Numeric Input", numeric_input),
    ("calc", "Calculator Input", calc_input),
)

CUSTOM_BLOCKS: tuple[tuple[str, str, ControlFactory], ...] = (
    ("custom_numeric", "Custom Numeric Input", numeric_input),
    ("custom_calc", "Custom Calculator Input", calc_input),
)


def parse_value_entry(text: str) -> float | None:
    """Parse the "set value" field: blank clears the control."""
    if text.strip() == "":
        return None
    return parse_number(text)


def configure_logging(environ: Mapping[str, str] | None = None) -> int:
    env = os.environ if environ is None else environ
    name = env.get(LOG_LEVEL_ENV, "WARNING").strip().upper()
    level = logging.getLevelName(name)
    if not isinstance(level, int):
        level = logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    return level


@dataclass
class ReadoutVars:
    value: tk.StringVar
    text: tk.StringVar
    is_valid: tk.StringVar

    def bind(self, control: InputControl) -> None:
        self.value.set(display_value(control.value))
        self.text.set(display_text(control.text))
        self.is_valid.set(display_valid(control.is_valid))

        def on_value(value) -> None:
            self.value.set(display_value(value))

        def on_text(text: str) -> None:
            self.text.set(display_text(text))

        def on_valid(is_valid: bool) -> None:
            self.is_valid.set(display_valid(is_valid))

        control.value_changed.on(on_value)
        control.text_changed.on(on_text)
        control.is_valid_changed.on(on_valid)


class ControlDemoPanel(tk.LabelFrame):
    def __init__(
        self,
        parent: tk.Widget,
        title: str,
        control_factory: ControlFactory,
        status_var: tk.StringVar,
    ) -> None:
        super().__init__(
            parent,
            text=title,
            font=("DejaVu Sans", 12, "bold"),
            bg=PANEL_BG,
            fg="#22313f",
            bd=1,
            relief="solid",
            padx=10,
            pady=8,
        )
        self.status_var = status_var
        self.input_box = InputBox(self, control_factory=control_factory, name=title)
        self.input_box.pack(fill="x", pady=(0, 8))
        self.control = self.input_box.control

        self.readouts = ReadoutVars(
            value=tk.StringVar(),
            text=tk.StringVar(),
            is_valid=tk.StringVar(),
        )
        self._build_readout_row("Value:", self.readouts.value)
        self._build_readout_row("Text:", self.readouts.text)
        self._build_readout_row("Is valid:", self.readouts.is_valid)
        self.readouts.bind(self.control)

        self.set_value_var = tk.StringVar()
        self.set_text_var = tk.StringVar()
        self.set_value_button = self._build_setter_row(
            "Set value", self.set_value_var, self._on_set_value
        )
        self.set_text_button = self._build_setter_row(
            "Set text", self.set_text_var, self._on_set_text
        )

    def _build_readout_row(self, label: str, variable: tk.StringVar) -> None:
        row = tk.Frame(self, bg=PANEL_BG)
        row.pack(fill="x", pady=1)
        tk.Label(
            row,
            text=label,
            width=10,
            anchor="w",
            bg=PANEL_BG,
            fg="#34495e",
            font=UI_FONT_BOLD,
        ).pack(side="left")
        tk.Label(
            row,
            textvariable=variable,
            anchor="w",
            bg=PANEL_BG,
            fg="#1f2d3d",
            font=VALUE_FONT,
        ).pack(side="left", fill="x", expand=True)

    def _build_setter_row(self, label: str, variable: tk.StringVar, command) -> tk.Button:
        row = tk.Frame(self, bg=PANEL_BG)
        row.pack(fill="x", pady=(4, 0))
        entry = tk.Entry(row, textvariable=variable, font=VALUE_FONT, relief="solid", bd=1)
        entry.pack(side="left", fill="x", expand=True)
        entry.bind("<Return>", lambda _event: command())
        button = tk.Button(
            row,
            text=label,
            command=command,
            font=UI_FONT_BOLD,
            padx=10,
            bd=1,
            relief="solid",
            cursor="hand2",
        )
        button.pack(side="left", padx=(8, 0))
        return button

    def _on_set_value(self) -> None:
        if self.control.destroyed:
            return
        raw = self.set_value_var.get()
        try:
            value = parse_value_entry(raw)
        except ValueError:
            self.status_var.set(f"Cannot assign value: {raw!r} is not a number.")
            return
        self.control.value = value
        self.status_var.set(f"Value of {self['text']} set to {display_value(value)}.")

    def _on_set_text(self) -> None:
        if self.control.destroyed:
            return
        self.control.text = self.set_text_var.get()
        self.status_var.set(f"Text of {self['text']} set to {display_text(self.control.text)}.")

    def disable_setters(self) -> None:
        self.set_value_button.configure(state="disabled")
        self.set_text_button.configure(state="disabled")


class CalcInputDemoApp(tk.Tk):
    def __init__(self) -> None:
        super().__init__()
        self.title("Numeric and Calculator Inputs")
        self.geometry("760x720")
        self.minsize(560, 520)
        self.configure(bg=APP_BG)

        self.status_var = tk.StringVar(
            value="Type a number or a formula such as (2+3)*4."
        )
        self.panels: dict[str, ControlDemoPanel] = {}
        self.custom_inputs: dict[str, InputBox] = {}

        self._build_ui()
        self._install_signal_handlers()
        self.bind_all("<Escape>", self._on_escape_quit, add=True)

    def _build_ui(self) -> None:
        root = tk.Frame(self, bg=APP_BG)
        root.pack(fill="both", expand=True, padx=16, pady=14)

        tk.Label(
            root,
            text="Numeric / Calculator Input Controls",
            bg=APP_BG,
            fg="#1d2a38",
            font=("DejaVu Sans", 18, "bold"),
        ).pack(anchor="w", pady=(0, 10))

        for key, title, factory in BLOCKS:
            panel = ControlDemoPanel(root, title, factory, self.status_var)
            panel.pack(fill="x", pady=6)
            self.panels[key] = panel

        custom = tk.Frame(root, bg=APP_BG)
        custom.pack(fill="x", pady=6)
        for key, title, factory in CUSTOM_BLOCKS:
            column = tk.Frame(custom, bg=APP_BG)
            column.pack(side="left", fill="x", expand=True, padx=(0, 8))
            tk.Label(column, text=title, bg=APP_BG, fg="#22313f", font=UI_FONT_BOLD).pack(
                anchor="w"
            )
            box = InputBox(column, control_factory=factory, name=title)
            box.pack(fill="x")
            self.custom_inputs[key] = box

        self.destroy_button = tk.Button(
            root,
            text="Destroy all",
            command=self._destroy_all_controls,
            font=UI_FONT_BOLD,
            padx=12,
            pady=6,
            bd=1,
            relief="solid",
            cursor="hand2",
        )
        self.destroy_button.pack(anchor="w", pady=(10, 0))

        tk.Label(
            root,
            textvariable=self.status_var,
            bg=APP_BG,
            fg="#3f5368",
            anchor="w",
            font=UI_FONT,
        ).pack(fill="x", pady=(8, 0))

    def _install_signal_handlers(self) -> None:
        def _on_sigint(_signum: int, _frame: object) -> None:
            self.after(0, self._quit_app)

        signal.signal(signal.SIGINT, _on_sigint)

    def _destroy_all_controls(self) -> None:
        for panel in self.panels.values():
            panel.input_box.destroy()
            panel.disable_setters()
        for box in self.custom_inputs.values():
            box.destroy()
        self.destroy_button.configure(state="disabled")
        self.status_var.set("All controls destroyed.")
        _LOG.info("destroyed %d controls", len(self.panels) + len(self.custom_inputs))

    def _on_escape_quit(self, _event: tk.Event) -> str:
        self._quit_app()
        return "break"

    def _quit_app(self) -> None:
        self.quit()
        self.destroy()


def main() -> None:
    configure_logging()
    app = CalcInputDemoApp()
    app.mainloop()

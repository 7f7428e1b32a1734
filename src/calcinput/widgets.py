from __future__ import annotations

import logging
import tkinter as tk
from collections.abc import Callable
from typing import Any

from .control import (
    UNDETERMINED,
    HostNotFoundError,
    InputControl,
    evaluate_formula,
    numeric_input,
)

_LOG = logging.getLogger(__name__)

ENTRY_FONT = ("DejaVu Sans Mono", 17, "bold")
RESULT_FONT = ("DejaVu Sans Mono", 13)

FRAME_BG = "#ffffff"
BORDER_COLOR = "#b8b8b8"
ACTIVE_BORDER_COLOR = "#3d7dca"
ERROR_BG = "#ffeaea"
ERROR_BORDER_COLOR = "#cc4444"
RESULT_FG = "#34495e"
RESULT_ERROR_FG = "#bf2a2a"

ControlFactory = Callable[..., InputControl]


def resolve_host(root: tk.Misc, host: tk.Misc | str | None) -> tk.Misc:
    if host is None:
        raise HostNotFoundError("Host element not found")
    if isinstance(host, str):
        try:
            return root.nametowidget(host)
        except KeyError as exc:
            raise HostNotFoundError(f"Host element not found: {host!r}") from exc
    return host


def display_value(value: Any) -> str:
    if value is None:
        return "(empty)"
    if value is UNDETERMINED:
        return "(undetermined)"
    return str(value)


def display_text(text: str) -> str:
    return text or '""'


def display_valid(is_valid: bool) -> str:
    return "valid" if is_valid else "invalid"


class InputBox(tk.Frame):
    """Text box bound to an InputControl.

    Keystrokes go to ``control.text``; text changes coming from the control
    (a direct value assignment, say) are written back into the entry. The
    frame border shows focus, the entry background shows invalid text, and
    expression controls get a result readout under the entry.
    """

    def __init__(
        self,
        parent: tk.Misc,
        host: tk.Misc | str | None = None,
        control_factory: ControlFactory = numeric_input,
        *,
        name: str | None = None,
        show_result: bool | None = None,
    ) -> None:
        host_widget = resolve_host(parent, parent if host is None else host)
        super().__init__(
            host_widget,
            bg=FRAME_BG,
            highlightthickness=1,
            highlightbackground=BORDER_COLOR,
            padx=4,
            pady=4,
        )
        self.control = control_factory(host_widget, name=name)
        self._programmatic = False
        self._active = False

        self.text_var = tk.StringVar(value=self.control.text)
        self.entry = tk.Entry(
            self,
            textvariable=self.text_var,
            font=ENTRY_FONT,
            relief="solid",
            bd=1,
            highlightthickness=0,
        )
        self.entry.pack(fill="x")
        self._default_bg = self.entry.cget("bg")

        if show_result is None:
            show_result = self.control.derive is evaluate_formula
        self.result_var: tk.StringVar | None = None
        self.result_label: tk.Label | None = None
        if show_result:
            self.result_var = tk.StringVar(value=self.control.result_text)
            self.result_label = tk.Label(
                self,
                textvariable=self.result_var,
                anchor="e",
                bg=FRAME_BG,
                fg=RESULT_FG,
                font=RESULT_FONT,
            )
            self.result_label.pack(fill="x")

        self._trace_id = self.text_var.trace_add("write", self._on_entry_change)
        self.entry.bind("<FocusIn>", self._on_focus_in, add=True)
        self.entry.bind("<FocusOut>", self._on_focus_out, add=True)

        self.control.value_changed.on(self._on_value_changed)
        self.control.text_changed.on(self._on_text_changed)
        self.control.is_valid_changed.on(self._on_is_valid_changed)

    @property
    def active(self) -> bool:
        return self._active

    def _on_entry_change(self, *_args) -> None:
        if self._programmatic or self.control.destroyed:
            return
        self.control.text = self.text_var.get()

    def _on_text_changed(self, text: str) -> None:
        if self.text_var.get() == text:
            return
        self._programmatic = True
        try:
            self.text_var.set(text)
        finally:
            self._programmatic = False

    def _on_value_changed(self, _value: Any) -> None:
        self._refresh_result()

    def _on_is_valid_changed(self, is_valid: bool) -> None:
        self._set_invalid(not is_valid)
        self._refresh_result()

    def _refresh_result(self) -> None:
        if self.result_var is None or self.result_label is None:
            return
        self.result_var.set(self.control.result_text)
        self.result_label.configure(
            fg=RESULT_FG if self.control.is_valid else RESULT_ERROR_FG
        )

    def _set_invalid(self, is_invalid: bool) -> None:
        if is_invalid:
            self.entry.configure(bg=ERROR_BG)
        else:
            self.entry.configure(bg=self._default_bg)
        self._paint_border()

    def _set_active(self, active: bool) -> None:
        self._active = active
        self._paint_border()
        if not self.control.destroyed:
            self.control.notify_focus_changed(active)

    def _paint_border(self) -> None:
        if not self.control.destroyed and not self.control.is_valid:
            color = ERROR_BORDER_COLOR
        elif self._active:
            color = ACTIVE_BORDER_COLOR
        else:
            color = BORDER_COLOR
        self.configure(highlightbackground=color, highlightcolor=color)

    def _on_focus_in(self, _event: tk.Event) -> None:
        self._set_active(True)

    def _on_focus_out(self, _event: tk.Event) -> None:
        self._set_active(False)

    def destroy(self) -> None:
        if not self.control.destroyed:
            try:
                self.text_var.trace_remove("write", self._trace_id)
            except tk.TclError:
                _LOG.debug("trace already removed for %s", self.control.name)
            self.control.destroy()
        super().destroy()

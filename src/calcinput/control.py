from __future__ import annotations

import logging
import math
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Union

from .events import EventObserver
from .expression import evaluate

_LOG = logging.getLogger(__name__)

Number = Union[int, float]
Derivation = Callable[[str], float]


class _Undetermined:
    _instance: _Undetermined | None = None

    def __new__(cls) -> _Undetermined:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "UNDETERMINED"

    def __reduce__(self) -> str:
        return "UNDETERMINED"


UNDETERMINED = _Undetermined()


class HostNotFoundError(LookupError):
    pass


class ControlDestroyedError(RuntimeError):
    pass


@dataclass(frozen=True)
class TextEdit:
    text: str


@dataclass(frozen=True)
class ValueEdit:
    value: Number | None


Edit = Union[TextEdit, ValueEdit]


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def canonical_text(value: Number) -> str:
    return str(value)


def parse_number(text: str) -> float:
    cleaned = text.strip()
    if "_" in cleaned or not cleaned.isascii():
        raise ValueError(f"Not a number: {text!r}")
    try:
        value = float(cleaned)
    except ValueError as exc:
        raise ValueError(f"Not a number: {text!r}") from exc
    if not math.isfinite(value):
        raise ValueError(f"Not a finite number: {text!r}")
    return value


def evaluate_formula(text: str) -> float:
    value = evaluate(text)
    if not math.isfinite(value):
        raise ValueError(f"Formula result is not finite: {text!r}")
    return value


def _field_changed(old: Any, new: Any) -> bool:
    if old is new:
        return False
    if _is_number(old) and _is_number(new):
        return old != new
    if isinstance(old, str) and isinstance(new, str):
        return old != new
    # None, UNDETERMINED and bools compare by identity
    return True


class InputControl:
    """Keeps a typed value, its raw text and a validity flag consistent.

    Text edits derive the value through ``derive`` (a function from text to
    a number that raises ValueError on malformed content); value edits
    derive the canonical text. Malformed content never raises: it leaves
    ``is_valid`` False and ``value`` UNDETERMINED with the text kept as
    typed. Only wrong-typed assignments raise, with TypeError.

    Each of ``value_changed``, ``text_changed`` and ``is_valid_changed``
    fires with the new field value when, and only when, that field changed,
    in that order, after all three fields have been stored.
    """

    def __init__(
        self,
        host: Any,
        derive: Derivation = parse_number,
        *,
        name: str | None = None,
    ) -> None:
        if host is None:
            raise HostNotFoundError("Host element not found")

        self.name = name or type(self).__name__
        self._host = host
        self._derive = derive
        self._destroyed = False

        self._value: Number | None | _Undetermined = None
        self._text = ""
        self._is_valid = True

        self.value_changed = EventObserver(f"{self.name}.value_changed")
        self.text_changed = EventObserver(f"{self.name}.text_changed")
        self.is_valid_changed = EventObserver(f"{self.name}.is_valid_changed")

    def _check_alive(self) -> None:
        if self._destroyed:
            raise ControlDestroyedError(f"{self.name} has been destroyed")

    @property
    def destroyed(self) -> bool:
        return self._destroyed

    def destroy(self) -> None:
        self._check_alive()
        self._destroyed = True

        self.value_changed.destroy()
        self.text_changed.destroy()
        self.is_valid_changed.destroy()

        self._host = None
        self._value = None
        self._text = ""
        _LOG.debug("%s destroyed", self.name)

    @property
    def host(self) -> Any:
        self._check_alive()
        return self._host

    @property
    def derive(self) -> Derivation:
        self._check_alive()
        return self._derive

    @property
    def value(self) -> Number | None | _Undetermined:
        self._check_alive()
        return self._value

    @value.setter
    def value(self, value: Number | None) -> None:
        self.update(ValueEdit(value))

    @property
    def text(self) -> str:
        self._check_alive()
        return self._text

    @text.setter
    def text(self, text: str) -> None:
        self.update(TextEdit(text))

    @property
    def is_valid(self) -> bool:
        self._check_alive()
        return self._is_valid

    @property
    def result_text(self) -> str:
        self._check_alive()
        if not self._is_valid:
            return "?"
        if self._value is None:
            return ""
        return canonical_text(self._value)

    def notify_focus_changed(self, focused: bool) -> None:
        # presentation only; the triple is unaffected
        self._check_alive()
        _LOG.debug("%s focus=%s", self.name, focused)

    def update(self, edit: Edit) -> None:
        self._check_alive()
        if isinstance(edit, TextEdit):
            value, text, is_valid = self._state_for_text(edit.text)
        elif isinstance(edit, ValueEdit):
            value, text, is_valid = self._state_for_value(edit.value)
        else:
            raise TypeError(f"Unsupported edit: {edit!r}")

        old_value, old_text, old_is_valid = self._value, self._text, self._is_valid
        self._value, self._text, self._is_valid = value, text, is_valid

        # fixed order: value -> text -> is_valid
        if _field_changed(old_value, value):
            self._emit(self.value_changed, value)
        if _field_changed(old_text, text):
            self._emit(self.text_changed, text)
        if _field_changed(old_is_valid, is_valid):
            self._emit(self.is_valid_changed, is_valid)

    def _emit(self, observer: EventObserver, payload: Any) -> None:
        # a subscriber may have destroyed the control mid-dispatch
        if not self._destroyed:
            observer.trigger(payload)

    def _state_for_text(self, text: Any) -> tuple[Number | None | _Undetermined, str, bool]:
        if not isinstance(text, str):
            raise TypeError("Property 'text' should be a string")
        if text == "":
            return None, text, True
        try:
            return self._derive(text), text, True
        except ValueError as exc:
            _LOG.debug("%s: %r did not derive a value: %s", self.name, text, exc)
            return UNDETERMINED, text, False

    def _state_for_value(self, value: Any) -> tuple[Number | None | _Undetermined, str, bool]:
        if value is None:
            return None, "", True
        if not _is_number(value):
            raise TypeError("Property 'value' should be a number")
        # ints are exact and always finite, even past float range
        if isinstance(value, float) and not math.isfinite(value):
            _LOG.debug("%s: non-finite value %r kept as invalid text", self.name, value)
            return UNDETERMINED, canonical_text(value), False
        return value, canonical_text(value), True

    def __repr__(self) -> str:
        if self._destroyed:
            return f"<{self.name} destroyed>"
        return (
            f"<{self.name} value={self._value!r} text={self._text!r} "
            f"is_valid={self._is_valid}>"
        )


def numeric_input(host: Any, *, name: str | None = None) -> InputControl:
    return InputControl(host, parse_number, name=name or "NumericInput")


def calc_input(host: Any, *, name: str | None = None) -> InputControl:
    return InputControl(host, evaluate_formula, name=name or "CalcInput")

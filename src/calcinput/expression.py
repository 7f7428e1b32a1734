from __future__ import annotations

import math
import re
from dataclasses import dataclass

PRIORITIES: dict[str, int] = {
    "+": 1,
    "-": 1,
    "*": 2,
    "/": 2,
}

NO_PRIORITY = 100

_LITERAL_RE = re.compile(r"^-?[0-9]*\.?[0-9]+(?:[eE][-+]?[0-9]+)?$")
_UNARY_MINUS_RE = re.compile(r"^-(.+)$", re.DOTALL)
_PARENTHESIS_RE = re.compile(r"^\((.*)\)$", re.DOTALL)


class ExpressionError(ValueError):
    pass


class MissingOperandError(ExpressionError):
    def __init__(self) -> None:
        super().__init__("Missing operand")


class UnbalancedBracketError(ExpressionError):
    pass


class UnsupportedOperatorError(ExpressionError):
    def __init__(self, operator: str) -> None:
        super().__init__(f"Unsupported operator {operator!r}")
        self.operator = operator


class FormulaSyntaxError(ExpressionError):
    def __init__(self, formula: str) -> None:
        super().__init__(f"Formula syntax error: {formula!r}")
        self.formula = formula


class NestingTooDeepError(ExpressionError):
    def __init__(self) -> None:
        super().__init__("Formula nesting too deep")


@dataclass(frozen=True)
class OperatorMatch:
    operator: str = ""
    pos: int | None = None
    priority: int = NO_PRIORITY

    def __bool__(self) -> bool:
        return bool(self.operator)


def _is_exponent_sign(formula: str, index: int) -> bool:
    if formula[index] not in {"+", "-"} or index < 2:
        return False
    return formula[index - 1] in {"e", "E"} and (
        formula[index - 2].isdigit() or formula[index - 2] == "."
    )


def find_operators(formula: str) -> list[OperatorMatch]:
    """Locate every top-level operator of the lowest priority, left to right.

    Operators inside brackets are skipped. Minus signs before the first
    operand (``-3-2``, ``--5``, ``-(1+2)``) are signs rather than binary
    operators, and so is the sign of an exponent such as ``1e-7``. Any other
    ``-`` is binary, so ``2*-3`` splits at the ``-`` and leaves ``2*``
    without its right operand.

    Raises UnbalancedBracketError if the brackets do not pair up.
    """
    found: list[OperatorMatch] = []
    lowest = NO_PRIORITY
    depth = 0
    leading = True

    for i, char in enumerate(formula):
        if char == "(":
            depth += 1
        elif char == ")":
            if depth == 0:
                raise UnbalancedBracketError("Extra closing bracket")
            depth -= 1
        elif char == "-" and leading:
            continue
        elif depth == 0 and char in PRIORITIES and not _is_exponent_sign(formula, i):
            priority = PRIORITIES[char]
            if priority < lowest:
                lowest = priority
                found = []
            if priority == lowest:
                found.append(OperatorMatch(operator=char, pos=i, priority=priority))
        if not char.isspace():
            leading = False

    if depth != 0:
        raise UnbalancedBracketError("Extra opening bracket")
    return found


def find_operator(formula: str) -> OperatorMatch:
    """Locate the top-level operator a formula should be split at.

    The lowest priority wins, and on equal priority the right-most one does,
    so splitting there evaluates equal-priority chains left to right:
    ``8-3-2`` splits at the second ``-``.
    """
    found = find_operators(formula)
    return found[-1] if found else OperatorMatch()


def _divide(numerator: float, denominator: float) -> float:
    if denominator != 0:
        return numerator / denominator
    if numerator == 0 or math.isnan(numerator):
        return math.nan
    return math.copysign(math.inf, numerator) * math.copysign(1.0, denominator)


def apply_operator(operator: str, operand1: float, operand2: float) -> float:
    if operator == "+":
        return operand1 + operand2
    if operator == "-":
        return operand1 - operand2
    if operator == "*":
        return operand1 * operand2
    if operator == "/":
        # IEEE semantics: x/0 is +-inf and 0/0 is nan, never ZeroDivisionError
        return _divide(operand1, operand2)
    raise UnsupportedOperatorError(operator)


def _evaluate(formula: str) -> float:
    formula = formula.strip()
    if formula == "":
        raise MissingOperandError()

    if _LITERAL_RE.match(formula):
        return float(formula)

    ops = find_operators(formula)
    if ops:
        # fold the chain left to right: ((a op b) op c) ...
        result = _evaluate(formula[: ops[0].pos])
        for op, following in zip(ops, [*ops[1:], None]):
            start = op.pos + len(op.operator)
            stop = following.pos if following is not None else len(formula)
            result = apply_operator(op.operator, result, _evaluate(formula[start:stop]))
        return result

    m = _UNARY_MINUS_RE.match(formula)
    if m:
        return -_evaluate(m.group(1))

    m = _PARENTHESIS_RE.match(formula)
    if m:
        return _evaluate(m.group(1))

    raise FormulaSyntaxError(formula)


def evaluate(formula: str) -> float:
    """Evaluate an arithmetic formula over ``+ - * /`` and brackets.

    Raises an ExpressionError subclass for malformed input. The result may
    be non-finite (``1/0``); callers decide whether that is acceptable.
    """
    try:
        return _evaluate(formula)
    except RecursionError as exc:
        raise NestingTooDeepError() from exc

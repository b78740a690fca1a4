"""Arranging arithmetic problems vertically, side by side."""

from __future__ import annotations

import re
from collections.abc import Sequence
from itertools import chain

MAX_PROBLEMS = 5
MAX_DIGITS = 4
_GAP = " " * 4
_DIGITS = re.compile(r"[0-9]+")


class ArrangerError(ValueError):
    """The problems cannot be arranged; the message says why."""


def _split(problem: str) -> tuple[str, str, str]:
    parts = problem.split()
    if len(parts) < 3:
        raise ArrangerError(f"Error: Malformed problem {problem!r}.")
    left, operator, right = parts[:3]
    return left, operator, right


def arithmetic_arranger(problems: Sequence[str], show_solutions: bool = False) -> str:
    """Return the problems laid out in columns, with answers if requested.

    Raises ArrangerError for more than five problems, operators other than
    ``+`` and ``-``, or operands that are not numbers of at most four digits.
    """
    if len(problems) > MAX_PROBLEMS:
        raise ArrangerError("Error: Too many problems.")

    parsed = [_split(problem) for problem in problems]
    if any(operator not in ("+", "-") for _, operator, _ in parsed):
        raise ArrangerError("Error: Operator must be '+' or '-'.")

    for number in chain.from_iterable((left, right) for left, _, right in parsed):
        if not _DIGITS.fullmatch(number):
            raise ArrangerError("Error: Numbers must only contain digits.")
        if len(number) > MAX_DIGITS:
            raise ArrangerError("Error: Numbers cannot be more than four digits.")

    tops: list[str] = []
    bottoms: list[str] = []
    dashes: list[str] = []
    answers: list[str] = []
    for left, operator, right in parsed:
        width = max(len(left), len(right)) + 2
        tops.append(left.rjust(width))
        bottoms.append(operator + right.rjust(width - 1))
        dashes.append("-" * width)
        value = int(left) + int(right) if operator == "+" else int(left) - int(right)
        answers.append(str(value).rjust(width))

    rows = [tops, bottoms, dashes]
    if show_solutions:
        rows.append(answers)
    return "\n".join(_GAP.join(row) for row in rows)
"""Number and cell formatting for trace lines."""

from __future__ import annotations

import math


def fmt_number(value: float) -> str:
    """Render a weight or distance the way a person would write it.

    >>> fmt_number(4.0), fmt_number(2.5), fmt_number(math.inf)
    ('4', '2.5', '∞')
    """
    if math.isinf(value):
        return "∞" if value > 0 else "-∞"
    if float(value).is_integer():
        return str(int(value))
    return f"{value:g}"


def fmt_cell(cell: tuple[int, int]) -> str:
    return f"({cell[0]}, {cell[1]})"

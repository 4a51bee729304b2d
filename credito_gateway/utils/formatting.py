"""Text and number helpers shared by the rule engines and extractors"""

import math
import re

_NON_DIGITS = re.compile(r"\D")
_WHITESPACE = re.compile(r"\s+")


def only_digits(value: str | None) -> str:
    """Strip every non-digit character (CPF/CNPJ punctuation, spaces)"""
    if not value:
        return ""
    return _NON_DIGITS.sub("", value)


def strip_whitespace(value: str | None) -> str | None:
    """Remove all whitespace from a note key; None when nothing is left"""
    if value is None:
        return None
    cleaned = _WHITESPACE.sub("", value)
    return cleaned or None


def round_half_up(value: float) -> int:
    """
    Round to the nearest integer with halves going up.

    Python's round() uses banker's rounding (round(2.5) == 2); currency
    amounts here follow the commercial rule (2.5 -> 3, -2.5 -> -2).
    """
    return math.floor(value + 0.5)


def format_number(value: float) -> str:
    """Render 50.0 as "50" and 50.5 as "50.5" for reason texts"""
    if float(value).is_integer():
        return str(int(value))
    return str(value)


def format_brl(value: float) -> str:
    """
    Format an amount as Brazilian reais.

    Example:
        1000000 -> "R$ 1.000.000,00"
    """
    sign = "-" if value < 0 else ""
    formatted = f"{abs(value):,.2f}"
    # swap US separators for pt-BR ones
    formatted = formatted.replace(",", "_").replace(".", ",").replace("_", ".")
    return f"{sign}R$ {formatted}"

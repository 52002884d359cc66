"""Shared text and value helpers used by the parsers."""

import math
import re
import unicodedata
from typing import Optional, Union

ParamValue = Union[bool, int, float, str]

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


def normalize_text(value: str) -> str:
    """Strip diacritics and lowercase.

    Examples:
        >>> normalize_text("São Paulo")
        'sao paulo'
        >>> normalize_text("Título")
        'titulo'
    """
    decomposed = unicodedata.normalize("NFD", value)
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return stripped.lower()


def coerce_value(raw: str) -> ParamValue:
    """Coerce a shorthand parameter value.

    ``true``/``false`` become booleans, numeric strings become numbers and
    everything else is returned untouched.

    Examples:
        >>> coerce_value("10")
        10
        >>> coerce_value("2.5")
        2.5
        >>> coerce_value("false")
        False
        >>> coerce_value("João")
        'João'
        >>> coerce_value("1_000")
        '1_000'
    """
    if raw == "true":
        return True
    if raw == "false":
        return False
    # int() and float() also take digit separators and non-ASCII digits
    if not raw.strip() or "_" in raw or not raw.isascii():
        return raw
    try:
        return int(raw)
    except ValueError:
        pass
    try:
        number = float(raw)
    except ValueError:
        return raw
    if math.isnan(number) or math.isinf(number):
        return raw
    return number


def parse_positive_int(raw: str) -> Optional[int]:
    """Parse the leading integer of ``raw``; None unless it is > 0."""
    match = _LEADING_INT.match(raw)
    if not match:
        return None
    value = int(match.group(1))
    return value if value > 0 else None


def strip_quotes(value: str) -> str:
    """Remove one pair of matching surrounding quotes."""
    if len(value) >= 2 and value[0] == value[-1] and value[0] in ("'", '"'):
        return value[1:-1]
    return value

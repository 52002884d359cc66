"""Comparison operator phrases for the natural-language query scan.

Phrases are stored as token tuples in the form they take after
normalization and stop-word removal, so "maior ou igual a" is matched as
``("maior", "igual")``.
"""

from typing import Optional, Sequence

OPERATOR_PHRASES: dict[tuple[str, ...], str] = {
    ("igual",): "eq",
    ("=",): "eq",
    ("==",): "eq",
    ("diferente",): "ne",
    ("!=",): "ne",
    ("<>",): "ne",
    ("maior",): "gt",
    (">",): "gt",
    ("apos",): "gt",
    ("menor",): "lt",
    ("<",): "lt",
    ("antes",): "lt",
    ("maior", "igual"): "ge",
    (">=",): "ge",
    ("menor", "igual"): "le",
    ("<=",): "le",
    ("contem",): "contains",
    ("contendo",): "contains",
    ("inicia",): "startswith",
    ("comeca",): "startswith",
    ("termina",): "endswith",
}

_LONGEST_PHRASE = max(len(p) for p in OPERATOR_PHRASES)


def match_operator(
    tokens: Sequence[str], start: int, end: Optional[int] = None,
) -> Optional[tuple[str, int]]:
    """Match the longest operator phrase beginning at ``tokens[start]``.

    The phrase must finish before ``end`` (default: the end of ``tokens``),
    so a caller can reserve trailing tokens for the value.

    Returns ``(operator_tag, phrase_length)`` or None.
    """
    stop = len(tokens) if end is None else end
    for length in range(_LONGEST_PHRASE, 0, -1):
        phrase = tuple(tokens[start:min(start + length, stop)])
        if len(phrase) == length and phrase in OPERATOR_PHRASES:
            return OPERATOR_PHRASES[phrase], length
    return None

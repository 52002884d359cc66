"""
Pluggable phrase matching for the query assistant's free-text steps.

A PhraseMatcher is an ordered list of (pattern, handler) rules; the first
pattern that matches wins and its handler turns the match into a value.
Swapping the rule list changes the accepted grammar or language without
touching the assistant.
"""

import logging
import re
from dataclasses import dataclass
from typing import Callable, Generic, Optional, Sequence, TypeVar

from dynamics_assistant.schemas.query_schema import FilterEntry
from dynamics_assistant.utils import strip_quotes

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class PhraseRule(Generic[T]):
    pattern: re.Pattern
    handler: Callable[[re.Match], T]
    name: str = ""


class PhraseMatcher(Generic[T]):
    """Ordered rule bank; first match wins."""

    def __init__(self, rules: Sequence[PhraseRule[T]]) -> None:
        self._rules = list(rules)

    @property
    def rules(self) -> list[PhraseRule[T]]:
        return list(self._rules)

    def match(self, text: str) -> Optional[T]:
        candidate = text.strip()
        for rule in self._rules:
            found = rule.pattern.match(candidate)
            if found:
                logger.debug("Phrase %r matched rule %s", candidate, rule.name or rule.pattern.pattern)
                return rule.handler(found)
        return None


# ---------------------------------------------------------------------- #
# Filters: "campo operador valor"
# ---------------------------------------------------------------------- #

FilterMatch = tuple[str, FilterEntry]


def _filter_rule(pattern: str, operator: str) -> PhraseRule[FilterMatch]:
    def handler(found: re.Match) -> FilterMatch:
        value = strip_quotes(found.group(2).strip())
        return found.group(1), FilterEntry(operator=operator, value=value)

    return PhraseRule(
        pattern=re.compile(r"^(\w+)" + pattern + r"(.+)$", re.IGNORECASE),
        handler=handler,
        name=operator,
    )


# Multi-character symbols and "ou igual" phrases come before their prefixes
FILTER_RULES: list[PhraseRule[FilterMatch]] = [
    _filter_rule(r"\s+cont[eé]m\s+", "contains"),
    _filter_rule(r"\s+come[çc]a\s+com\s+", "startswith"),
    _filter_rule(r"\s+inicia\s+com\s+", "startswith"),
    _filter_rule(r"\s+termina\s+com\s+", "endswith"),
    _filter_rule(r"\s+igual\s+a\s+", "eq"),
    _filter_rule(r"\s+diferente\s+de\s+", "ne"),
    _filter_rule(r"\s+maior\s+ou\s+igual\s+a\s+", "ge"),
    _filter_rule(r"\s+menor\s+ou\s+igual\s+a\s+", "le"),
    _filter_rule(r"\s+maior\s+que\s+", "gt"),
    _filter_rule(r"\s+menor\s+que\s+", "lt"),
    _filter_rule(r"\s+ap[óo]s\s+", "gt"),
    _filter_rule(r"\s+antes\s+de\s+", "lt"),
    _filter_rule(r"\s*>=\s*", "ge"),
    _filter_rule(r"\s*<=\s*", "le"),
    _filter_rule(r"\s*!=\s*", "ne"),
    _filter_rule(r"\s*<>\s*", "ne"),
    _filter_rule(r"\s*=\s*", "eq"),
    _filter_rule(r"\s*>\s*", "gt"),
    _filter_rule(r"\s*<\s*", "lt"),
]


# ---------------------------------------------------------------------- #
# Ordering: "campo [asc|desc]"
# ---------------------------------------------------------------------- #

OrderMatch = tuple[str, str]

ORDER_RULES: list[PhraseRule[OrderMatch]] = [
    PhraseRule(
        pattern=re.compile(r"^(\w+)\s+(asc|ascendente|crescente)$", re.IGNORECASE),
        handler=lambda found: (found.group(1), "asc"),
        name="asc",
    ),
    PhraseRule(
        pattern=re.compile(r"^(\w+)\s+(desc|descendente|decrescente)$", re.IGNORECASE),
        handler=lambda found: (found.group(1), "desc"),
        name="desc",
    ),
    PhraseRule(
        pattern=re.compile(r"^(\w+)$"),
        handler=lambda found: (found.group(1), "asc"),
        name="field-only",
    ),
]


def default_filter_matcher() -> PhraseMatcher[FilterMatch]:
    return PhraseMatcher(FILTER_RULES)


def default_order_matcher() -> PhraseMatcher[OrderMatch]:
    return PhraseMatcher(ORDER_RULES)

"""
Portuguese natural-language query parsing.

The parser makes a single greedy left-to-right pass over the tokens left
after stop-word removal:

1. the first action word sets the action
2. the first entity word sets the entity
3. a limit word followed by a positive integer sets the limit
4. ``[field] [operator phrase] [value]`` emits a filter entry

Tokens that match no rule are dropped without complaint. Only a missing
entity is reported back to the caller. A ``campos a, b`` clause anywhere
in the text overrides the selected fields.
"""

import logging
import re
from typing import Optional

from dynamics_assistant.errors import AssistantError
from dynamics_assistant.lexicon.actions import NL_ACTIONS
from dynamics_assistant.lexicon.entities import resolve_collection
from dynamics_assistant.lexicon.fields import translate_field, translate_fields
from dynamics_assistant.lexicon.operators import match_operator
from dynamics_assistant.lexicon.stopwords import STOP_WORDS
from dynamics_assistant.query.executor import QueryExecutor
from dynamics_assistant.query.filter_builder import build_filter
from dynamics_assistant.schemas.query_schema import (
    FilterEntry,
    ParsedQuery,
    QueryOptions,
    TokenTrace,
)
from dynamics_assistant.schemas.result_schema import CommandResult
from dynamics_assistant.utils import normalize_text, parse_positive_int, strip_quotes

logger = logging.getLogger(__name__)

LIMIT_WORDS: frozenset[str] = frozenset({"top", "limite", "limitar", "limitado", "maximo", "max"})

_FIELDS_CLAUSE = re.compile(r"campos\s+([^.]+)", re.IGNORECASE)

NO_ENTITY_MESSAGE = (
    "Não foi possível identificar a entidade na consulta. "
    "Por favor, especifique a entidade (ex: contas, contatos, casos)."
)

_UNSUPPORTED_MESSAGES: dict[str, str] = {
    "create": "A criação de registros via consulta em linguagem natural ainda não é suportada. "
              "Use a ferramenta específica para criar registros.",
    "update": "A atualização de registros via consulta em linguagem natural ainda não é suportada. "
              "Use a ferramenta específica para atualizar registros.",
    "delete": "A exclusão de registros via consulta em linguagem natural ainda não é suportada. "
              "Use a ferramenta específica para excluir registros.",
}


class NaturalLanguageParser:
    """Turns a Portuguese sentence into a ParsedQuery."""

    def parse(self, text: str, diagnostics: bool = False) -> ParsedQuery:
        normalized = normalize_text(text)
        # Keep the original spelling next to each normalized token for filter values
        tokens: list[tuple[str, str]] = [
            (normalize_text(raw), raw)
            for raw in text.split()
            if normalize_text(raw) not in STOP_WORDS
        ]
        words = [norm for norm, _ in tokens]

        result = ParsedQuery()
        trace: Optional[list[TokenTrace]] = [] if diagnostics else None

        def record(rule: str, start: int, end: int) -> None:
            if trace is not None:
                trace.append(TokenTrace(rule=rule, tokens=words[start:end]))

        i = 0
        while i < len(words):
            word = words[i]

            if result.action is None and word in NL_ACTIONS:
                result.action = NL_ACTIONS[word]
                record("action", i, i + 1)
                i += 1
                continue

            if result.entity is None:
                collection = resolve_collection(word)
                if collection is not None:
                    result.entity = collection
                    record("entity", i, i + 1)
                    i += 1
                    continue

            if word in LIMIT_WORDS and i + 1 < len(words):
                limit = parse_positive_int(words[i + 1])
                if limit is not None:
                    result.limit = limit
                    record("limit", i, i + 2)
                    i += 2
                    continue

            # The last token is kept back as the value, so "maior igual" at the end is gt
            matched = match_operator(words, i + 1, len(words) - 1)
            if matched is not None:
                operator, length = matched
                value_index = i + 1 + length
                result.filters[word] = FilterEntry(
                    operator=operator, value=strip_quotes(tokens[value_index][1]),
                )
                record("filter", i, value_index + 1)
                i = value_index + 1
                continue

            record("skip", i, i + 1)
            i += 1

        if result.action is None:
            result.action = "list"

        fields_match = _FIELDS_CLAUSE.search(normalized)
        if fields_match:
            result.fields = [f.strip() for f in re.split(r"\s*,\s*", fields_match.group(1)) if f.strip()]
            if trace is not None:
                trace.append(TokenTrace(rule="fields", tokens=list(result.fields)))

        result.diagnostics = trace
        return result


class NLQueryService:
    """Runs natural-language queries; failures come back as CommandResult."""

    def __init__(self, executor: QueryExecutor, parser: Optional[NaturalLanguageParser] = None) -> None:
        self._executor = executor
        self._parser = parser or NaturalLanguageParser()

    def process(self, query: str) -> CommandResult:
        logger.debug("Processing natural-language query: %r", query)
        parsed = self._parser.parse(query)
        if parsed.entity is None:
            return CommandResult(success=False, message=NO_ENTITY_MESSAGE, query=query)

        logger.debug(
            "Interpreted query: entity=%s action=%s filters=%s fields=%s limit=%s",
            parsed.entity, parsed.action, parsed.filters, parsed.fields, parsed.limit,
        )

        if parsed.action in _UNSUPPORTED_MESSAGES:
            return CommandResult(
                success=False, entity=parsed.entity, action=parsed.action,
                message=_UNSUPPORTED_MESSAGES[parsed.action], query=query,
            )

        try:
            if parsed.action == "get":
                return self._get(parsed)
            if parsed.action == "count":
                return self._count(parsed)
            return self._list(parsed)
        except AssistantError as exc:
            logger.error("Natural-language query %r failed: %s", query, exc)
            return CommandResult(
                success=False, entity=parsed.entity, action=parsed.action,
                message=f"Erro ao processar consulta: {exc}", query=query,
            )

    def _odata_filter(self, parsed: ParsedQuery) -> str:
        entity = parsed.entity or ""
        translated = {
            translate_field(entity, field): entry for field, entry in parsed.filters.items()
        }
        return build_filter(entity, translated)

    def _list(self, parsed: ParsedQuery) -> CommandResult:
        entity = parsed.entity or ""
        odata_filter = self._odata_filter(parsed)
        select = translate_fields(entity, parsed.fields) if parsed.fields else None
        top = parsed.limit or self._executor.config.default_top
        order_by = self._executor.config.default_order_by

        results = self._executor.list_records(
            entity,
            QueryOptions(filter=odata_filter, select=select, order_by=order_by, top=top),
        )
        return CommandResult(
            success=True, entity=entity, action="list", count=len(results), results=results,
            filter=odata_filter, select=select, top=top, order_by=order_by,
        )

    def _get(self, parsed: ParsedQuery) -> CommandResult:
        entity = parsed.entity or ""
        if not parsed.filters:
            return CommandResult(
                success=False, entity=entity, action="get",
                message="Para obter detalhes de um registro, é necessário especificar "
                        "um ID ou um filtro único.",
            )
        odata_filter = self._odata_filter(parsed)
        record = self._executor.get_record(entity, odata_filter)
        if record is None:
            return CommandResult(
                success=False, entity=entity, action="get", filter=odata_filter,
                message="Nenhum registro encontrado com os filtros especificados.",
            )
        return CommandResult(
            success=True, entity=entity, action="get", result=record, filter=odata_filter,
        )

    def _count(self, parsed: ParsedQuery) -> CommandResult:
        entity = parsed.entity or ""
        odata_filter = self._odata_filter(parsed)
        count = self._executor.count_records(entity, odata_filter)
        return CommandResult(
            success=True, entity=entity, action="count", count=count, filter=odata_filter,
        )

"""
Shorthand command grammar: ``entity:action [id] key=value ...``.

Examples:
    contact:list lastname=Smi* top=10
    account:get acc-001
    contact:update cont-001 firstname=João
    account:count name=*Contoso*
    incident:fields

The entity word is mapped to its Web API collection name. The first
token without ``=`` is the record id; ``key=value`` tokens become typed
parameters (booleans, numbers, strings).
"""

import logging
from typing import Any, Optional

from dynamics_assistant.errors import AssistantError
from dynamics_assistant.lexicon.actions import SHORTHAND_ACTION_NAMES, resolve_shorthand_action
from dynamics_assistant.lexicon.entities import id_field_for, normalize_collection
from dynamics_assistant.metadata.cache import EntityDetailsOptions, MetadataCache
from dynamics_assistant.metadata.mapping import field_descriptors
from dynamics_assistant.query.executor import QueryExecutor
from dynamics_assistant.query.filter_builder import build_param_filter
from dynamics_assistant.schemas.query_schema import ParsedCommand, QueryOptions
from dynamics_assistant.schemas.result_schema import CommandResult
from dynamics_assistant.utils import ParamValue, coerce_value

logger = logging.getLogger(__name__)

LIST_RESERVED_KEYS: frozenset[str] = frozenset(
    {"top", "limit", "orderBy", "order", "select", "fields", "expand"}
)

FORMAT_HELP = (
    "Formato de comando inválido. Use 'entidade:ação [parâmetros]', "
    "ex: 'contact:list', 'account:get 123'"
)


def parse_command(command: str) -> ParsedCommand:
    """Parse a shorthand command.

    A missing ``entity:action`` pair yields ``entity=None, action=None``.

    Examples:
        >>> parse_command("account:get 123").model_dump()
        {'entity': 'accounts', 'action': 'get', 'params': {'id': '123'}}
    """
    if not command or not command.strip():
        return ParsedCommand()

    parts = command.strip().split()
    entity_action = parts[0].split(":")
    if len(entity_action) != 2:
        return ParsedCommand()

    entity_word, action = entity_action
    params: dict[str, ParamValue] = {}
    for token in parts[1:]:
        if "=" not in token:
            params.setdefault("id", token)
            continue
        key, _, raw = token.partition("=")
        if key:
            params[key] = coerce_value(raw)

    return ParsedCommand(
        entity=normalize_collection(entity_word),
        action=action,
        params=params,
    )


def _split_list(value: Optional[ParamValue]) -> Optional[list[str]]:
    if value is None or isinstance(value, bool):
        return None
    items = [item.strip() for item in str(value).split(",") if item.strip()]
    return items or None


class ShorthandCommandService:
    """Executes parsed shorthand commands; never raises to the caller."""

    def __init__(self, executor: QueryExecutor, metadata: MetadataCache) -> None:
        self._executor = executor
        self._metadata = metadata

    def process(self, command: str) -> CommandResult:
        logger.debug("Processing shorthand command: %r", command)
        parsed = parse_command(command)
        if not parsed.entity or not parsed.action:
            return CommandResult(success=False, message=FORMAT_HELP, command=command)

        action = resolve_shorthand_action(parsed.action)
        if action is None:
            return CommandResult(
                success=False,
                message=(
                    f"Ação '{parsed.action}' não reconhecida. "
                    f"Ações disponíveis: {', '.join(SHORTHAND_ACTION_NAMES)}"
                ),
                command=command,
            )

        handler = getattr(self, f"_{action}")
        try:
            return handler(parsed.entity, parsed.params)
        except AssistantError as exc:
            logger.error("Shorthand command %r failed: %s", command, exc)
            return CommandResult(
                success=False,
                entity=parsed.entity,
                action=action,
                message=f"Erro ao processar comando: {exc}",
                command=command,
            )

    def _list(self, entity: str, params: dict[str, ParamValue]) -> CommandResult:
        top = params.get("top") or params.get("limit") or self._executor.config.default_top
        if not isinstance(top, int) or isinstance(top, bool) or top <= 0:
            return CommandResult(
                success=False, entity=entity, action="list",
                message=f"Valor inválido para top/limit: {top!r}. Use um inteiro positivo.",
            )
        order_by = str(
            params.get("orderBy") or params.get("order") or self._executor.config.default_order_by
        )
        odata_filter = build_param_filter(entity, params, LIST_RESERVED_KEYS)
        select = _split_list(params.get("select") or params.get("fields"))
        expand = _split_list(params.get("expand"))

        results = self._executor.list_records(
            entity,
            QueryOptions(
                filter=odata_filter, select=select, order_by=order_by, top=top, expand=expand,
            ),
        )
        return CommandResult(
            success=True, entity=entity, action="list", count=len(results),
            results=results, filter=odata_filter, select=select, expand=expand,
            top=top, order_by=order_by,
        )

    def _get(self, entity: str, params: dict[str, ParamValue]) -> CommandResult:
        record_id = params.get("id")
        if record_id is None:
            return CommandResult(
                success=False, entity=entity, action="get",
                message="Para obter detalhes de um registro, é necessário especificar um ID.",
            )
        odata_filter = f"{id_field_for(entity)} eq {record_id}"
        select = _split_list(params.get("select") or params.get("fields"))
        expand = _split_list(params.get("expand"))

        record = self._executor.get_record(entity, odata_filter, select=select, expand=expand)
        if record is None:
            return CommandResult(
                success=False, entity=entity, action="get", filter=odata_filter,
                message=f"Nenhum registro encontrado com ID {record_id}.",
            )
        return CommandResult(
            success=True, entity=entity, action="get", result=record,
            filter=odata_filter, select=select, expand=expand, id=str(record_id),
        )

    def _create(self, entity: str, params: dict[str, ParamValue]) -> CommandResult:
        data: dict[str, Any] = {k: v for k, v in params.items() if k != "id"}
        if not data:
            return CommandResult(
                success=False, entity=entity, action="create",
                message="Para criar um registro, é necessário especificar pelo menos um campo.",
            )
        created = self._executor.create_record(entity, data)
        return CommandResult(
            success=True, entity=entity, action="create", result=created, data=data,
            message="Registro criado com sucesso.",
        )

    def _update(self, entity: str, params: dict[str, ParamValue]) -> CommandResult:
        record_id = params.get("id")
        if record_id is None:
            return CommandResult(
                success=False, entity=entity, action="update",
                message="Para atualizar um registro, é necessário especificar um ID.",
            )
        data: dict[str, Any] = {k: v for k, v in params.items() if k != "id"}
        if not data:
            return CommandResult(
                success=False, entity=entity, action="update", id=str(record_id),
                message="Para atualizar um registro, é necessário especificar pelo menos um campo.",
            )
        self._executor.update_record(entity, str(record_id), data)
        return CommandResult(
            success=True, entity=entity, action="update", id=str(record_id), data=data,
            message=f"Registro com ID {record_id} atualizado com sucesso.",
        )

    def _delete(self, entity: str, params: dict[str, ParamValue]) -> CommandResult:
        record_id = params.get("id")
        if record_id is None:
            return CommandResult(
                success=False, entity=entity, action="delete",
                message="Para excluir um registro, é necessário especificar um ID.",
            )
        self._executor.delete_record(entity, str(record_id))
        return CommandResult(
            success=True, entity=entity, action="delete", id=str(record_id),
            message=f"Registro com ID {record_id} excluído com sucesso.",
        )

    def _count(self, entity: str, params: dict[str, ParamValue]) -> CommandResult:
        odata_filter = build_param_filter(entity, params, LIST_RESERVED_KEYS)
        count = self._executor.count_records(entity, odata_filter)
        return CommandResult(
            success=True, entity=entity, action="count", count=count, filter=odata_filter,
        )

    def _fields(self, entity: str, params: dict[str, ParamValue]) -> CommandResult:
        details = self._metadata.get_entity_details(
            entity,
            EntityDetailsOptions(
                include_attributes=True, include_option_sets=True, include_attribute_types=True,
            ),
        )
        return CommandResult(
            success=True,
            entity=entity,
            action="fields",
            entity_display_name=details.display_name,
            primary_key=details.primary_id_field,
            primary_name=details.primary_name_field,
            fields=field_descriptors(details),
        )

    def describe_entity(self, entity_word: str) -> CommandResult:
        """Backs the ``get metadata <entity>`` form of the shorthand tool."""
        try:
            return self._fields(entity_word, {})
        except AssistantError as exc:
            logger.error("Metadata lookup for %s failed: %s", entity_word, exc)
            return CommandResult(
                success=False, entity=entity_word, action="fields",
                message=f"Erro ao consultar metadados da entidade {entity_word}: {exc}",
            )

"""
Routes MCP tool calls to the query services.

Every call returns a list of TextContent. Service failures come back as
error text; only programming errors propagate.
"""

import logging
from typing import Any, Optional

from mcp.types import TextContent, Tool

from dynamics_assistant.errors import AssistantError
from dynamics_assistant.metadata.cache import AttributeDetailsOptions, EntityDetailsOptions
from dynamics_assistant.services import Services
from dynamics_assistant.tools import definitions
from dynamics_assistant.tools.formatting import (
    format_assistant_result,
    format_command_result,
    format_metadata_command,
    format_query_result,
    to_json,
)

logger = logging.getLogger(__name__)

_METADATA_PREFIX = "get metadata"


def _text(*parts: str) -> list[TextContent]:
    return [TextContent(type="text", text=part) for part in parts]


class ToolDispatcher:
    """Maps tool names onto Services operations."""

    def __init__(self, services: Services) -> None:
        self._services = services

    def list_tools(self) -> list[Tool]:
        return list(definitions.tool_list)

    def call_tool(self, name: str, arguments: Optional[dict[str, Any]] = None) -> list[TextContent]:
        args = arguments or {}
        logger.info("Calling tool: %s", name)
        logger.debug("Tool %s arguments: %s", name, args)

        match name:
            case definitions.D365_SHORTHAND:
                return self._shorthand(str(args.get("command", "")))
            case definitions.DYNAMICS_QUERY:
                result = self._services.nl_query.process(str(args.get("query", "")))
                return _text(format_query_result(result))
            case definitions.ASSISTANT_START:
                start = self._services.assistant.start()
                return _text(start.message, f"sessionId: {start.session_id}")
            case definitions.ASSISTANT_INPUT:
                return self._assistant_input(args)
            case definitions.ASSISTANT_END:
                ended = self._services.assistant.end_session(str(args.get("sessionId", "")))
                if ended:
                    return _text("Sessão de consulta encerrada com sucesso.")
                return _text("Sessão não encontrada ou já encerrada.")
            case definitions.METADATA_EXPLORER:
                return self._metadata_explorer(args)
            case _:
                logger.warning("Unknown tool name: %s", name)
                return _text(f"Erro: ferramenta '{name}' não suportada.")

    def _shorthand(self, command: str) -> list[TextContent]:
        if command.lower().startswith(_METADATA_PREFIX):
            parts = command.split()
            if len(parts) < 3:
                return _text(
                    "Comando incompleto. Use 'get metadata [entidade]', "
                    "por exemplo: 'get metadata contacts'"
                )
            result = self._services.shorthand.describe_entity(parts[2].lower())
            return _text(format_metadata_command(result))

        result = self._services.shorthand.process(command)
        return _text(format_command_result(result))

    def _assistant_input(self, args: dict[str, Any]) -> list[TextContent]:
        session_id = str(args.get("sessionId", ""))
        reply = self._services.assistant.process_input(session_id, str(args.get("input", "")))
        return _text(*format_assistant_result(reply))

    def _metadata_explorer(self, args: dict[str, Any]) -> list[TextContent]:
        action = args.get("action")
        entity = args.get("entityLogicalName")
        attribute = args.get("attributeLogicalName")
        search_text = args.get("searchText")
        refresh = bool(args.get("refresh", False))
        metadata = self._services.metadata

        logger.info("Metadata explorer action %s", action)
        try:
            match action:
                case "list-entities":
                    entities = metadata.list_entities(refresh=refresh)
                    return _text(
                        f"Encontradas {len(entities)} entidades no Dynamics 365.",
                        to_json(entities),
                    )
                case "entity-details":
                    if not entity:
                        return _entity_required()
                    details = metadata.get_entity_details(entity, EntityDetailsOptions(
                        include_attributes=args.get("includeAttributes", True),
                        include_option_sets=args.get("includeOptionSets", True),
                        include_attribute_types=args.get("includeAttributeTypes", True),
                        select_entity_properties=args.get("selectEntityProperties"),
                        select_attribute_properties=args.get("selectAttributeProperties"),
                        refresh=refresh,
                    ))
                    return _text(
                        f"Detalhes da entidade '{entity}' obtidos com sucesso.",
                        to_json(details),
                    )
                case "entity-attributes":
                    if not entity:
                        return _entity_required()
                    attributes = metadata.get_entity_attributes(entity, refresh=refresh)
                    return _text(
                        f"Encontrados {len(attributes)} atributos para a entidade '{entity}'.",
                        to_json(attributes),
                    )
                case "attribute-details":
                    if not entity or not attribute:
                        return _text(
                            "Nome lógico da entidade (entityLogicalName) e nome lógico do "
                            "atributo (attributeLogicalName) são obrigatórios para esta ação."
                        )
                    record = metadata.get_attribute_details(entity, attribute, AttributeDetailsOptions(
                        include_option_sets=args.get("includeOptionSets", True),
                        select_attribute_properties=args.get("selectAttributeProperties"),
                    ))
                    return _text(
                        f"Detalhes do atributo '{attribute}' da entidade '{entity}' obtidos com sucesso.",
                        to_json(record),
                    )
                case "entity-relationships":
                    if not entity:
                        return _entity_required()
                    relationships = metadata.get_entity_relationships(entity, refresh=refresh)
                    return _text(
                        f"Encontrados {len(relationships)} relacionamentos para a entidade '{entity}'.",
                        to_json(relationships),
                    )
                case "search-entities":
                    if not search_text:
                        return _text("Texto de pesquisa é obrigatório para esta ação.")
                    found = metadata.search_entities(search_text)
                    return _text(
                        f"Encontradas {len(found)} entidades correspondentes à pesquisa '{search_text}'.",
                        to_json(found),
                    )
                case "search-attributes":
                    if not entity or not search_text:
                        return _text("Nome da entidade e texto de pesquisa são obrigatórios para esta ação.")
                    found_attrs = metadata.search_attributes(entity, search_text)
                    return _text(
                        f"Encontrados {len(found_attrs)} atributos correspondentes à pesquisa "
                        f"'{search_text}' na entidade '{entity}'.",
                        to_json(found_attrs),
                    )
                case "data-model":
                    model = metadata.generate_data_model(args.get("entityNames"))
                    return _text(
                        f"Modelo de dados gerado com {len(model.entities)} entidades.",
                        to_json(model),
                    )
                case _:
                    return _text(f"Ação '{action}' não reconhecida.")
        except AssistantError as exc:
            logger.error("Metadata explorer action %s failed: %s", action, exc)
            return _text(f"Erro ao explorar metadados: {exc}")


def _entity_required() -> list[TextContent]:
    return _text("Nome lógico da entidade (entityLogicalName) é obrigatório para esta ação.")

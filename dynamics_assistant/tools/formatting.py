"""Plain-text rendering of service results for tool replies."""

import json
from typing import Any

from pydantic import BaseModel

from dynamics_assistant.schemas.metadata_schema import FieldDescriptor
from dynamics_assistant.schemas.result_schema import CommandResult
from dynamics_assistant.schemas.session_schema import AssistantReply

SHORTHAND_EXAMPLES = (
    "Exemplos de comandos válidos:\n"
    "- contact:list\n"
    "- account:get 123\n"
    "- incident:create title=Problema description=Falha\n"
    "- contact:update 789 firstname=João lastname=Silva\n"
    "- account:count name=*Microsoft*"
)

NL_TIPS = (
    "Dicas de consulta:\n"
    "- Especifique a entidade (contas, contatos, casos, etc.)\n"
    '- Use verbos como "mostrar", "listar", "buscar" para indicar a ação\n'
    '- Para filtros, use formato "campo operador valor" (ex: "nome contém João")'
)

LARGE_RESULT_NOTE_THRESHOLD = 10


def to_json(value: Any) -> str:
    if isinstance(value, BaseModel):
        value = value.model_dump(mode="json")
    elif isinstance(value, list):
        value = [v.model_dump(mode="json") if isinstance(v, BaseModel) else v for v in value]
    return json.dumps(value, indent=2, default=str, ensure_ascii=False)


def _field_line(field: FieldDescriptor) -> str:
    line = f"- {field.name} ({field.type.value}): {field.display_name}"
    if field.required:
        line += " [Obrigatório]"
    if field.description:
        line += f"\n  Descrição: {field.description}"
    if field.option_set and field.option_set.options:
        options = ", ".join(f"{o.value}={o.label}" for o in field.option_set.options)
        line += f"\n  Opções: {options}"
    return line


def format_command_result(result: CommandResult) -> str:
    """Render a shorthand command result."""
    if not result.success:
        return f"Erro ao processar comando: {result.message}\n\n{SHORTHAND_EXAMPLES}"

    if result.action == "list":
        return f"Encontrados {result.count} registros de {result.entity}:\n\n{to_json(result.results)}"
    if result.action == "count":
        text = f"Total de registros de {result.entity}: {result.count}"
        if result.filter:
            text += f"\nFiltro aplicado: {result.filter}"
        return text
    if result.action == "fields":
        header = f"Campos da entidade {result.entity} ({result.entity_display_name}):\n\n"
        return header + "\n".join(_field_line(f) for f in result.fields or [])
    if result.result is not None and result.action == "get":
        return f"Detalhes do registro de {result.entity}:\n\n{to_json(result.result)}"
    if result.message:
        return result.message
    return to_json(result.model_dump(exclude_none=True))


def format_metadata_command(result: CommandResult) -> str:
    """Render the ``get metadata <entity>`` reply."""
    if not result.success:
        return result.message or ""
    fields = [f.model_dump(mode="json", exclude_none=True) for f in result.fields or []]
    document = {
        "entityName": result.entity,
        "displayName": result.entity_display_name,
        "primaryIdAttribute": result.primary_key,
        "primaryNameAttribute": result.primary_name,
        "attributes": fields,
    }
    return f"Metadados da entidade {result.entity}:\n{to_json(document)}"


def format_query_result(result: CommandResult) -> str:
    """Render a natural-language query result."""
    if not result.success:
        return f"Não foi possível processar sua consulta: {result.message}\n\n{NL_TIPS}"

    if result.action == "list":
        text = f"Encontrados {result.count} registros de {result.entity}:\n\n{to_json(result.results)}"
        if (result.count or 0) > LARGE_RESULT_NOTE_THRESHOLD:
            text += (
                f"\n\nNota: A consulta retornou {result.count} registros. "
                'Para limitar os resultados, adicione "limite X" à sua consulta.'
            )
        return text
    if result.action == "count":
        text = f"Total de registros de {result.entity}: {result.count}"
        if result.filter:
            text += f"\nFiltro aplicado: {result.filter}"
        return text
    if result.result is not None:
        return f"Detalhes do registro de {result.entity}:\n\n{to_json(result.result)}"
    return to_json(result.model_dump(exclude_none=True))


def format_assistant_result(reply: AssistantReply) -> list[str]:
    """Message first, then the rendered result once the query ran."""
    parts = [reply.message]
    if not reply.completed or reply.result is None:
        return parts

    result = reply.result
    if isinstance(result, list):
        parts.append(f"Resultados ({len(result)}):\n\n{to_json(result)}")
    elif isinstance(result, dict) and "count" in result:
        text = f"Total de registros: {result['count']}"
        if result.get("filter"):
            text += f"\nFiltro aplicado: {result['filter']}"
        parts.append(text)
    else:
        parts.append(f"Detalhes do registro:\n\n{to_json(result)}")
    return parts

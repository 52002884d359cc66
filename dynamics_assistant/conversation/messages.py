"""User-facing Portuguese prompts of the query assistant."""

import json

from dynamics_assistant.schemas.session_schema import QuerySession

WELCOME = (
    "Bem-vindo ao assistente de consulta do Dynamics 365!\n\n"
    "Vamos construir sua consulta passo a passo.\n\n"
    "Primeiro, qual entidade você deseja consultar? "
    "(ex: contas, contatos, casos, oportunidades)"
)

SESSION_NOT_FOUND = "Sessão não encontrada ou expirada. Por favor, inicie uma nova sessão."

SESSION_FINISHED = (
    "Esta consulta já foi executada. Inicie uma nova sessão para fazer outra consulta."
)

ACTION_MENU = (
    "1. Listar registros\n"
    "2. Obter detalhes de um registro específico\n"
    "3. Contar registros"
)

ACTION_UNKNOWN = f"Ação não reconhecida. Por favor, escolha uma das seguintes opções:\n{ACTION_MENU}"

ASK_RECORD_ID = (
    "Você escolheu obter detalhes de um registro específico.\n\n"
    "Por favor, informe o ID do registro que deseja consultar:"
)

FILTER_SET = (
    "Filtro definido.\n\n"
    "Quais campos você deseja incluir nos resultados?\n"
    'Informe os nomes dos campos separados por vírgula (ex: "nome, email, telefone").\n\n'
    'Se quiser todos os campos, responda "todos".'
)

FILTER_UNRECOGNIZED = (
    "Não foi possível interpretar o filtro: formato de filtro não reconhecido.\n\n"
    'Por favor, tente novamente com um formato como "campo operador valor" '
    '(ex: "nome contém Microsoft") ou responda "sem filtro".'
)

ASK_ORDER = (
    "Campos definidos.\n\n"
    "Como você deseja ordenar os resultados?\n"
    'Informe o campo e a direção (ex: "nome asc" ou "criado desc").\n\n'
    'Se não quiser ordenação específica, responda "padrão".'
)

ORDER_UNRECOGNIZED = (
    "Não foi possível interpretar a ordenação: formato de ordenação não reconhecido.\n\n"
    'Por favor, tente novamente com um formato como "campo direção" (ex: "nome asc") '
    'ou responda "padrão".'
)

LIMIT_INVALID = 'Valor inválido. Por favor, informe um número positivo ou responda "padrão".'

CONFIRM_UNRECOGNIZED = (
    'Resposta não reconhecida. Por favor, responda "sim" para executar a consulta '
    'ou "não" para cancelar.'
)

CANCELLED = (
    "Consulta cancelada. Vamos começar novamente.\n\n"
    "Qual entidade você deseja consultar? (ex: contas, contatos, casos, oportunidades)"
)

EXECUTED = "Consulta executada com sucesso!"


def entity_selected(entity: str) -> str:
    return (
        f'Ótimo! Você selecionou a entidade "{entity}".\n\n'
        f"Agora, qual ação você deseja realizar?\n{ACTION_MENU}\n\n"
        "Responda com o número ou nome da ação."
    )


def entity_unknown(entity: str) -> str:
    return (
        f'A entidade "{entity}" não foi reconhecida ou não está disponível no Dynamics 365.\n\n'
        "Por favor, escolha uma entidade válida (ex: accounts, contacts, incidents, opportunities)."
    )


def ask_filter(action: str) -> str:
    verb = "listar" if action == "list" else "contar"
    return (
        f"Você escolheu {verb} registros.\n\n"
        'Deseja aplicar algum filtro? (ex: "nome contém Microsoft" ou "criado após 2023-01-01")\n\n'
        'Se não quiser filtrar, responda "não" ou "sem filtro".'
    )


def ask_limit(default_top: int) -> str:
    return (
        "Ordenação definida.\n\n"
        "Quantos registros você deseja retornar no máximo?\n"
        f'Informe um número ou responda "padrão" para usar o limite padrão ({default_top}).'
    )


def confirm_prompt(headline: str, session: QuerySession) -> str:
    return (
        f"{headline}\n\nResumo da sua consulta:\n{build_summary(session)}\n\n"
        "Deseja executar esta consulta? (sim/não)"
    )


def execution_failed(error: object) -> str:
    return (
        f"Erro ao executar a consulta: {error}\n\n"
        'Responda "sim" para tentar novamente ou "não" para recomeçar.'
    )


def no_record_found() -> str:
    return (
        "Nenhum registro encontrado com os filtros especificados.\n\n"
        'Responda "sim" para tentar novamente ou "não" para recomeçar.'
    )


def build_summary(session: QuerySession) -> str:
    """Render the accumulated query as a bullet list.

    Ordering and limit are only shown for listings.
    """
    if not session.entity or not session.action:
        return "Consulta incompleta"

    lines = [f"- Entidade: {session.entity}", f"- Ação: {session.action}"]
    if session.filters:
        rendered = {field: entry.model_dump() for field, entry in session.filters.items()}
        lines.append(f"- Filtro: {json.dumps(rendered, ensure_ascii=False)}")
    if session.fields:
        lines.append(f"- Campos: {', '.join(session.fields)}")
    else:
        lines.append("- Campos: todos")
    if session.action == "list":
        if session.order_by:
            lines.append(f"- Ordenação: {session.order_by}")
        if session.limit:
            lines.append(f"- Limite: {session.limit} registros")
    return "\n".join(lines)

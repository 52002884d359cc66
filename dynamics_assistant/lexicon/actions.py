"""Action verb tables for the shorthand grammar, NL queries and the assistant."""

from typing import Optional

from dynamics_assistant.utils import normalize_text

SHORTHAND_ACTIONS: dict[str, str] = {
    "list": "list", "ls": "list",
    "get": "get", "show": "get", "view": "get",
    "create": "create", "new": "create", "add": "create",
    "update": "update", "edit": "update", "mod": "update",
    "delete": "delete", "del": "delete", "rm": "delete",
    "count": "count",
    "fields": "fields", "schema": "fields",
}

SHORTHAND_ACTION_NAMES: tuple[str, ...] = (
    "list", "get", "create", "update", "delete", "count", "fields",
)

NL_ACTIONS: dict[str, str] = {
    "mostrar": "list", "listar": "list", "exibir": "list",
    "buscar": "list", "encontrar": "list", "pesquisar": "list", "procurar": "list",
    "obter": "get", "pegar": "get", "detalhar": "get", "detalhes": "get",
    "criar": "create", "adicionar": "create", "novo": "create", "nova": "create",
    "atualizar": "update", "modificar": "update", "editar": "update", "alterar": "update",
    "deletar": "delete", "excluir": "delete", "remover": "delete", "apagar": "delete",
    "contar": "count", "quantos": "count", "quantas": "count", "total": "count",
}

# Interactive assistant: numbered menu plus synonyms
ASSISTANT_ACTIONS: dict[str, str] = {
    "1": "list", "listar": "list", "list": "list",
    "mostrar": "list", "exibir": "list", "buscar": "list",
    "2": "get", "obter": "get", "get": "get",
    "detalhar": "get", "detalhes": "get", "ver": "get",
    "3": "count", "contar": "count", "count": "count", "total": "count",
}

NO_FILTER_WORDS: frozenset[str] = frozenset(
    {"nao", "sem filtro", "sem", "n", "no", "none"}
)
ALL_FIELDS_WORDS: frozenset[str] = frozenset({"todos", "all", "tudo", "*"})
DEFAULT_WORDS: frozenset[str] = frozenset({"padrao", "default", "sem", "nao"})
AFFIRMATIVE_WORDS: frozenset[str] = frozenset(
    {"sim", "yes", "s", "y", "confirmar", "executar", "ok"}
)
NEGATIVE_WORDS: frozenset[str] = frozenset({"nao", "no", "n", "cancelar", "cancel"})


def resolve_shorthand_action(word: str) -> Optional[str]:
    return SHORTHAND_ACTIONS.get(word.strip().lower())


def resolve_assistant_action(text: str) -> Optional[str]:
    return ASSISTANT_ACTIONS.get(normalize_text(text.strip()))

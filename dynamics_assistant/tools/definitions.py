from mcp.types import Tool

# Tool names
D365_SHORTHAND = "d365"
DYNAMICS_QUERY = "dynamics-query"
ASSISTANT_START = "query-assistant-start"
ASSISTANT_INPUT = "query-assistant-input"
ASSISTANT_END = "query-assistant-end"
METADATA_EXPLORER = "metadata-explorer"

METADATA_ACTIONS: tuple[str, ...] = (
    "list-entities",
    "entity-details",
    "entity-attributes",
    "attribute-details",
    "entity-relationships",
    "search-entities",
    "search-attributes",
    "data-model",
)


tool_list = [
    Tool(
        name=D365_SHORTHAND,
        description=(
            "Executa comandos abreviados no Dynamics 365 no formato 'entidade:ação [parâmetros]'. "
            "Ações: list, get, create, update, delete, count, fields. "
            "Também aceita 'get metadata <entidade>'."
        ),
        inputSchema={
            "type": "object",
            "properties": {
                "command": {
                    "description": (
                        "Comando no formato 'entidade:ação [parâmetros]', ex: 'contact:list', "
                        "'account:get 123', 'case:update 456 statuscode=5'"
                    ),
                    "type": "string",
                },
            },
            "required": ["command"],
        },
    ),
    Tool(
        name=DYNAMICS_QUERY,
        description="Consulta o Dynamics 365 usando linguagem natural em português.",
        inputSchema={
            "type": "object",
            "properties": {
                "query": {
                    "description": (
                        "Consulta em linguagem natural, ex: 'listar contas top 5', "
                        "'buscar casos titulo contendo suporte'"
                    ),
                    "type": "string",
                },
            },
            "required": ["query"],
        },
    ),
    Tool(
        name=ASSISTANT_START,
        description="Inicia uma sessão do assistente interativo de consulta.",
        inputSchema={
            "type": "object",
            "properties": {},
            "required": [],
        },
    ),
    Tool(
        name=ASSISTANT_INPUT,
        description="Envia a resposta do usuário para uma sessão do assistente de consulta.",
        inputSchema={
            "type": "object",
            "properties": {
                "sessionId": {
                    "description": "ID da sessão do assistente de consulta",
                    "type": "string",
                },
                "input": {
                    "description": "Entrada do usuário para o assistente",
                    "type": "string",
                },
            },
            "required": ["sessionId", "input"],
        },
    ),
    Tool(
        name=ASSISTANT_END,
        description="Encerra uma sessão do assistente de consulta.",
        inputSchema={
            "type": "object",
            "properties": {
                "sessionId": {
                    "description": "ID da sessão do assistente de consulta a ser encerrada",
                    "type": "string",
                },
            },
            "required": ["sessionId"],
        },
    ),
    Tool(
        name=METADATA_EXPLORER,
        description="Explora entidades, atributos e relacionamentos do Dynamics 365.",
        inputSchema={
            "type": "object",
            "properties": {
                "action": {
                    "description": "Ação a ser executada",
                    "type": "string",
                    "enum": list(METADATA_ACTIONS),
                },
                "entityLogicalName": {
                    "description": "Nome lógico da entidade (ex: account, contact)",
                    "type": "string",
                },
                "attributeLogicalName": {
                    "description": "Nome lógico do atributo (ex: name, emailaddress1)",
                    "type": "string",
                },
                "searchText": {"description": "Texto para pesquisa", "type": "string"},
                "refresh": {
                    "description": "Se deve atualizar o cache de metadados",
                    "type": "boolean",
                    "default": False,
                },
                "entityNames": {
                    "description": "Lista de nomes de entidades para gerar modelo de dados",
                    "type": "array",
                    "items": {"type": "string"},
                },
                "includeAttributes": {"type": "boolean", "default": True},
                "includeOptionSets": {"type": "boolean", "default": True},
                "includeAttributeTypes": {"type": "boolean", "default": True},
                "selectEntityProperties": {"type": "array", "items": {"type": "string"}},
                "selectAttributeProperties": {"type": "array", "items": {"type": "string"}},
            },
            "required": ["action"],
        },
    ),
]

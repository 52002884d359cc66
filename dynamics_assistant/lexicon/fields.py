"""Per-entity natural-language field names mapped to Web API attribute names.

Keys are diacritic-free so they match normalized input. Unmapped tokens
are assumed to already be valid attribute names.
"""

from dynamics_assistant.utils import normalize_text

_COMMON: dict[str, str] = {
    "dono": "_ownerid_value",
    "proprietario": "_ownerid_value",
    "criado": "createdon",
    "modificado": "modifiedon",
}

_ADDRESS: dict[str, str] = {
    "endereco": "address1_composite",
    "cidade": "address1_city",
    "estado": "address1_stateorprovince",
    "pais": "address1_country",
    "cep": "address1_postalcode",
}

FIELD_SYNONYMS: dict[str, dict[str, str]] = {
    "accounts": {
        "nome": "name",
        "email": "emailaddress1",
        "telefone": "telephone1",
        "site": "websiteurl",
        "website": "websiteurl",
        **_ADDRESS,
        "receita": "revenue",
        "funcionarios": "numberofemployees",
        "setor": "industrycode",
        "tipo": "accountcategorycode",
        **_COMMON,
    },
    "contacts": {
        "nome": "firstname",
        "sobrenome": "lastname",
        "email": "emailaddress1",
        "telefone": "telephone1",
        "celular": "mobilephone",
        "cargo": "jobtitle",
        "departamento": "department",
        "conta": "_parentcustomerid_value",
        "empresa": "_parentcustomerid_value",
        **_ADDRESS,
        **_COMMON,
    },
    "incidents": {
        "titulo": "title",
        "assunto": "title",
        "descricao": "description",
        "cliente": "_customerid_value",
        "status": "statuscode",
        "prioridade": "prioritycode",
        "origem": "caseorigincode",
        "tipo": "casetypecode",
        "resolvido": "resolvedon",
        **_COMMON,
    },
    "opportunities": {
        "nome": "name",
        "topico": "name",
        "valor": "estimatedvalue",
        "probabilidade": "closeprobability",
        "fechamento": "estimatedclosedate",
        "cliente": "_customerid_value",
        "conta": "_parentaccountid_value",
        "status": "statuscode",
        **_COMMON,
    },
    "leads": {
        "nome": "firstname",
        "sobrenome": "lastname",
        "empresa": "companyname",
        "email": "emailaddress1",
        "telefone": "telephone1",
        "assunto": "subject",
        "origem": "leadsourcecode",
        "status": "statuscode",
        **_COMMON,
    },
}


def translate_field(collection: str, token: str) -> str:
    """Translate a natural-language field token for ``collection``."""
    cleaned = token.strip()
    table = FIELD_SYNONYMS.get(collection, {})
    return table.get(normalize_text(cleaned), cleaned)


def translate_fields(collection: str, tokens: list[str]) -> list[str]:
    return [translate_field(collection, t) for t in tokens if t.strip()]

"""Entity synonym tables.

Two independent tables live here because their consumers expect different
forms: query paths address the Web API by plural collection name
(``accounts``), while the metadata cache keys on the singular logical name
(``account``). All keys are diacritic-free and lowercase.
"""

import logging
from typing import Optional

from dynamics_assistant.utils import normalize_text

logger = logging.getLogger(__name__)

# word -> Web API collection name
COLLECTION_SYNONYMS: dict[str, str] = {
    "conta": "accounts", "contas": "accounts",
    "account": "accounts", "accounts": "accounts",
    "contato": "contacts", "contatos": "contacts",
    "contact": "contacts", "contacts": "contacts",
    "caso": "incidents", "casos": "incidents",
    "case": "incidents", "cases": "incidents",
    "incident": "incidents", "incidents": "incidents",
    "oportunidade": "opportunities", "oportunidades": "opportunities",
    "opportunity": "opportunities", "opportunities": "opportunities",
    "lead": "leads", "leads": "leads",
    "atividade": "activities", "atividades": "activities",
    "activity": "activities", "activities": "activities",
    "tarefa": "tasks", "tarefas": "tasks",
    "task": "tasks", "tasks": "tasks",
    "email": "emails", "emails": "emails",
    "reuniao": "appointments", "reunioes": "appointments",
    "appointment": "appointments", "appointments": "appointments",
    "telefone": "phonecalls", "chamada": "phonecalls", "chamadas": "phonecalls",
    "phonecall": "phonecalls", "phonecalls": "phonecalls",
}

# word -> entity logical name; every logical name maps to itself
LOGICAL_NAME_SYNONYMS: dict[str, str] = {
    "account": "account", "accounts": "account",
    "conta": "account", "contas": "account",
    "contact": "contact", "contacts": "contact",
    "contato": "contact", "contatos": "contact",
    "opportunity": "opportunity", "opportunities": "opportunity",
    "oportunidade": "opportunity", "oportunidades": "opportunity",
    "lead": "lead", "leads": "lead",
    "case": "incident", "cases": "incident",
    "caso": "incident", "casos": "incident",
    "incident": "incident", "incidents": "incident",
    "activity": "activitypointer", "activities": "activitypointer",
    "activitypointer": "activitypointer", "activitypointers": "activitypointer",
    "task": "task", "tasks": "task",
    "appointment": "appointment", "appointments": "appointment",
    "phonecall": "phonecall", "phonecalls": "phonecall",
    "email": "email", "emails": "email",
}

# Activity-derived collections share the activity primary key
_COLLECTION_ID_FIELDS: dict[str, str] = {
    "accounts": "accountid",
    "contacts": "contactid",
    "incidents": "incidentid",
    "opportunities": "opportunityid",
    "leads": "leadid",
    "activities": "activityid",
    "tasks": "activityid",
    "emails": "activityid",
    "appointments": "activityid",
    "phonecalls": "activityid",
}


def resolve_collection(word: str) -> Optional[str]:
    """Map a free-text entity word to its collection name, or None."""
    return COLLECTION_SYNONYMS.get(normalize_text(word.strip()))


def normalize_collection(word: str) -> str:
    """Map an entity word to its collection name, passing unknown words through lowercased."""
    resolved = resolve_collection(word)
    if resolved is None:
        logger.debug("No collection synonym for '%s', using it as given", word)
        return word.strip().lower()
    return resolved


def singularize(collection: str) -> str:
    """Best-effort singular form of a collection name.

    Examples:
        >>> singularize("opportunities")
        'opportunity'
        >>> singularize("accounts")
        'account'
    """
    if collection.endswith("ies") and len(collection) > 3:
        return collection[:-3] + "y"
    if collection.endswith("s"):
        return collection[:-1]
    return collection


def id_field_for(collection: str) -> str:
    """Return the primary-key attribute name for a collection."""
    known = _COLLECTION_ID_FIELDS.get(collection.lower())
    if known:
        return known
    return f"{singularize(collection.lower())}id"

"""
OData ``$filter`` construction.

Two front ends share one renderer: parsed filter entries (NL queries and
the assistant) and typed shorthand parameters with ``*`` wildcards.
Clauses keep their input order so the same input always yields the same
string. Unsupported operators are dropped with a warning; the remaining
clauses still apply.
"""

import logging
from typing import Iterable, Mapping, Optional

from dynamics_assistant.lexicon.entities import id_field_for
from dynamics_assistant.schemas.query_schema import FilterEntry, FilterOperator
from dynamics_assistant.utils import ParamValue

logger = logging.getLogger(__name__)

ID_KEY = "id"


def quote(value: str) -> str:
    """Render an OData string literal."""
    return "'" + value.replace("'", "''") + "'"


def render_clause(field: str, operator: str, value: str) -> Optional[str]:
    """Render one clause, or None when the operator is not supported."""
    try:
        op = FilterOperator(operator)
    except ValueError:
        logger.warning("Unsupported filter operator '%s' on field '%s' dropped", operator, field)
        return None
    if op.is_function:
        return f"{op.value}({field}, {quote(value)})"
    return f"{field} {op.value} {quote(value)}"


def id_clause(entity: str, value: object) -> str:
    # GUID literals are unquoted
    return f"{id_field_for(entity)} eq {value}"


def build_filter(entity: str, filters: Mapping[str, FilterEntry]) -> str:
    """Render parsed filter entries as an OData filter expression.

    Examples:
        >>> build_filter("accounts", {"name": FilterEntry(operator="contains", value="Micro")})
        "contains(name, 'Micro')"
        >>> build_filter("accounts", {"id": FilterEntry(operator="eq", value="acc-001")})
        'accountid eq acc-001'
    """
    parts: list[str] = []
    for field, entry in filters.items():
        if field == ID_KEY:
            parts.append(id_clause(entity, entry.value))
            continue
        clause = render_clause(field, entry.operator, entry.value)
        if clause is not None:
            parts.append(clause)
    return " and ".join(parts)


def _wildcard_clause(field: str, value: str) -> Optional[str]:
    cleaned = value.replace("*", "")
    starts, ends = value.startswith("*"), value.endswith("*")
    if starts and ends:
        return render_clause(field, FilterOperator.CONTAINS, cleaned)
    if starts:
        return render_clause(field, FilterOperator.ENDSWITH, cleaned)
    if ends:
        return render_clause(field, FilterOperator.STARTSWITH, cleaned)
    logger.warning("Wildcard only in the middle of '%s' for field '%s' dropped", value, field)
    return None


def build_param_filter(
    entity: str,
    params: Mapping[str, ParamValue],
    reserved: Iterable[str] = (),
) -> str:
    """Render shorthand ``key=value`` parameters as an OData filter.

    Strings with ``*`` become contains/startswith/endswith, other strings
    are compared with ``eq``. Numbers and booleans are rendered unquoted.

    Examples:
        >>> build_param_filter("accounts", {"name": "*Microsoft*"})
        "contains(name, 'Microsoft')"
        >>> build_param_filter("accounts", {"revenue": 10, "active": True})
        'revenue eq 10 and active eq true'
    """
    skip = set(reserved)
    parts: list[str] = []
    for key, value in params.items():
        if key in skip:
            continue
        if key == ID_KEY:
            parts.append(id_clause(entity, value))
            continue
        if isinstance(value, bool):
            parts.append(f"{key} eq {'true' if value else 'false'}")
        elif isinstance(value, (int, float)):
            parts.append(f"{key} eq {value}")
        elif "*" in value:
            clause = _wildcard_clause(key, value)
            if clause is not None:
                parts.append(clause)
        else:
            parts.append(f"{key} eq {quote(value)}")
    return " and ".join(parts)

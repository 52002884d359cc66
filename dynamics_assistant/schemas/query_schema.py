"""Parsed command and query intent models."""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from dynamics_assistant.utils import ParamValue


class FilterOperator(str, Enum):
    EQ = "eq"
    NE = "ne"
    GT = "gt"
    LT = "lt"
    GE = "ge"
    LE = "le"
    CONTAINS = "contains"
    STARTSWITH = "startswith"
    ENDSWITH = "endswith"

    @property
    def is_function(self) -> bool:
        """Rendered as ``op(field, value)`` instead of ``field op value``."""
        return self in (FilterOperator.CONTAINS, FilterOperator.STARTSWITH, FilterOperator.ENDSWITH)


class FilterEntry(BaseModel):
    """One parsed filter: operator tag plus the raw value token.

    ``operator`` is kept as a plain string so an unsupported tag survives
    parsing and is dropped later by the filter builder.
    """
    operator: str
    value: str


class ParsedCommand(BaseModel):
    """Result of parsing ``entity:action [id] key=value ...``."""
    entity: Optional[str] = None
    action: Optional[str] = None
    params: dict[str, ParamValue] = Field(default_factory=dict)


class TokenTrace(BaseModel):
    """Which scan rule consumed which tokens."""
    rule: str
    tokens: list[str]


class ParsedQuery(BaseModel):
    entity: Optional[str] = None
    action: Optional[str] = None
    filters: dict[str, FilterEntry] = Field(default_factory=dict)
    fields: Optional[list[str]] = None
    limit: Optional[int] = None
    diagnostics: Optional[list[TokenTrace]] = None


class QueryOptions(BaseModel):
    """OData query options handed to the connector."""
    select: Optional[list[str]] = None
    filter: Optional[str] = None
    order_by: Optional[str] = None
    top: Optional[int] = None
    expand: Optional[list[str]] = None

"""Tool-friendly result returned by the shorthand and NL query services."""

from typing import Any, Optional

from pydantic import BaseModel

from dynamics_assistant.schemas.metadata_schema import FieldDescriptor


class CommandResult(BaseModel):
    success: bool
    entity: Optional[str] = None
    action: Optional[str] = None
    count: Optional[int] = None
    results: Optional[list[dict[str, Any]]] = None
    result: Optional[dict[str, Any]] = None
    fields: Optional[list[FieldDescriptor]] = None
    message: Optional[str] = None
    filter: Optional[str] = None
    select: Optional[list[str]] = None
    expand: Optional[list[str]] = None
    top: Optional[int] = None
    order_by: Optional[str] = None
    id: Optional[str] = None
    data: Optional[dict[str, Any]] = None
    entity_display_name: Optional[str] = None
    primary_key: Optional[str] = None
    primary_name: Optional[str] = None
    command: Optional[str] = None
    query: Optional[str] = None

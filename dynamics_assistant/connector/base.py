"""The CRM connector contract consumed by the query and metadata services."""

from typing import Any, Optional, Protocol, Sequence

Record = dict[str, Any]


class CRMConnector(Protocol):
    """Access to a CRM Web API.

    Implementations raise ``ConnectorError`` on network, auth or remote
    failures and own their retry policy. Metadata lookups return None when
    the entity or attribute does not exist.
    """

    def query_entities(
        self,
        entity: str,
        *,
        select: Optional[Sequence[str]] = None,
        filter: Optional[str] = None,
        order_by: Optional[str] = None,
        top: Optional[int] = None,
        expand: Optional[Sequence[str]] = None,
    ) -> list[Record]: ...

    def create_entity(self, entity: str, data: Record) -> Record: ...

    def update_entity(self, entity: str, entity_id: str, data: Record) -> None: ...

    def delete_entity(self, entity: str, entity_id: str) -> None: ...

    def get_entity_metadata(
        self,
        logical_name: str,
        *,
        include_attributes: bool = True,
        include_option_sets: bool = False,
        include_attribute_types: bool = True,
        select_entity_properties: Optional[Sequence[str]] = None,
        select_attribute_properties: Optional[Sequence[str]] = None,
    ) -> Optional[Record]: ...

    def get_attribute_metadata(
        self,
        logical_name: str,
        attribute: str,
        *,
        include_option_sets: bool = False,
        select_attribute_properties: Optional[Sequence[str]] = None,
    ) -> Optional[Record]: ...

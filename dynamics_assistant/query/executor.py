"""Runs built queries against the CRM connector.

Every connector failure is logged and re-raised as ``ConnectorError``
with a message saying what was being attempted. Nothing is retried here.
"""

import logging
from typing import Any, Optional, Sequence

from dynamics_assistant.config import QueryConfig, settings
from dynamics_assistant.connector.base import CRMConnector
from dynamics_assistant.errors import ConnectorError
from dynamics_assistant.schemas.query_schema import QueryOptions

logger = logging.getLogger(__name__)

Record = dict[str, Any]


class QueryExecutor:
    """List, get, count and CRUD calls with consistent error context."""

    def __init__(self, connector: CRMConnector, config: Optional[QueryConfig] = None) -> None:
        self._connector = connector
        self._config = config or settings.query

    @property
    def config(self) -> QueryConfig:
        return self._config

    def _wrap(self, context: str, exc: ConnectorError) -> ConnectorError:
        logger.error("%s: %s", context, exc)
        return ConnectorError(f"{context}: {exc}", status_code=exc.status_code)

    def _query(self, entity: str, options: QueryOptions, context: str) -> list[Record]:
        try:
            return self._connector.query_entities(
                entity,
                select=options.select or None,
                filter=options.filter or None,
                order_by=options.order_by,
                top=options.top,
                expand=options.expand or None,
            )
        except ConnectorError as exc:
            raise self._wrap(context, exc) from exc

    def list_records(self, entity: str, options: Optional[QueryOptions] = None) -> list[Record]:
        return self._query(entity, options or QueryOptions(), f"Failed to list {entity}")

    def get_record(
        self,
        entity: str,
        filter: str,
        *,
        select: Optional[Sequence[str]] = None,
        expand: Optional[Sequence[str]] = None,
    ) -> Optional[Record]:
        """Return the first record matching ``filter``, or None."""
        options = QueryOptions(
            filter=filter,
            select=list(select) if select else None,
            expand=list(expand) if expand else None,
            top=1,
        )
        rows = self._query(entity, options, f"Failed to get {entity} record")
        return rows[0] if rows else None

    def count_records(self, entity: str, filter: Optional[str] = None) -> int:
        """Approximate count: the size of a capped fetch of one cheap column.

        Results stop at ``count_cap`` rows; larger sets report the cap.
        """
        options = QueryOptions(
            filter=filter,
            select=[self._config.count_select_field],
            top=self._config.count_cap,
        )
        return len(self._query(entity, options, f"Failed to count {entity}"))

    def create_record(self, entity: str, data: Record) -> Record:
        try:
            return self._connector.create_entity(entity, data)
        except ConnectorError as exc:
            raise self._wrap(f"Failed to create {entity} record", exc) from exc

    def update_record(self, entity: str, entity_id: str, data: Record) -> None:
        try:
            self._connector.update_entity(entity, entity_id, data)
        except ConnectorError as exc:
            raise self._wrap(f"Failed to update {entity}({entity_id})", exc) from exc

    def delete_record(self, entity: str, entity_id: str) -> None:
        try:
            self._connector.delete_entity(entity, entity_id)
        except ConnectorError as exc:
            raise self._wrap(f"Failed to delete {entity}({entity_id})", exc) from exc

"""
Entity metadata cache.

Holds entity schema records keyed by logical name, plus one
last-refreshed timestamp. Entries expire together after the configured
TTL. A per-entity load is triggered when the caller asks for attributes
or option sets the cached entry does not have yet, so a partially loaded
entry is never handed out as if it were complete.

Refreshes are fetch-and-replace, so concurrent refreshes may overwrite
each other without harm; the cache takes no locks.
"""

import logging
import time
from dataclasses import dataclass
from typing import Callable, Optional, Sequence

from dynamics_assistant.config import CacheConfig, settings
from dynamics_assistant.connector.base import CRMConnector
from dynamics_assistant.errors import (
    AttributeNotFoundError,
    ConnectorError,
    EntityNotFoundError,
    MetadataError,
)
from dynamics_assistant.lexicon.entities import LOGICAL_NAME_SYNONYMS
from dynamics_assistant.metadata.mapping import (
    map_attribute,
    map_entity,
    map_entity_summary,
)
from dynamics_assistant.schemas.metadata_schema import (
    AttributeRecord,
    DataModel,
    DataModelEntity,
    DataModelRelationship,
    EntitySchemaRecord,
    EntitySummary,
    KeyAttribute,
    RelationshipRecord,
)
from dynamics_assistant.utils import normalize_text

logger = logging.getLogger(__name__)

ENTITY_LIST_PROPERTIES: tuple[str, ...] = (
    "LogicalName", "DisplayName", "DisplayCollectionName", "Description",
    "PrimaryIdAttribute", "PrimaryNameAttribute", "IsCustomEntity", "EntitySetName",
)


@dataclass(frozen=True)
class EntityDetailsOptions:
    include_attributes: bool = True
    include_option_sets: bool = True
    include_attribute_types: bool = True
    select_entity_properties: Optional[Sequence[str]] = None
    select_attribute_properties: Optional[Sequence[str]] = None
    refresh: bool = False


@dataclass(frozen=True)
class AttributeDetailsOptions:
    include_option_sets: bool = True
    select_attribute_properties: Optional[Sequence[str]] = None


class MetadataCache:
    """Lazily refreshed cache of entity schema records."""

    def __init__(
        self,
        connector: CRMConnector,
        config: Optional[CacheConfig] = None,
        clock: Optional[Callable[[], float]] = None,
    ) -> None:
        self._connector = connector
        self._config = config or settings.cache
        self._clock = clock or time.monotonic
        self._entities: dict[str, EntitySchemaRecord] = {}
        self._last_refreshed: Optional[float] = None
        self._listing_complete = False

    # ------------------------------------------------------------------ #
    # State
    # ------------------------------------------------------------------ #

    def is_stale(self) -> bool:
        if self._last_refreshed is None:
            return True
        return self._clock() - self._last_refreshed > self._config.metadata_ttl_sec

    def cached(self, name: str) -> Optional[EntitySchemaRecord]:
        """Return the cached entry without loading anything."""
        return self._entities.get(self.normalize_entity_name(name))

    def invalidate(self) -> None:
        """Mark everything stale; entries stay until the next refresh replaces them."""
        self._last_refreshed = None
        self._listing_complete = False

    def normalize_entity_name(self, name: str) -> str:
        """Map a user-supplied entity name to a logical name.

        The synonym table wins; otherwise one trailing ``s`` is stripped
        when the singular is a known synonym or an already cached entity.
        Anything else passes through lowercased.
        """
        lowered = normalize_text(name.strip())
        if lowered in LOGICAL_NAME_SYNONYMS:
            return LOGICAL_NAME_SYNONYMS[lowered]
        if lowered.endswith("s"):
            singular = lowered[:-1]
            if singular in LOGICAL_NAME_SYNONYMS:
                return LOGICAL_NAME_SYNONYMS[singular]
            if singular in self._entities:
                return singular
        return lowered

    # ------------------------------------------------------------------ #
    # Entities
    # ------------------------------------------------------------------ #

    def list_entities(self, refresh: bool = False) -> list[EntitySummary]:
        if refresh or self.is_stale() or not self._listing_complete:
            self._refresh_listing()
        return [entity.summary() for entity in self._entities.values()]

    def _refresh_listing(self) -> None:
        try:
            rows = self._connector.query_entities(
                "EntityDefinitions", select=list(ENTITY_LIST_PROPERTIES),
            )
        except ConnectorError as exc:
            logger.error("Entity list refresh failed: %s", exc)
            raise MetadataError(f"Failed to refresh the entity list: {exc}") from exc

        rows = rows[: self._config.entity_list_top]
        self._entities = {row["LogicalName"]: map_entity_summary(row) for row in rows}
        self._last_refreshed = self._clock()
        self._listing_complete = True
        logger.debug("Entity list refreshed with %d entities", len(self._entities))

    def get_entity_details(
        self, name: str, options: Optional[EntityDetailsOptions] = None,
    ) -> EntitySchemaRecord:
        opts = options or EntityDetailsOptions()
        key = self.normalize_entity_name(name)
        entry = self._entities.get(key)

        needs_load = (
            opts.refresh
            or self.is_stale()
            or entry is None
            or (opts.include_attributes and not entry.attributes_loaded)
            or (
                opts.include_attributes
                and opts.include_option_sets
                and not entry.option_sets_loaded
            )
        )
        if needs_load:
            entry = self._load_entity(name, key, opts)
        return entry

    def _load_entity(
        self, name: str, key: str, opts: EntityDetailsOptions,
    ) -> EntitySchemaRecord:
        logger.debug("Loading metadata for entity %s (%s)", key, opts)
        try:
            raw = self._connector.get_entity_metadata(
                key,
                include_attributes=opts.include_attributes,
                include_option_sets=opts.include_option_sets,
                include_attribute_types=opts.include_attribute_types,
                select_entity_properties=opts.select_entity_properties,
                select_attribute_properties=opts.select_attribute_properties,
            )
        except ConnectorError as exc:
            # Keep whatever is cached; the failure may be transient
            logger.error("Metadata load for entity %s failed: %s", key, exc)
            raise MetadataError(f"Failed to load details for entity {name}: {exc}") from exc

        if not raw:
            raise EntityNotFoundError(
                f"Entity '{name}' (normalized: {key}) was not found"
            )

        entry = map_entity(raw, opts.include_attributes, opts.include_option_sets)
        self._entities[key] = entry
        self._last_refreshed = self._clock()
        return entry

    def get_entity_attributes(self, name: str, refresh: bool = False) -> list[AttributeRecord]:
        return self.get_entity_details(name, EntityDetailsOptions(refresh=refresh)).attributes

    def get_entity_relationships(
        self, name: str, refresh: bool = False,
    ) -> list[RelationshipRecord]:
        return self.get_entity_details(name, EntityDetailsOptions(refresh=refresh)).relationships

    def get_attribute_details(
        self,
        entity: str,
        attribute: str,
        options: Optional[AttributeDetailsOptions] = None,
    ) -> AttributeRecord:
        """Fetch one attribute straight from the connector, bypassing the cache."""
        opts = options or AttributeDetailsOptions()
        key = self.normalize_entity_name(entity)
        try:
            raw = self._connector.get_attribute_metadata(
                key,
                attribute,
                include_option_sets=opts.include_option_sets,
                select_attribute_properties=opts.select_attribute_properties,
            )
        except ConnectorError as exc:
            logger.error("Attribute load for %s.%s failed: %s", key, attribute, exc)
            raise MetadataError(
                f"Failed to load details for attribute {key}.{attribute}: {exc}"
            ) from exc

        if not raw:
            raise AttributeNotFoundError(
                f"Attribute '{attribute}' was not found on entity '{key}'"
            )
        return map_attribute(raw, opts.include_option_sets)

    # ------------------------------------------------------------------ #
    # Search and data model
    # ------------------------------------------------------------------ #

    def search_entities(self, text: str) -> list[EntitySummary]:
        needle = text.lower()
        return [
            entity for entity in self.list_entities()
            if needle in entity.name.lower()
            or needle in entity.display_name.lower()
            or needle in entity.display_collection_name.lower()
        ]

    def search_attributes(self, entity: str, text: str) -> list[AttributeRecord]:
        needle = text.lower()
        return [
            attr for attr in self.get_entity_attributes(entity)
            if needle in attr.name.lower()
            or needle in attr.display_name.lower()
            or (attr.description is not None and needle in attr.description.lower())
        ]

    def generate_data_model(self, entity_names: Optional[list[str]] = None) -> DataModel:
        if entity_names:
            names = list(entity_names)
        else:
            listed = self.list_entities()
            names = [e.name for e in listed[: self._config.data_model_entity_limit]]

        entities = [self.get_entity_details(name) for name in names]
        return DataModel(entities=[_data_model_entity(e) for e in entities])


def _data_model_entity(entity: EntitySchemaRecord) -> DataModelEntity:
    return DataModelEntity(
        name=entity.name,
        display_name=entity.display_name,
        primary_id_field=entity.primary_id_field,
        primary_name_field=entity.primary_name_field,
        key_attributes=[
            KeyAttribute(
                name=attr.name,
                display_name=attr.display_name,
                type=attr.type,
                is_primary_id=attr.is_primary_id,
                is_primary_name=attr.is_primary_name,
            )
            for attr in entity.attributes
            if attr.is_primary_id or attr.is_primary_name or attr.required
        ],
        relationships=[
            DataModelRelationship(
                name=rel.name,
                kind=rel.kind,
                referenced_entity=rel.referenced_entity,
                navigation_property=rel.navigation_property,
            )
            for rel in entity.relationships
        ],
    )

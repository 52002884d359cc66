"""Map raw EntityDefinitions documents onto metadata records."""

from typing import Any, Optional

from dynamics_assistant.schemas.metadata_schema import (
    OPTION_SET_TYPES,
    AttributeRecord,
    AttributeType,
    EntitySchemaRecord,
    FieldDescriptor,
    OptionSet,
    OptionSetOption,
    RelationshipKind,
    RelationshipRecord,
)

_REQUIRED_LEVELS = frozenset({"ApplicationRequired", "SystemRequired"})


def label_of(node: Any) -> Optional[str]:
    """Extract ``UserLocalizedLabel.Label`` from a localized label node."""
    if not isinstance(node, dict):
        return None
    localized = node.get("UserLocalizedLabel")
    if isinstance(localized, dict):
        return localized.get("Label") or None
    return None


def _flag(value: Any) -> bool:
    # Some properties come back as {"Value": bool, "CanBeChanged": ...}
    if isinstance(value, dict):
        return bool(value.get("Value"))
    return bool(value)


def map_option_set(raw: dict, prefix: str = "Opção") -> OptionSet:
    return OptionSet(
        name=raw.get("Name"),
        options=[
            OptionSetOption(
                value=opt["Value"],
                label=label_of(opt.get("Label")) or f"{prefix} {opt['Value']}",
            )
            for opt in raw.get("Options") or []
        ],
    )


def map_attribute(raw: dict, include_option_sets: bool = True) -> AttributeRecord:
    attribute_type = AttributeType.parse(raw.get("AttributeType"))
    option_set = None
    if include_option_sets and raw.get("OptionSet") and attribute_type in OPTION_SET_TYPES:
        option_set = map_option_set(raw["OptionSet"])

    required_level = (raw.get("RequiredLevel") or {}).get("Value")
    return AttributeRecord(
        name=raw["LogicalName"],
        display_name=label_of(raw.get("DisplayName")) or raw.get("SchemaName") or raw["LogicalName"],
        type=attribute_type,
        description=label_of(raw.get("Description")),
        required=required_level in _REQUIRED_LEVELS,
        is_primary_id=bool(raw.get("IsPrimaryId")),
        is_primary_name=bool(raw.get("IsPrimaryName")),
        max_length=raw.get("MaxLength"),
        precision=raw.get("Precision"),
        min_value=raw.get("MinValue"),
        max_value=raw.get("MaxValue"),
        option_set=option_set,
    )


def map_relationships(raw: dict) -> list[RelationshipRecord]:
    relationships: list[RelationshipRecord] = []
    for rel in raw.get("ManyToOneRelationships") or []:
        relationships.append(RelationshipRecord(
            name=rel["SchemaName"],
            kind=RelationshipKind.MANY_TO_ONE,
            referenced_entity=rel.get("ReferencedEntity"),
            navigation_property=rel.get("ReferencingEntityNavigationPropertyName"),
            lookup_field=rel.get("ReferencingAttribute"),
        ))
    for rel in raw.get("OneToManyRelationships") or []:
        relationships.append(RelationshipRecord(
            name=rel["SchemaName"],
            kind=RelationshipKind.ONE_TO_MANY,
            referenced_entity=rel.get("ReferencingEntity"),
            navigation_property=rel.get("ReferencedEntityNavigationPropertyName"),
        ))
    for rel in raw.get("ManyToManyRelationships") or []:
        relationships.append(RelationshipRecord(
            name=rel["SchemaName"],
            kind=RelationshipKind.MANY_TO_MANY,
            referenced_entity=rel.get("Entity2LogicalName"),
            navigation_property=rel.get("Entity1NavigationPropertyName"),
        ))
    return relationships


def map_entity_summary(raw: dict) -> EntitySchemaRecord:
    """Bare entry from an entity listing; attributes are not loaded."""
    name = raw["LogicalName"]
    return EntitySchemaRecord(
        name=name,
        display_name=label_of(raw.get("DisplayName")) or name,
        display_collection_name=label_of(raw.get("DisplayCollectionName")) or name,
        description=label_of(raw.get("Description")),
        entity_set_name=raw.get("EntitySetName"),
        primary_id_field=raw.get("PrimaryIdAttribute"),
        primary_name_field=raw.get("PrimaryNameAttribute"),
        is_custom_entity=_flag(raw.get("IsCustomEntity")),
    )


def map_entity(
    raw: dict,
    include_attributes: bool = True,
    include_option_sets: bool = True,
) -> EntitySchemaRecord:
    """Full entry from a single-entity metadata document."""
    name = raw["LogicalName"]
    attributes_loaded = include_attributes and raw.get("Attributes") is not None
    attributes = (
        [map_attribute(a, include_option_sets) for a in raw["Attributes"]]
        if attributes_loaded else []
    )
    return EntitySchemaRecord(
        name=name,
        display_name=label_of(raw.get("DisplayName")) or raw.get("SchemaName") or name,
        display_collection_name=(
            label_of(raw.get("DisplayCollectionName")) or raw.get("EntitySetName") or name
        ),
        description=label_of(raw.get("Description")),
        entity_set_name=raw.get("EntitySetName"),
        primary_id_field=raw.get("PrimaryIdAttribute") or _first_flagged(attributes, "is_primary_id"),
        primary_name_field=(
            raw.get("PrimaryNameAttribute") or _first_flagged(attributes, "is_primary_name")
        ),
        is_custom_entity=_flag(raw.get("IsCustomEntity")),
        attributes=attributes,
        relationships=map_relationships(raw),
        attributes_loaded=attributes_loaded,
        option_sets_loaded=attributes_loaded and include_option_sets,
    )


def _first_flagged(attributes: list[AttributeRecord], flag: str) -> Optional[str]:
    for attribute in attributes:
        if getattr(attribute, flag):
            return attribute.name
    return None


def field_descriptors(entity: EntitySchemaRecord) -> list[FieldDescriptor]:
    """Flatten an entity's attributes into field descriptors."""
    return [
        FieldDescriptor(
            name=attr.name,
            display_name=attr.display_name,
            type=attr.type,
            description=attr.description or "",
            required=attr.required,
            max_length=attr.max_length,
            precision=attr.precision,
            option_set=attr.option_set,
        )
        for attr in entity.attributes
    ]

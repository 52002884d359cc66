"""Entity, attribute and relationship metadata models."""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, model_validator


class AttributeType(str, Enum):
    """Attribute type tags reported by EntityDefinitions."""
    STRING = "String"
    MEMO = "Memo"
    INTEGER = "Integer"
    BIGINT = "BigInt"
    DECIMAL = "Decimal"
    MONEY = "Money"
    DOUBLE = "Double"
    BOOLEAN = "Boolean"
    PICKLIST = "Picklist"
    STATUS = "Status"
    STATE = "State"
    LOOKUP = "Lookup"
    CUSTOMER = "Customer"
    OWNER = "Owner"
    DATETIME = "DateTime"
    UNIQUEIDENTIFIER = "Uniqueidentifier"
    IMAGE = "Image"
    VIRTUAL = "Virtual"
    ENTITY_NAME = "EntityName"
    MANAGED_PROPERTY = "ManagedProperty"
    FILE = "File"
    OTHER = "Other"

    @classmethod
    def parse(cls, raw: Optional[str]) -> "AttributeType":
        try:
            return cls(raw)
        except ValueError:
            return cls.OTHER


OPTION_SET_TYPES: frozenset[AttributeType] = frozenset({
    AttributeType.PICKLIST,
    AttributeType.STATUS,
    AttributeType.STATE,
    AttributeType.BOOLEAN,
})


class OptionSetOption(BaseModel):
    value: int
    label: str


class OptionSet(BaseModel):
    name: Optional[str] = None
    options: list[OptionSetOption] = Field(default_factory=list)


class AttributeRecord(BaseModel):
    """A single field on an entity."""
    name: str
    display_name: str
    type: AttributeType
    description: Optional[str] = None
    required: bool = False
    is_primary_id: bool = False
    is_primary_name: bool = False
    max_length: Optional[int] = None
    precision: Optional[int] = None
    min_value: Optional[float] = None
    max_value: Optional[float] = None
    option_set: Optional[OptionSet] = None

    @model_validator(mode="after")
    def _option_set_only_for_enumerations(self) -> "AttributeRecord":
        if self.option_set is not None and self.type not in OPTION_SET_TYPES:
            raise ValueError(
                f"Attribute '{self.name}' of type {self.type.value} cannot carry an option set"
            )
        return self


class RelationshipKind(str, Enum):
    MANY_TO_ONE = "ManyToOne"
    ONE_TO_MANY = "OneToMany"
    MANY_TO_MANY = "ManyToMany"


class RelationshipRecord(BaseModel):
    name: str
    kind: RelationshipKind
    referenced_entity: Optional[str] = None
    navigation_property: Optional[str] = None
    lookup_field: Optional[str] = None

    @model_validator(mode="after")
    def _lookup_only_for_many_to_one(self) -> "RelationshipRecord":
        if self.lookup_field is not None and self.kind != RelationshipKind.MANY_TO_ONE:
            raise ValueError(
                f"Relationship '{self.name}' ({self.kind.value}) cannot have a lookup field"
            )
        return self


class EntitySchemaRecord(BaseModel):
    """Cached schema for one entity.

    ``attributes_loaded`` and ``option_sets_loaded`` tell "not loaded yet"
    apart from "loaded, nothing there".
    """
    name: str
    display_name: str
    display_collection_name: str
    description: Optional[str] = None
    entity_set_name: Optional[str] = None
    primary_id_field: Optional[str] = None
    primary_name_field: Optional[str] = None
    is_custom_entity: bool = False
    attributes: list[AttributeRecord] = Field(default_factory=list)
    relationships: list[RelationshipRecord] = Field(default_factory=list)
    attributes_loaded: bool = False
    option_sets_loaded: bool = False

    def summary(self) -> "EntitySummary":
        return EntitySummary(
            name=self.name,
            display_name=self.display_name,
            display_collection_name=self.display_collection_name,
        )


class EntitySummary(BaseModel):
    name: str
    display_name: str
    display_collection_name: str


class KeyAttribute(BaseModel):
    name: str
    display_name: str
    type: AttributeType
    is_primary_id: bool = False
    is_primary_name: bool = False


class DataModelRelationship(BaseModel):
    name: str
    kind: RelationshipKind
    referenced_entity: Optional[str] = None
    navigation_property: Optional[str] = None


class DataModelEntity(BaseModel):
    name: str
    display_name: str
    primary_id_field: Optional[str] = None
    primary_name_field: Optional[str] = None
    key_attributes: list[KeyAttribute] = Field(default_factory=list)
    relationships: list[DataModelRelationship] = Field(default_factory=list)


class DataModel(BaseModel):
    entities: list[DataModelEntity] = Field(default_factory=list)


class FieldDescriptor(BaseModel):
    """Flat field description returned by the shorthand ``fields`` action."""
    name: str
    display_name: str
    type: AttributeType
    description: str = ""
    required: bool = False
    max_length: Optional[int] = None
    precision: Optional[int] = None
    option_set: Optional[OptionSet] = None

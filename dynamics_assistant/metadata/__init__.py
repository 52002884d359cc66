from dynamics_assistant.metadata.cache import (
    AttributeDetailsOptions,
    EntityDetailsOptions,
    MetadataCache,
)

__all__ = ["MetadataCache", "EntityDetailsOptions", "AttributeDetailsOptions"]

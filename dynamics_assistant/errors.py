"""Exception types raised across the assistant.

Parsers and services convert these into ``success=False`` results at
their public boundary; the metadata cache and connectors raise them.
"""

from typing import Optional


class AssistantError(Exception):
    """Base class for every error raised by this package."""


class ConnectorError(AssistantError):
    """The CRM Web API call failed (network, auth or remote error)."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class MetadataError(AssistantError):
    """Loading or refreshing entity metadata failed."""


class EntityNotFoundError(MetadataError):
    """The CRM returned no definition for the requested entity."""


class AttributeNotFoundError(MetadataError):
    """The CRM returned no definition for the requested attribute."""


class InvalidTransitionError(AssistantError):
    """Raised when a transition is not valid from the current step."""

"""
Dynamics 365 Web API connector over ``requests``.

Takes a pre-acquired bearer token; acquiring and refreshing it is left to
whoever configures the process. Every call goes to the organization;
metadata staleness is owned by ``MetadataCache``.
"""

import json
import logging
from typing import Any, Optional, Sequence

import requests

from dynamics_assistant.config import DynamicsConfig, settings
from dynamics_assistant.errors import ConnectorError

logger = logging.getLogger(__name__)

Record = dict[str, Any]

DEFAULT_ENTITY_PROPERTIES: tuple[str, ...] = (
    "LogicalName", "SchemaName", "DisplayName", "DisplayCollectionName",
    "PrimaryIdAttribute", "PrimaryNameAttribute", "ObjectTypeCode",
    "IsCustomEntity", "Description", "EntitySetName",
)

DEFAULT_ATTRIBUTE_PROPERTIES: tuple[str, ...] = (
    "LogicalName", "SchemaName", "DisplayName", "AttributeType", "RequiredLevel",
    "Description", "IsPrimaryId", "IsPrimaryName", "Format", "MaxLength",
    "MinValue", "MaxValue",
)

OPTION_SET_CASTS: dict[str, str] = {
    "Picklist": "Microsoft.Dynamics.CRM.PicklistAttributeMetadata",
    "Status": "Microsoft.Dynamics.CRM.StatusAttributeMetadata",
    "State": "Microsoft.Dynamics.CRM.StateAttributeMetadata",
    "Boolean": "Microsoft.Dynamics.CRM.BooleanAttributeMetadata",
}

ATTRIBUTE_CASTS: dict[str, str] = {
    **OPTION_SET_CASTS,
    "Lookup": "Microsoft.Dynamics.CRM.LookupAttributeMetadata",
    "Customer": "Microsoft.Dynamics.CRM.LookupAttributeMetadata",
    "Owner": "Microsoft.Dynamics.CRM.LookupAttributeMetadata",
    "String": "Microsoft.Dynamics.CRM.StringAttributeMetadata",
    "Memo": "Microsoft.Dynamics.CRM.MemoAttributeMetadata",
    "Integer": "Microsoft.Dynamics.CRM.IntegerAttributeMetadata",
    "BigInt": "Microsoft.Dynamics.CRM.BigIntAttributeMetadata",
    "Decimal": "Microsoft.Dynamics.CRM.DecimalAttributeMetadata",
    "Money": "Microsoft.Dynamics.CRM.MoneyAttributeMetadata",
    "Double": "Microsoft.Dynamics.CRM.DoubleAttributeMetadata",
    "DateTime": "Microsoft.Dynamics.CRM.DateTimeAttributeMetadata",
    "Uniqueidentifier": "Microsoft.Dynamics.CRM.UniqueidentifierAttributeMetadata",
    "Image": "Microsoft.Dynamics.CRM.ImageAttributeMetadata",
}

_OPTION_SET_SELECT = "OptionSet($select=Options,Name,DisplayName)"


class DynamicsClient:
    """Thin Web API client implementing the ``CRMConnector`` protocol."""

    def __init__(
        self,
        config: Optional[DynamicsConfig] = None,
        session: Optional[requests.Session] = None,
    ) -> None:
        self._config = config or settings.dynamics
        if not self._config.url:
            raise ValueError("DYNAMICS_URL is required for the live Web API client")
        self._api_url = (
            f"{self._config.url.rstrip('/')}/api/data/v{self._config.api_version}"
        )
        self._session = session or requests.Session()

    @property
    def api_url(self) -> str:
        return self._api_url

    def close(self) -> None:
        self._session.close()

    def _get_headers(self) -> dict[str, str]:
        """Standard OData request headers."""
        return {
            "Authorization": f"Bearer {self._config.access_token}",
            "OData-MaxVersion": "4.0",
            "OData-Version": "4.0",
            "Accept": "application/json",
            "Content-Type": "application/json; charset=utf-8",
        }

    def _request(
        self,
        method: str,
        path: str,
        *,
        params: Optional[dict[str, Any]] = None,
        payload: Optional[Record] = None,
        allow_not_found: bool = False,
    ) -> Optional[requests.Response]:
        url = f"{self._api_url}/{path}"
        try:
            response = self._session.request(
                method,
                url,
                headers=self._get_headers(),
                params=params,
                json=payload,
                timeout=self._config.request_timeout_sec,
            )
        except requests.RequestException as exc:
            logger.error("%s %s failed: %s", method, path, exc)
            raise ConnectorError(f"{method} {path} failed: {exc}") from exc

        if response.status_code == 404 and allow_not_found:
            logger.debug("%s %s returned 404", method, path)
            return None
        if response.status_code >= 400:
            detail = _error_detail(response)
            logger.error(
                "%s %s returned HTTP %d: %s", method, path, response.status_code, detail,
            )
            raise ConnectorError(
                f"HTTP {response.status_code} from {path}: {detail}",
                status_code=response.status_code,
            )
        return response

    # ------------------------------------------------------------------ #
    # Records
    # ------------------------------------------------------------------ #

    def query_entities(
        self,
        entity: str,
        *,
        select: Optional[Sequence[str]] = None,
        filter: Optional[str] = None,
        order_by: Optional[str] = None,
        top: Optional[int] = None,
        expand: Optional[Sequence[str]] = None,
    ) -> list[Record]:
        params: dict[str, Any] = {}
        if select:
            params["$select"] = ",".join(select)
        if filter:
            params["$filter"] = filter
        if order_by:
            params["$orderby"] = order_by
        if top:
            params["$top"] = top
        if expand:
            params["$expand"] = ",".join(expand)

        logger.debug("Querying %s with %s", entity, params)
        response = self._request("GET", entity, params=params)
        return response.json().get("value", [])

    def create_entity(self, entity: str, data: Record) -> Record:
        logger.debug("Creating %s record", entity)
        response = self._request("POST", entity, payload=data)
        if response.content:
            return response.json()
        # 204 responses carry the new record URI in a header
        return {"OData-EntityId": response.headers.get("OData-EntityId", "")}

    def update_entity(self, entity: str, entity_id: str, data: Record) -> None:
        logger.debug("Updating %s(%s)", entity, entity_id)
        self._request("PATCH", f"{entity}({entity_id})", payload=data)

    def delete_entity(self, entity: str, entity_id: str) -> None:
        logger.debug("Deleting %s(%s)", entity, entity_id)
        self._request("DELETE", f"{entity}({entity_id})")

    # ------------------------------------------------------------------ #
    # Metadata
    # ------------------------------------------------------------------ #

    def get_entity_metadata(
        self,
        logical_name: str,
        *,
        include_attributes: bool = True,
        include_option_sets: bool = False,
        include_attribute_types: bool = True,
        select_entity_properties: Optional[Sequence[str]] = None,
        select_attribute_properties: Optional[Sequence[str]] = None,
    ) -> Optional[Record]:
        params: dict[str, Any] = {
            "$select": ",".join(select_entity_properties or DEFAULT_ENTITY_PROPERTIES),
        }
        if include_attributes:
            attribute_props = list(select_attribute_properties or DEFAULT_ATTRIBUTE_PROPERTIES)
            if include_attribute_types and "AttributeType" not in attribute_props:
                attribute_props.append("AttributeType")
            clause = f"Attributes($select={','.join(attribute_props)}"
            if include_option_sets:
                casts = ",".join(
                    f"{cast}/{_OPTION_SET_SELECT}" for cast in OPTION_SET_CASTS.values()
                )
                clause += f";$expand={casts}"
            params["$expand"] = clause + ")"

        path = f"EntityDefinitions(LogicalName='{logical_name}')"
        response = self._request("GET", path, params=params, allow_not_found=True)
        return response.json() if response is not None else None

    def get_attribute_metadata(
        self,
        logical_name: str,
        attribute: str,
        *,
        include_option_sets: bool = False,
        select_attribute_properties: Optional[Sequence[str]] = None,
    ) -> Optional[Record]:
        base = (
            f"EntityDefinitions(LogicalName='{logical_name}')"
            f"/Attributes(LogicalName='{attribute}')"
        )
        # The typed cast, and with it the OptionSet navigation, depends on the type
        probe = self._request(
            "GET", base, params={"$select": "AttributeType,LogicalName"}, allow_not_found=True,
        )
        if probe is None:
            return None
        attribute_type = probe.json().get("AttributeType")
        if not attribute_type:
            raise ConnectorError(
                f"Could not determine the type of attribute '{attribute}' on '{logical_name}'"
            )

        cast = ATTRIBUTE_CASTS.get(attribute_type)
        if cast is None:
            logger.warning(
                "No specific cast for attribute type %s, using AttributeMetadata", attribute_type,
            )
            cast = "Microsoft.Dynamics.CRM.AttributeMetadata"

        params: dict[str, Any] = {
            "$select": ",".join(select_attribute_properties or DEFAULT_ATTRIBUTE_PROPERTIES),
        }
        if include_option_sets and attribute_type in OPTION_SET_CASTS:
            params["$expand"] = _OPTION_SET_SELECT

        response = self._request("GET", f"{base}/{cast}", params=params, allow_not_found=True)
        return response.json() if response is not None else None


def _error_detail(response: requests.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text[:500]
    error = body.get("error") if isinstance(body, dict) else None
    if isinstance(error, dict) and error.get("message"):
        return str(error["message"])
    return json.dumps(body)[:500]

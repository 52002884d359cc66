"""
Offline CRM connector with sample records and metadata.

Used by the console demo, by the server when no credentials are
configured, and by the tests. It understands the subset of ``$filter``
the query builders emit (comparisons and contains/startswith/endswith
joined with ``and``) and records every call for inspection.
"""

import copy
import logging
import re
import uuid
from datetime import datetime, timezone
from typing import Any, Optional, Sequence

from dynamics_assistant.errors import ConnectorError

logger = logging.getLogger(__name__)

Record = dict[str, Any]


def _label(text: str) -> dict:
    return {"UserLocalizedLabel": {"Label": text}}


def _options(*pairs: tuple[int, str]) -> dict:
    return {"Options": [{"Value": v, "Label": _label(label)} for v, label in pairs]}


SAMPLE_RECORDS: dict[str, list[Record]] = {
    "accounts": [
        {"accountid": "acc-001", "name": "Contoso Ltd.", "industrycode": 3,
         "revenue": 1000000, "address1_city": "Sao Paulo",
         "createdon": "2025-01-10T09:00:00Z"},
        {"accountid": "acc-002", "name": "Fabrikam Inc.", "industrycode": 2,
         "revenue": 750000, "address1_city": "Rio de Janeiro",
         "createdon": "2025-02-14T11:30:00Z"},
        {"accountid": "acc-003", "name": "Northwind Traders", "industrycode": 4,
         "revenue": 500000, "address1_city": "Curitiba",
         "createdon": "2025-03-01T08:15:00Z"},
        {"accountid": "acc-004", "name": "Adventure Works", "industrycode": 1,
         "revenue": 250000, "address1_city": "Sao Paulo",
         "createdon": "2025-03-20T16:45:00Z"},
    ],
    "contacts": [
        {"contactid": "cont-001", "firstname": "John", "lastname": "Doe",
         "emailaddress1": "john.doe@contoso.com", "_parentcustomerid_value": "acc-001",
         "createdon": "2025-01-11T10:00:00Z"},
        {"contactid": "cont-002", "firstname": "Jane", "lastname": "Smith",
         "emailaddress1": "jane.smith@fabrikam.com", "_parentcustomerid_value": "acc-002",
         "createdon": "2025-02-15T12:00:00Z"},
        {"contactid": "cont-003", "firstname": "Bob", "lastname": "Johnson",
         "emailaddress1": "bob.johnson@northwind.com", "_parentcustomerid_value": "acc-003",
         "createdon": "2025-03-02T09:30:00Z"},
    ],
    "incidents": [
        {"incidentid": "case-001", "title": "Problema de login", "statuscode": 1,
         "prioritycode": 1, "_customerid_value": "acc-001",
         "createdon": "2025-04-01T10:00:00Z"},
        {"incidentid": "case-002", "title": "Erro na fatura", "statuscode": 2,
         "prioritycode": 2, "_customerid_value": "acc-002",
         "createdon": "2025-04-02T14:30:00Z"},
        {"incidentid": "case-003", "title": "Solicitacao de suporte", "statuscode": 3,
         "prioritycode": 3, "_customerid_value": "acc-001",
         "createdon": "2025-04-03T09:15:00Z"},
    ],
}

SAMPLE_METADATA: dict[str, Record] = {
    "account": {
        "LogicalName": "account",
        "SchemaName": "Account",
        "DisplayName": _label("Conta"),
        "DisplayCollectionName": _label("Contas"),
        "Description": _label("Entidade de conta de negócios."),
        "EntitySetName": "accounts",
        "PrimaryIdAttribute": "accountid",
        "PrimaryNameAttribute": "name",
        "IsCustomEntity": False,
        "Attributes": [
            {"LogicalName": "accountid", "SchemaName": "AccountId",
             "AttributeType": "Uniqueidentifier", "DisplayName": _label("ID da Conta"),
             "IsPrimaryId": True, "RequiredLevel": {"Value": "SystemRequired"}},
            {"LogicalName": "name", "SchemaName": "Name", "AttributeType": "String",
             "DisplayName": _label("Nome"), "MaxLength": 100, "IsPrimaryName": True,
             "RequiredLevel": {"Value": "ApplicationRequired"}},
            {"LogicalName": "accountnumber", "SchemaName": "AccountNumber",
             "AttributeType": "String", "DisplayName": _label("Número da Conta"),
             "MaxLength": 20, "RequiredLevel": {"Value": "None"}},
            {"LogicalName": "industrycode", "SchemaName": "IndustryCode",
             "AttributeType": "Picklist", "DisplayName": _label("Setor"),
             "Description": _label("Setor de atuação da conta."),
             "OptionSet": {"Name": "account_industrycode", **_options(
                 (1, "Agricultura"), (2, "Manufatura"), (3, "Tecnologia"), (4, "Varejo"),
             )}},
            {"LogicalName": "revenue", "SchemaName": "Revenue", "AttributeType": "Money",
             "DisplayName": _label("Receita Anual"), "Precision": 2,
             "MinValue": 0, "MaxValue": 100000000000000},
            {"LogicalName": "address1_city", "SchemaName": "Address1_City",
             "AttributeType": "String", "DisplayName": _label("Cidade"), "MaxLength": 80},
            {"LogicalName": "createdon", "SchemaName": "CreatedOn",
             "AttributeType": "DateTime", "DisplayName": _label("Data de Criação")},
        ],
        "ManyToOneRelationships": [
            {"SchemaName": "business_unit_accounts", "ReferencedEntity": "businessunit",
             "ReferencingEntityNavigationPropertyName": "owningbusinessunit",
             "ReferencingAttribute": "owningbusinessunit"},
        ],
        "OneToManyRelationships": [
            {"SchemaName": "contact_customer_accounts", "ReferencingEntity": "contact",
             "ReferencedEntityNavigationPropertyName": "contact_customer_accounts"},
            {"SchemaName": "incident_customer_accounts", "ReferencingEntity": "incident",
             "ReferencedEntityNavigationPropertyName": "incident_customer_accounts"},
        ],
    },
    "contact": {
        "LogicalName": "contact",
        "SchemaName": "Contact",
        "DisplayName": _label("Contato"),
        "DisplayCollectionName": _label("Contatos"),
        "EntitySetName": "contacts",
        "PrimaryIdAttribute": "contactid",
        "PrimaryNameAttribute": "fullname",
        "IsCustomEntity": False,
        "Attributes": [
            {"LogicalName": "contactid", "SchemaName": "ContactId",
             "AttributeType": "Uniqueidentifier", "DisplayName": _label("ID do Contato"),
             "IsPrimaryId": True},
            {"LogicalName": "firstname", "SchemaName": "FirstName", "AttributeType": "String",
             "DisplayName": _label("Nome"), "MaxLength": 50},
            {"LogicalName": "lastname", "SchemaName": "LastName", "AttributeType": "String",
             "DisplayName": _label("Sobrenome"), "MaxLength": 50,
             "RequiredLevel": {"Value": "ApplicationRequired"}},
            {"LogicalName": "emailaddress1", "SchemaName": "EmailAddress1",
             "AttributeType": "String", "DisplayName": _label("E-mail"), "Format": "Email",
             "MaxLength": 100},
            {"LogicalName": "gendercode", "SchemaName": "GenderCode", "AttributeType": "Picklist",
             "DisplayName": _label("Gênero"),
             "OptionSet": {"Name": "contact_gendercode", **_options(
                 (1, "Masculino"), (2, "Feminino"), (3, "Não Especificado"),
             )}},
            {"LogicalName": "parentcustomerid", "SchemaName": "ParentCustomerId",
             "AttributeType": "Customer", "DisplayName": _label("Nome da Empresa"),
             "Targets": ["account", "contact"]},
        ],
        "ManyToOneRelationships": [
            {"SchemaName": "contact_customer_accounts", "ReferencedEntity": "account",
             "ReferencingEntityNavigationPropertyName": "parentcustomerid_account",
             "ReferencingAttribute": "parentcustomerid"},
        ],
    },
    "incident": {
        "LogicalName": "incident",
        "SchemaName": "Incident",
        "DisplayName": _label("Caso"),
        "DisplayCollectionName": _label("Casos"),
        "EntitySetName": "incidents",
        "PrimaryIdAttribute": "incidentid",
        "PrimaryNameAttribute": "title",
        "IsCustomEntity": False,
        "Attributes": [
            {"LogicalName": "incidentid", "SchemaName": "IncidentId",
             "AttributeType": "Uniqueidentifier", "DisplayName": _label("ID do Caso"),
             "IsPrimaryId": True},
            {"LogicalName": "title", "SchemaName": "Title", "AttributeType": "String",
             "DisplayName": _label("Título"), "MaxLength": 200, "IsPrimaryName": True,
             "RequiredLevel": {"Value": "ApplicationRequired"}},
            {"LogicalName": "description", "SchemaName": "Description", "AttributeType": "Memo",
             "DisplayName": _label("Descrição"), "MaxLength": 2000},
            {"LogicalName": "statuscode", "SchemaName": "StatusCode", "AttributeType": "Status",
             "DisplayName": _label("Status"),
             "OptionSet": {"Name": "incident_statuscode", **_options(
                 (1, "Ativo"), (2, "Em Andamento"), (3, "Resolvido"), (4, "Cancelado"),
             )}},
            {"LogicalName": "prioritycode", "SchemaName": "PriorityCode",
             "AttributeType": "Picklist", "DisplayName": _label("Prioridade"),
             "OptionSet": {"Name": "incident_prioritycode", **_options(
                 (1, "Alta"), (2, "Normal"), (3, "Baixa"),
             )}},
            {"LogicalName": "customerid", "SchemaName": "CustomerId", "AttributeType": "Customer",
             "DisplayName": _label("Cliente"), "Targets": ["account", "contact"],
             "RequiredLevel": {"Value": "SystemRequired"}},
        ],
        "ManyToOneRelationships": [
            {"SchemaName": "incident_customer_accounts", "ReferencedEntity": "account",
             "ReferencingEntityNavigationPropertyName": "customerid_account",
             "ReferencingAttribute": "customerid"},
        ],
    },
}

_ENTITY_LIST_KEYS = (
    "LogicalName", "DisplayName", "DisplayCollectionName", "Description",
    "PrimaryIdAttribute", "PrimaryNameAttribute", "IsCustomEntity", "EntitySetName",
)

_COMPARISON = re.compile(r"^(\w+)\s+(eq|ne|gt|lt|ge|le)\s+(.+)$")
_FUNCTION = re.compile(r"^(contains|startswith|endswith)\((\w+),\s*'(.*)'\)$")


class InMemoryConnector:
    """In-process stand-in for the Dynamics Web API."""

    def __init__(
        self,
        records: Optional[dict[str, list[Record]]] = None,
        metadata: Optional[dict[str, Record]] = None,
    ) -> None:
        self.records = copy.deepcopy(records if records is not None else SAMPLE_RECORDS)
        self.metadata = copy.deepcopy(metadata if metadata is not None else SAMPLE_METADATA)
        self.calls: list[tuple[str, dict[str, Any]]] = []
        self.failure: Optional[Exception] = None

    def _record_call(self, name: str, **kwargs: Any) -> None:
        self.calls.append((name, kwargs))
        if self.failure is not None:
            raise self.failure

    def calls_to(self, name: str) -> list[dict[str, Any]]:
        return [kwargs for call, kwargs in self.calls if call == name]

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
        self._record_call(
            "query_entities", entity=entity, select=select, filter=filter,
            order_by=order_by, top=top, expand=expand,
        )
        if entity == "EntityDefinitions":
            rows = [
                {k: doc[k] for k in _ENTITY_LIST_KEYS if k in doc}
                for doc in self.metadata.values()
            ]
        else:
            rows = [r for r in self.records.get(entity, []) if _matches(r, filter)]

        if order_by:
            field, _, direction = order_by.partition(" ")
            rows.sort(
                key=lambda r: str(r.get(field, "")),
                reverse=direction.strip().lower() == "desc",
            )
        if top:
            rows = rows[:top]
        if select:
            rows = [{k: r[k] for k in select if k in r} for r in rows]
        return copy.deepcopy(rows)

    def create_entity(self, entity: str, data: Record) -> Record:
        self._record_call("create_entity", entity=entity, data=data)
        record = {
            "id": f"{entity[:4]}-{uuid.uuid4().hex[:8]}",
            **data,
            "createdon": datetime.now(timezone.utc).isoformat(),
        }
        self.records.setdefault(entity, []).append(record)
        return copy.deepcopy(record)

    def update_entity(self, entity: str, entity_id: str, data: Record) -> None:
        self._record_call("update_entity", entity=entity, entity_id=entity_id, data=data)
        for record in self.records.get(entity, []):
            if entity_id in (record.get("id"), *record.values()):
                record.update(data)
                return
        raise ConnectorError(f"{entity}({entity_id}) does not exist", status_code=404)

    def delete_entity(self, entity: str, entity_id: str) -> None:
        self._record_call("delete_entity", entity=entity, entity_id=entity_id)
        rows = self.records.get(entity, [])
        for index, record in enumerate(rows):
            if entity_id in (record.get("id"), *record.values()):
                del rows[index]
                return
        raise ConnectorError(f"{entity}({entity_id}) does not exist", status_code=404)

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
        self._record_call(
            "get_entity_metadata", logical_name=logical_name,
            include_attributes=include_attributes, include_option_sets=include_option_sets,
        )
        document = self.metadata.get(logical_name)
        if document is None:
            return None
        document = copy.deepcopy(document)
        if not include_attributes:
            document.pop("Attributes", None)
        elif not include_option_sets:
            for attribute in document.get("Attributes", []):
                attribute.pop("OptionSet", None)
        return document

    def get_attribute_metadata(
        self,
        logical_name: str,
        attribute: str,
        *,
        include_option_sets: bool = False,
        select_attribute_properties: Optional[Sequence[str]] = None,
    ) -> Optional[Record]:
        self._record_call(
            "get_attribute_metadata", logical_name=logical_name, attribute=attribute,
            include_option_sets=include_option_sets,
        )
        document = self.metadata.get(logical_name)
        if document is None:
            return None
        for candidate in document.get("Attributes", []):
            if candidate["LogicalName"] == attribute:
                found = copy.deepcopy(candidate)
                if not include_option_sets:
                    found.pop("OptionSet", None)
                return found
        return None


def _literal(raw: str) -> Any:
    raw = raw.strip()
    if len(raw) >= 2 and raw[0] == raw[-1] == "'":
        return raw[1:-1].replace("''", "'")
    if raw in ("true", "false"):
        return raw == "true"
    try:
        return float(raw) if "." in raw else int(raw)
    except ValueError:
        return raw


def _compare(actual: Any, op: str, expected: Any) -> bool:
    if actual is None:
        return op == "ne"
    if isinstance(actual, (int, float)) and not isinstance(actual, bool):
        try:
            expected = float(expected)
        except (TypeError, ValueError):
            return op == "ne"
    else:
        actual, expected = str(actual), str(expected)
    if op == "eq":
        return actual == expected
    if op == "ne":
        return actual != expected
    if op == "gt":
        return actual > expected
    if op == "lt":
        return actual < expected
    if op == "ge":
        return actual >= expected
    return actual <= expected


def _matches(record: Record, odata_filter: Optional[str]) -> bool:
    if not odata_filter:
        return True
    for clause in odata_filter.split(" and "):
        clause = clause.strip()
        function = _FUNCTION.match(clause)
        if function:
            name, field, needle = function.groups()
            value = str(record.get(field, "")).lower()
            needle = needle.replace("''", "'").lower()
            if name == "contains" and needle not in value:
                return False
            if name == "startswith" and not value.startswith(needle):
                return False
            if name == "endswith" and not value.endswith(needle):
                return False
            continue
        comparison = _COMPARISON.match(clause)
        if comparison:
            field, op, raw = comparison.groups()
            if not _compare(record.get(field), op, _literal(raw)):
                return False
            continue
        logger.debug("In-memory connector ignoring unsupported clause: %s", clause)
    return True

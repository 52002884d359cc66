"""Tests for the Web API connector, against a scripted requests session."""

import json

import pytest
import requests

from dynamics_assistant.config import DynamicsConfig
from dynamics_assistant.connector.dynamics_client import DynamicsClient
from dynamics_assistant.errors import ConnectorError
from dynamics_assistant.metadata.cache import EntityDetailsOptions, MetadataCache

ORG_URL = "https://contoso.crm.dynamics.com/"


class FakeResponse:
    def __init__(self, status_code=200, body=None, headers=None):
        self.status_code = status_code
        self._body = body
        self.headers = headers or {}
        self.content = json.dumps(body).encode() if body is not None else b""
        self.text = self.content.decode()

    def json(self):
        if self._body is None:
            raise ValueError("no body")
        return self._body


class FakeSession:
    """Returns queued responses and records every request."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.requests = []
        self.closed = False

    def request(self, method, url, **kwargs):
        self.requests.append({"method": method, "url": url, **kwargs})
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    def close(self):
        self.closed = True


def _client(*responses):
    session = FakeSession(*responses)
    config = DynamicsConfig(url=ORG_URL, api_version="9.2", access_token="tok", request_timeout_sec=5)
    return DynamicsClient(config, session=session), session


class TestConstruction:
    def test_api_url(self):
        client, _ = _client()
        assert client.api_url == "https://contoso.crm.dynamics.com/api/data/v9.2"

    def test_requires_url(self):
        with pytest.raises(ValueError, match="DYNAMICS_URL"):
            DynamicsClient(DynamicsConfig(url="", access_token="tok"), session=FakeSession())

    def test_close(self):
        client, session = _client()
        client.close()
        assert session.closed


class TestRecords:
    def test_query_builds_odata_params(self):
        client, session = _client(FakeResponse(body={"value": [{"name": "Contoso"}]}))
        rows = client.query_entities(
            "accounts", select=["name", "accountid"], filter="name eq 'Contoso'",
            order_by="name asc", top=5, expand=["primarycontactid"],
        )
        assert rows == [{"name": "Contoso"}]
        sent = session.requests[0]
        assert sent["method"] == "GET"
        assert sent["url"].endswith("/api/data/v9.2/accounts")
        assert sent["params"] == {
            "$select": "name,accountid",
            "$filter": "name eq 'Contoso'",
            "$orderby": "name asc",
            "$top": 5,
            "$expand": "primarycontactid",
        }
        assert sent["timeout"] == 5

    def test_headers(self):
        client, session = _client(FakeResponse(body={"value": []}))
        client.query_entities("accounts")
        headers = session.requests[0]["headers"]
        assert headers["Authorization"] == "Bearer tok"
        assert headers["OData-Version"] == "4.0"
        assert session.requests[0]["params"] == {}

    def test_http_error_carries_remote_message(self):
        body = {"error": {"code": "0x80060888", "message": "Could not find a property named 'nome'"}}
        client, _ = _client(FakeResponse(status_code=400, body=body))
        with pytest.raises(ConnectorError, match="property named 'nome'") as info:
            client.query_entities("accounts", filter="nome eq 'x'")
        assert info.value.status_code == 400

    def test_network_error(self):
        client, _ = _client(requests.ConnectionError("connection refused"))
        with pytest.raises(ConnectorError, match="connection refused"):
            client.query_entities("accounts")

    def test_create_with_204(self):
        uri = "https://contoso.crm.dynamics.com/api/data/v9.2/accounts(abc)"
        client, session = _client(FakeResponse(status_code=204, headers={"OData-EntityId": uri}))
        created = client.create_entity("accounts", {"name": "Nova"})
        assert created == {"OData-EntityId": uri}
        assert session.requests[0]["json"] == {"name": "Nova"}

    def test_update_and_delete_paths(self):
        client, session = _client(FakeResponse(status_code=204), FakeResponse(status_code=204))
        client.update_entity("contacts", "cont-001", {"firstname": "Ana"})
        client.delete_entity("contacts", "cont-001")
        assert [r["method"] for r in session.requests] == ["PATCH", "DELETE"]
        assert session.requests[0]["url"].endswith("/contacts(cont-001)")


class TestMetadata:
    def test_entity_metadata_expand_clause(self):
        client, session = _client(FakeResponse(body={"LogicalName": "account"}))
        client.get_entity_metadata("account", include_option_sets=True)
        params = session.requests[0]["params"]
        assert session.requests[0]["url"].endswith("EntityDefinitions(LogicalName='account')")
        assert params["$expand"].startswith("Attributes($select=LogicalName,")
        assert "PicklistAttributeMetadata/OptionSet($select=Options,Name,DisplayName)" in params["$expand"]

    def test_entity_metadata_without_attributes(self):
        client, session = _client(FakeResponse(body={"LogicalName": "account"}))
        client.get_entity_metadata("account", include_attributes=False)
        assert "$expand" not in session.requests[0]["params"]

    def test_entity_metadata_fetched_each_call(self):
        client, session = _client(
            FakeResponse(body={"LogicalName": "account", "SchemaName": "Account"}),
            FakeResponse(body={"LogicalName": "account", "SchemaName": "AccountV2"}),
        )
        first = client.get_entity_metadata("account")
        second = client.get_entity_metadata("account")
        assert first["SchemaName"] == "Account"
        assert second["SchemaName"] == "AccountV2"
        assert len(session.requests) == 2

    def test_attribute_metadata_fetched_each_call(self):
        typed = {"AttributeType": "String", "LogicalName": "name"}
        client, session = _client(
            FakeResponse(body=typed), FakeResponse(body={"LogicalName": "name", "MaxLength": 100}),
            FakeResponse(body=typed), FakeResponse(body={"LogicalName": "name", "MaxLength": 160}),
        )
        assert client.get_attribute_metadata("account", "name")["MaxLength"] == 100
        assert client.get_attribute_metadata("account", "name")["MaxLength"] == 160
        assert len(session.requests) == 4

    def test_missing_entity_returns_none(self):
        client, _ = _client(FakeResponse(status_code=404, body={"error": {"message": "nope"}}))
        assert client.get_entity_metadata("planeta") is None

    def test_attribute_metadata_uses_typed_cast(self):
        client, session = _client(
            FakeResponse(body={"AttributeType": "Picklist", "LogicalName": "industrycode"}),
            FakeResponse(body={"LogicalName": "industrycode", "OptionSet": {"Options": []}}),
        )
        document = client.get_attribute_metadata("account", "industrycode", include_option_sets=True)
        assert document["LogicalName"] == "industrycode"
        second = session.requests[1]
        assert second["url"].endswith("/Microsoft.Dynamics.CRM.PicklistAttributeMetadata")
        assert second["params"]["$expand"] == "OptionSet($select=Options,Name,DisplayName)"

    def test_attribute_without_type(self):
        client, _ = _client(FakeResponse(body={"LogicalName": "x"}))
        with pytest.raises(ConnectorError, match="type of attribute"):
            client.get_attribute_metadata("account", "x")

    def test_missing_attribute(self):
        client, _ = _client(FakeResponse(status_code=404, body={}))
        assert client.get_attribute_metadata("account", "missing") is None


def _account_document(*attributes):
    return {
        "LogicalName": "account",
        "EntitySetName": "accounts",
        "PrimaryIdAttribute": "accountid",
        "Attributes": [
            {"LogicalName": name, "AttributeType": "String"} for name in attributes
        ],
    }


class TestMetadataCacheOverClient:
    def test_refresh_reaches_the_organization(self, cache_config, clock):
        client, session = _client(
            FakeResponse(body=_account_document("name")),
            FakeResponse(body=_account_document("name", "telephone1")),
        )
        cache = MetadataCache(client, cache_config, clock=clock)
        assert len(cache.get_entity_details("account").attributes) == 1
        refreshed = cache.get_entity_details("account", EntityDetailsOptions(refresh=True))
        assert len(refreshed.attributes) == 2
        assert len(session.requests) == 2

    def test_expired_ttl_reaches_the_organization(self, cache_config, clock):
        client, session = _client(
            FakeResponse(body=_account_document("name")),
            FakeResponse(body=_account_document("name", "telephone1")),
        )
        cache = MetadataCache(client, cache_config, clock=clock)
        cache.get_entity_details("account")
        clock.advance(7200)
        assert len(cache.get_entity_details("account").attributes) == 2
        assert len(session.requests) == 2

    def test_fresh_entry_served_from_cache(self, cache_config, clock):
        client, session = _client(FakeResponse(body=_account_document("name")))
        cache = MetadataCache(client, cache_config, clock=clock)
        cache.get_entity_details("account")
        clock.advance(60)
        cache.get_entity_details("account")
        assert len(session.requests) == 1

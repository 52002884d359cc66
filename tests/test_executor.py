"""Tests for the query executor."""

import pytest

from dynamics_assistant.errors import ConnectorError
from dynamics_assistant.schemas.query_schema import QueryOptions


class TestListRecords:
    def test_options_forwarded(self, executor, connector):
        rows = executor.list_records(
            "accounts",
            QueryOptions(
                filter="address1_city eq 'Curitiba'", select=["name"],
                order_by="name asc", top=5,
            ),
        )
        assert rows == [{"name": "Northwind Traders"}]
        call = connector.calls_to("query_entities")[-1]
        assert call["filter"] == "address1_city eq 'Curitiba'"
        assert call["select"] == ["name"]
        assert call["order_by"] == "name asc"
        assert call["top"] == 5

    def test_no_options(self, executor, connector):
        assert len(executor.list_records("contacts")) == 3
        call = connector.calls_to("query_entities")[-1]
        assert call["filter"] is None
        assert call["select"] is None

    def test_empty_filter_not_sent(self, executor, connector):
        executor.list_records("contacts", QueryOptions(filter="", select=[]))
        call = connector.calls_to("query_entities")[-1]
        assert call["filter"] is None
        assert call["select"] is None

    def test_failure_wrapped(self, executor, connector):
        connector.failure = ConnectorError("boom", status_code=503)
        with pytest.raises(ConnectorError, match="Failed to list accounts: boom") as info:
            executor.list_records("accounts")
        assert info.value.status_code == 503


class TestGetAndCount:
    def test_get_fetches_one(self, executor, connector):
        record = executor.get_record("accounts", "accountid eq acc-002")
        assert record["name"] == "Fabrikam Inc."
        assert connector.calls_to("query_entities")[-1]["top"] == 1

    def test_get_missing(self, executor):
        assert executor.get_record("accounts", "accountid eq nope") is None

    def test_count_is_capped_single_column_fetch(self, executor, connector, query_config):
        assert executor.count_records("incidents") == 3
        call = connector.calls_to("query_entities")[-1]
        assert call["select"] == [query_config.count_select_field]
        assert call["top"] == query_config.count_cap

"""Tests for the shorthand command grammar and its service."""

from dynamics_assistant.errors import ConnectorError
from dynamics_assistant.query.shorthand import FORMAT_HELP, parse_command


class TestParseCommand:
    def test_get_with_id(self):
        parsed = parse_command("account:get 123")
        assert parsed.entity == "accounts"
        assert parsed.action == "get"
        assert parsed.params == {"id": "123"}

    def test_update_with_field(self):
        parsed = parse_command("contact:update 456 firstname=João")
        assert parsed.entity == "contacts"
        assert parsed.action == "update"
        assert parsed.params == {"id": "456", "firstname": "João"}

    def test_missing_colon(self):
        parsed = parse_command("bad-command")
        assert parsed.entity is None
        assert parsed.action is None

    def test_too_many_colons(self):
        assert parse_command("a:b:c").entity is None

    def test_empty(self):
        assert parse_command("   ").action is None

    def test_value_coercion(self):
        parsed = parse_command("x:y a=true b=false c=10 d=2.5 e=texto")
        assert parsed.entity == "x"
        assert parsed.params == {"a": True, "b": False, "c": 10, "d": 2.5, "e": "texto"}
        assert parsed.params["a"] is True

    def test_digit_separator_not_numeric(self):
        parsed = parse_command("opportunity:list estimatedvalue=1_000")
        assert parsed.params == {"estimatedvalue": "1_000"}

    def test_first_bare_token_is_id(self):
        parsed = parse_command("account:get first second")
        assert parsed.params == {"id": "first"}

    def test_value_split_on_first_equals(self):
        parsed = parse_command("account:list name=a=b")
        assert parsed.params == {"name": "a=b"}

    def test_synonym_entity(self):
        assert parse_command("contas:list").entity == "accounts"


class TestShorthandList:
    def test_wildcard_filter(self, shorthand, connector):
        result = shorthand.process("contact:list lastname=Smi* top=10")
        assert result.success
        assert result.count == 1
        assert result.results[0]["lastname"] == "Smith"
        assert result.filter == "startswith(lastname, 'Smi')"
        assert result.top == 10
        call = connector.calls_to("query_entities")[-1]
        assert call["entity"] == "contacts"
        assert call["top"] == 10

    def test_defaults(self, shorthand):
        result = shorthand.process("account:list")
        assert result.success
        assert result.count == 4
        assert result.top == 50
        assert result.order_by == "createdon desc"
        assert result.filter == ""

    def test_contains_filter(self, shorthand):
        result = shorthand.process("account:list address1_city=*Paulo*")
        assert {r["accountid"] for r in result.results} == {"acc-001", "acc-004"}

    def test_select_and_order(self, shorthand):
        result = shorthand.process("account:ls select=name,accountid orderBy=name limit=2")
        assert result.select == ["name", "accountid"]
        assert result.order_by == "name"
        assert [r["name"] for r in result.results] == ["Adventure Works", "Contoso Ltd."]
        assert set(result.results[0]) == {"name", "accountid"}

    def test_invalid_top(self, shorthand):
        result = shorthand.process("account:list top=muitos")
        assert not result.success
        assert "top/limit" in result.message


class TestShorthandGet:
    def test_found(self, shorthand):
        result = shorthand.process("account:get acc-001")
        assert result.success
        assert result.result["name"] == "Contoso Ltd."
        assert result.filter == "accountid eq acc-001"
        assert result.id == "acc-001"

    def test_not_found(self, shorthand):
        result = shorthand.process("account:get acc-999")
        assert not result.success
        assert result.message == "Nenhum registro encontrado com ID acc-999."

    def test_missing_id(self, shorthand):
        result = shorthand.process("account:get")
        assert not result.success
        assert "ID" in result.message


class TestShorthandWrites:
    def test_create(self, shorthand, connector):
        result = shorthand.process("contact:create firstname=Ana lastname=Silva")
        assert result.success
        assert result.data == {"firstname": "Ana", "lastname": "Silva"}
        assert len(connector.records["contacts"]) == 4

    def test_create_without_fields(self, shorthand):
        result = shorthand.process("contact:create")
        assert not result.success

    def test_update(self, shorthand, connector):
        result = shorthand.process("contact:update cont-001 firstname=Johnny")
        assert result.success
        assert result.id == "cont-001"
        assert connector.records["contacts"][0]["firstname"] == "Johnny"

    def test_update_without_fields(self, shorthand):
        result = shorthand.process("contact:update cont-001")
        assert not result.success

    def test_delete(self, shorthand, connector):
        result = shorthand.process("incident:rm case-002")
        assert result.success
        assert result.action == "delete"
        assert [r["incidentid"] for r in connector.records["incidents"]] == ["case-001", "case-003"]

    def test_delete_missing_record(self, shorthand):
        result = shorthand.process("incident:delete case-999")
        assert not result.success
        assert result.message.startswith("Erro ao processar comando:")


class TestShorthandCountAndFields:
    def test_count(self, shorthand):
        result = shorthand.process("account:count address1_city=Curitiba")
        assert result.success
        assert result.count == 1

    def test_count_all(self, shorthand):
        assert shorthand.process("incident:count").count == 3

    def test_fields(self, shorthand):
        result = shorthand.process("contact:fields")
        assert result.success
        assert result.entity_display_name == "Contato"
        assert result.primary_key == "contactid"
        names = [f.name for f in result.fields]
        assert "emailaddress1" in names
        gender = next(f for f in result.fields if f.name == "gendercode")
        assert len(gender.option_set.options) == 3

    def test_describe_entity(self, shorthand):
        assert shorthand.describe_entity("contas").primary_key == "accountid"

    def test_describe_unknown_entity(self, shorthand):
        result = shorthand.describe_entity("planeta")
        assert not result.success
        assert "planeta" in result.message


class TestShorthandErrors:
    def test_bad_format(self, shorthand):
        result = shorthand.process("bad-command")
        assert not result.success
        assert result.message == FORMAT_HELP

    def test_unknown_action(self, shorthand):
        result = shorthand.process("account:explode")
        assert not result.success
        assert "explode" in result.message

    def test_connector_failure(self, shorthand, connector):
        connector.failure = ConnectorError("service unavailable", status_code=503)
        result = shorthand.process("account:list")
        assert not result.success
        assert "service unavailable" in result.message

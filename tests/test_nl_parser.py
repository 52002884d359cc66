"""Tests for the Portuguese natural-language query parser and service."""

from dynamics_assistant.errors import ConnectorError
from dynamics_assistant.query.nl_parser import NO_ENTITY_MESSAGE


class TestNaturalLanguageParser:
    def test_unmatched_trailing_tokens(self, nl_parser):
        parsed = nl_parser.parse("listar contas em São Paulo")
        assert parsed.entity == "accounts"
        assert parsed.action == "list"
        assert parsed.filters == {}

    def test_limit_consumes_both_tokens(self, nl_parser):
        parsed = nl_parser.parse("listar casos top 5")
        assert parsed.entity == "incidents"
        assert parsed.limit == 5
        assert parsed.filters == {}

    def test_limit_word_without_number(self, nl_parser):
        parsed = nl_parser.parse("listar casos limite muitos")
        assert parsed.limit is None

    def test_action_defaults_to_list(self, nl_parser):
        assert nl_parser.parse("contatos").action == "list"

    def test_count_word(self, nl_parser):
        parsed = nl_parser.parse("quantos casos")
        assert parsed.action == "count"
        assert parsed.entity == "incidents"

    def test_filter_keeps_original_spelling(self, nl_parser):
        parsed = nl_parser.parse("mostrar contatos nome igual João")
        entry = parsed.filters["nome"]
        assert entry.operator == "eq"
        assert entry.value == "João"

    def test_multi_word_operator(self, nl_parser):
        parsed = nl_parser.parse("listar contas receita maior ou igual a 500000")
        entry = parsed.filters["receita"]
        assert entry.operator == "ge"
        assert entry.value == "500000"

    def test_trailing_two_word_operator_falls_back(self, nl_parser):
        parsed = nl_parser.parse("listar contas receita maior igual")
        entry = parsed.filters["receita"]
        assert entry.operator == "gt"
        assert entry.value == "igual"

    def test_operator_without_value(self, nl_parser):
        assert nl_parser.parse("listar contas receita maior").filters == {}

    def test_function_operator(self, nl_parser):
        parsed = nl_parser.parse("buscar contas nome começa com Contoso")
        assert parsed.filters["nome"].operator == "startswith"
        assert parsed.filters["nome"].value == "Contoso"

    def test_quoted_value(self, nl_parser):
        parsed = nl_parser.parse("listar contas nome contém 'Works'")
        assert parsed.filters["nome"].value == "Works"

    def test_fields_clause(self, nl_parser):
        parsed = nl_parser.parse("listar contas campos nome, cidade")
        assert parsed.fields == ["nome", "cidade"]

    def test_first_entity_wins(self, nl_parser):
        parsed = nl_parser.parse("listar contatos contas")
        assert parsed.entity == "contacts"

    def test_no_entity(self, nl_parser):
        parsed = nl_parser.parse("mostrar tudo agora")
        assert parsed.entity is None

    def test_diagnostics_off_by_default(self, nl_parser):
        assert nl_parser.parse("listar casos top 5").diagnostics is None

    def test_diagnostics_trace(self, nl_parser):
        parsed = nl_parser.parse("listar casos top 5 agora", diagnostics=True)
        rules = [(t.rule, t.tokens) for t in parsed.diagnostics]
        assert rules == [
            ("action", ["listar"]),
            ("entity", ["casos"]),
            ("limit", ["top", "5"]),
            ("skip", ["agora"]),
        ]


class TestNLQueryService:
    def test_list_with_filter(self, nl_service):
        result = nl_service.process("listar contas cidade igual Curitiba")
        assert result.success
        assert result.filter == "address1_city eq 'Curitiba'"
        assert [r["accountid"] for r in result.results] == ["acc-003"]

    def test_list_defaults(self, nl_service):
        result = nl_service.process("listar contas")
        assert result.count == 4
        assert result.top == 50
        assert result.order_by == "createdon desc"

    def test_list_with_limit(self, nl_service):
        result = nl_service.process("mostrar contas top 2")
        assert result.count == 2
        assert result.top == 2

    def test_list_with_numeric_comparison(self, nl_service):
        result = nl_service.process("listar contas receita maior ou igual a 500000")
        assert {r["accountid"] for r in result.results} == {"acc-001", "acc-002", "acc-003"}

    def test_fields_translated(self, nl_service):
        result = nl_service.process("listar contas campos nome, cidade")
        assert result.select == ["name", "address1_city"]
        assert set(result.results[0]) == {"name", "address1_city"}

    def test_get_with_filter(self, nl_service):
        result = nl_service.process("obter contatos sobrenome igual Doe")
        assert result.success
        assert result.result["contactid"] == "cont-001"

    def test_get_without_filters(self, nl_service):
        result = nl_service.process("obter contas")
        assert not result.success
        assert "filtro" in result.message

    def test_get_no_match(self, nl_service):
        result = nl_service.process("obter contatos sobrenome igual Nobody")
        assert not result.success
        assert result.message == "Nenhum registro encontrado com os filtros especificados."

    def test_count(self, nl_service):
        result = nl_service.process("quantas contas cidade igual Curitiba")
        assert result.success
        assert result.action == "count"
        assert result.count == 1

    def test_create_not_supported(self, nl_service, connector):
        result = nl_service.process("criar conta nome igual Nova")
        assert not result.success
        assert "não é suportada" in result.message
        assert connector.calls_to("create_entity") == []

    def test_no_entity(self, nl_service):
        result = nl_service.process("mostrar tudo")
        assert not result.success
        assert result.message == NO_ENTITY_MESSAGE

    def test_connector_failure(self, nl_service, connector):
        connector.failure = ConnectorError("timeout")
        result = nl_service.process("listar contas")
        assert not result.success
        assert result.message.startswith("Erro ao processar consulta:")

"""Tests for the synonym, action, field and operator tables."""

import pytest

from dynamics_assistant.lexicon.actions import (
    SHORTHAND_ACTION_NAMES,
    resolve_assistant_action,
    resolve_shorthand_action,
)
from dynamics_assistant.lexicon.entities import (
    COLLECTION_SYNONYMS,
    LOGICAL_NAME_SYNONYMS,
    id_field_for,
    normalize_collection,
    resolve_collection,
    singularize,
)
from dynamics_assistant.lexicon.fields import translate_field, translate_fields
from dynamics_assistant.lexicon.operators import match_operator
from dynamics_assistant.lexicon.stopwords import STOP_WORDS
from dynamics_assistant.utils import normalize_text


class TestEntitySynonyms:
    def test_portuguese_plural(self):
        assert resolve_collection("contas") == "accounts"

    def test_accented_input(self):
        assert resolve_collection("Reuniões") == "appointments"

    def test_case_maps_to_incidents(self):
        assert resolve_collection("cases") == "incidents"
        assert resolve_collection("caso") == "incidents"

    def test_unknown_word(self):
        assert resolve_collection("planetas") is None

    def test_normalize_collection_passes_unknown_through(self):
        assert normalize_collection("Cr123_Widgets") == "cr123_widgets"

    def test_collection_values_are_fixed_points(self):
        for collection in set(COLLECTION_SYNONYMS.values()):
            assert normalize_collection(collection) == collection

    def test_logical_names_are_fixed_points(self):
        for logical in set(LOGICAL_NAME_SYNONYMS.values()):
            assert LOGICAL_NAME_SYNONYMS[logical] == logical

    def test_keys_are_normalized(self):
        for key in list(COLLECTION_SYNONYMS) + list(LOGICAL_NAME_SYNONYMS):
            assert key == normalize_text(key)


class TestIdField:
    @pytest.mark.parametrize("collection, expected", [
        ("accounts", "accountid"),
        ("contacts", "contactid"),
        ("incidents", "incidentid"),
        ("opportunities", "opportunityid"),
        ("tasks", "activityid"),
        ("cr123_widgets", "cr123_widgetid"),
    ])
    def test_id_field(self, collection, expected):
        assert id_field_for(collection) == expected

    def test_singularize_ies(self):
        assert singularize("opportunities") == "opportunity"

    def test_singularize_without_s(self):
        assert singularize("equipment") == "equipment"


class TestActions:
    def test_shorthand_aliases(self):
        assert resolve_shorthand_action("ls") == "list"
        assert resolve_shorthand_action("rm") == "delete"
        assert resolve_shorthand_action("schema") == "fields"

    def test_shorthand_unknown(self):
        assert resolve_shorthand_action("explode") is None

    def test_every_canonical_action_resolves_to_itself(self):
        for action in SHORTHAND_ACTION_NAMES:
            assert resolve_shorthand_action(action) == action

    def test_assistant_menu_numbers(self):
        assert resolve_assistant_action("1") == "list"
        assert resolve_assistant_action("2") == "get"
        assert resolve_assistant_action(" 3 ") == "count"

    def test_assistant_words(self):
        assert resolve_assistant_action("Listar") == "list"
        assert resolve_assistant_action("contar") == "count"


class TestFields:
    def test_account_name(self):
        assert translate_field("accounts", "nome") == "name"

    def test_contact_name(self):
        assert translate_field("contacts", "nome") == "firstname"

    def test_accented_token(self):
        assert translate_field("incidents", "Título") == "title"

    def test_unmapped_passes_through(self):
        assert translate_field("accounts", "new_customfield") == "new_customfield"

    def test_unknown_entity_passes_through(self):
        assert translate_field("cr123_widgets", "nome") == "nome"

    def test_translate_list_drops_blanks(self):
        assert translate_fields("accounts", ["nome", " ", "cidade "]) == ["name", "address1_city"]


class TestOperators:
    def test_single_word(self):
        assert match_operator(["nome", "contem", "x"], 1) == ("contains", 1)

    def test_longest_phrase_wins(self):
        assert match_operator(["receita", "maior", "igual", "10"], 1) == ("ge", 2)

    def test_symbol(self):
        assert match_operator(["receita", ">=", "10"], 1) == ("ge", 1)

    def test_date_words(self):
        assert match_operator(["criado", "apos", "2025-01-01"], 1) == ("gt", 1)
        assert match_operator(["criado", "antes", "2025-01-01"], 1) == ("lt", 1)

    def test_no_match(self):
        assert match_operator(["nome", "joao"], 1) is None

    def test_past_end(self):
        assert match_operator(["nome"], 1) is None

    def test_end_reserves_value_token(self):
        tokens = ["valor", "maior", "igual"]
        assert match_operator(tokens, 1) == ("ge", 2)
        assert match_operator(tokens, 1, len(tokens) - 1) == ("gt", 1)

    def test_end_leaves_no_room(self):
        assert match_operator(["valor", "maior"], 1, 1) is None

    def test_connectors_are_stop_words(self):
        # "maior ou igual a" reduces to ("maior", "igual") after stop-word removal
        assert {"ou", "a", "que", "com", "de"} <= STOP_WORDS

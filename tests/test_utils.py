"""Tests for shared utility functions."""

from dynamics_assistant.utils import coerce_value, normalize_text, parse_positive_int, strip_quotes


class TestNormalizeText:
    def test_strips_accents(self):
        assert normalize_text("São Paulo") == "sao paulo"

    def test_lowercases(self):
        assert normalize_text("CONTAS") == "contas"

    def test_cedilla(self):
        assert normalize_text("começa") == "comeca"

    def test_idempotent(self):
        once = normalize_text("Descrição")
        assert normalize_text(once) == once


class TestCoerceValue:
    def test_true(self):
        assert coerce_value("true") is True

    def test_false(self):
        assert coerce_value("false") is False

    def test_integer(self):
        value = coerce_value("10")
        assert value == 10 and isinstance(value, int)

    def test_float(self):
        assert coerce_value("2.5") == 2.5

    def test_plain_string(self):
        assert coerce_value("João") == "João"

    def test_wildcard_string_untouched(self):
        assert coerce_value("*Microsoft*") == "*Microsoft*"

    def test_empty_string_untouched(self):
        assert coerce_value("") == ""

    def test_nan_stays_string(self):
        assert coerce_value("nan") == "nan"

    def test_digit_separator_stays_string(self):
        assert coerce_value("1_000") == "1_000"
        assert coerce_value("1_000.5") == "1_000.5"

    def test_non_ascii_digits_stay_string(self):
        assert coerce_value("\u0661\u0662") == "\u0661\u0662"


class TestParsePositiveInt:
    def test_plain_number(self):
        assert parse_positive_int("5") == 5

    def test_leading_digits(self):
        assert parse_positive_int("10 registros") == 10

    def test_zero_rejected(self):
        assert parse_positive_int("0") is None

    def test_negative_rejected(self):
        assert parse_positive_int("-3") is None

    def test_text_rejected(self):
        assert parse_positive_int("muitos") is None


class TestStripQuotes:
    def test_double_quotes(self):
        assert strip_quotes('"Contoso"') == "Contoso"

    def test_single_quotes(self):
        assert strip_quotes("'Contoso'") == "Contoso"

    def test_mismatched_quotes_kept(self):
        assert strip_quotes("'Contoso\"") == "'Contoso\""

    def test_unquoted(self):
        assert strip_quotes("Contoso") == "Contoso"

"""Tests for the multi-value field encodings."""

import pytest

from clinicpad.codec import clean_legacy_entry, decode_csv, decode_json, encode_csv, encode_json


class TestCommaJoined:
    """Tests for the comma-joined encoding used on visits."""

    def test_encode_trims_and_drops_empties(self):
        assert encode_csv([" Aspirin ", "", "  ", "Ibuprofen"]) == "Aspirin, Ibuprofen"

    def test_encode_empty(self):
        assert encode_csv([]) == ""
        assert encode_csv(None) == ""

    def test_decode(self):
        assert decode_csv("Aspirin, Ibuprofen ,, ") == ["Aspirin", "Ibuprofen"]

    def test_decode_empty(self):
        assert decode_csv(None) == []
        assert decode_csv("") == []

    def test_round_trip(self):
        values = ["A09 - Diarrhoea", "I10 - Essential (primary) hypertension", "R51 - Headache"]
        assert decode_csv(encode_csv(values)) == values

    def test_commas_inside_values_are_lost(self):
        values = ["Influenza, virus not identified"]
        assert decode_csv(encode_csv(values)) == ["Influenza", "virus not identified"]


class TestJsonArray:
    """Tests for the JSON encoding used on patient history."""

    def test_encode(self):
        assert encode_json(["Penicillin", "Latex"]) == '["Penicillin", "Latex"]'

    def test_round_trip_preserves_order(self):
        values = ["Zeta", "Alpha", "Mu", "Alpha"]
        assert decode_json(encode_json(values)) == values

    @pytest.mark.parametrize("text", [None, "", "not json", "{broken", '{"a": 1}', "42"])
    def test_bad_input_gives_empty_list(self, text):
        assert decode_json(text) == []

    def test_non_string_members_are_stringified(self):
        assert decode_json('["a", 1, null]') == ["a", "1"]


class TestCleanLegacyEntry:
    """Tests for display cleanup of older stored values."""

    def test_strips_brackets_and_quotes(self):
        assert clean_legacy_entry('["J45 - Asthma"]') == "J45 - Asthma"

    def test_blank(self):
        assert clean_legacy_entry(None) == ""
        assert clean_legacy_entry(' [ ] ') == ""

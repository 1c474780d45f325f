"""Unit tests for the symbolic-expression decoder and encoder."""

import pytest
from sexpdata import Symbol

from mup.adapters.sexp import decode, encode, hashify
from mup.domain.exceptions import ProtocolError


class TestDecode:
    """Tests for decode()."""

    def test_property_list_keeps_keywords_as_symbols(self) -> None:
        """Keywords come back as symbols, strings and numbers as Python values."""
        raw = decode('(:docid 42 :subject "hello world")')

        assert raw == [Symbol(":docid"), 42, Symbol(":subject"), "hello world"]
        assert isinstance(raw[0], Symbol)
        assert not isinstance(raw[3], Symbol)

    def test_nil_and_t_stay_symbols(self) -> None:
        """nil and t are left for the canonicalizer to interpret."""
        assert isinstance(decode("nil"), Symbol)
        assert isinstance(decode("t"), Symbol)

    def test_nested_lists(self) -> None:
        """Lists nest to any depth."""
        assert decode("(1 (2 (3 4)) 5)") == [1, [2, [3, 4]], 5]

    def test_floats_and_negative_numbers(self) -> None:
        """Numeric atoms are converted."""
        assert decode("(1.5 -3)") == [1.5, -3]

    def test_dotted_pair_alist_is_folded(self) -> None:
        """((a . 1) (b . "x")) becomes a dict."""
        assert decode('((a . 1) (b . "x"))') == {"a": 1, "b": "x"}

    def test_mixed_list_is_not_folded(self) -> None:
        """Only lists made entirely of dotted pairs are folded."""
        raw = decode("((a . 1) 2)")

        assert isinstance(raw, list)
        assert raw[1] == 2

    def test_unbalanced_parens_raise_protocol_error(self) -> None:
        """Malformed text is a protocol error."""
        with pytest.raises(ProtocolError):
            decode("(:a 1")

    def test_more_than_one_expression_raises_protocol_error(self) -> None:
        with pytest.raises(ProtocolError, match="Expected one expression, got 2"):
            decode("(:a 1) (:b 2)")

    def test_empty_payload_raises_protocol_error(self) -> None:
        """An empty payload cannot be decoded."""
        with pytest.raises(ProtocolError, match="Empty payload"):
            decode("   ")


class TestEncode:
    """Tests for encode()."""

    def test_scalars(self) -> None:
        """None/False render as nil, True as t, numbers verbatim."""
        assert encode(None) == "nil"
        assert encode(False) == "nil"
        assert encode(True) == "t"
        assert encode(7) == "7"

    def test_mapping_becomes_property_list_with_dashed_keys(self) -> None:
        """Underscores in keys turn back into dashes."""
        assert encode({"docid": 1, "thread_subject": True}) == "(:docid 1 :thread-subject t)"

    def test_unencodable_value_raises_type_error(self) -> None:
        """Only canonical values can be encoded."""
        with pytest.raises(TypeError):
            encode(object())

    def test_canonical_value_survives_encode_and_decode(self) -> None:
        """decode(encode(v)) canonicalizes back to v."""
        value = {
            "docid": 1,
            "subject": 'say "hi" to bob',
            "flags": ["seen", "attach"],
            "from": [{"name": "Alice", "email": "alice@example.com"}],
            "score": 0.25,
            "thread_subject": True,
            "priority": None,
        }

        assert hashify(decode(encode(value))) == value

    def test_nested_lists_survive_encode_and_decode(self) -> None:
        """Plain lists, including empty ones, round-trip."""
        value = [1, [], ["a b", [2.5]]]

        assert hashify(decode(encode(value))) == value

"""Unit tests for identifier tokenizing and camelCase key normalization."""

import copy

import pytest

from tailscale_localapi.core.casing import (
    WHITESPACE,
    WORD_SEPARATORS,
    to_camel_case,
    to_camel_case_keys,
    words,
)


class TestWords:
    """Tests for words() boundary rules."""

    @pytest.mark.parametrize(
        "text,expected",
        [
            ("helloWorld", ["hello", "World"]),
            ("user_id", ["user", "id"]),
            ("HELLOWorld", ["HELLO", "World"]),
            ("IPAddress", ["IP", "Address"]),
            ("abc123def", ["abc", "123", "def"]),
            ("foo-bar_baz qux", ["foo", "bar", "baz", "qux"]),
            ("PeerAPIURL", ["Peer", "APIURL"]),
            ("TailscaleIPs", ["Tailscale", "I", "Ps"]),
            ("plain", ["plain"]),
        ],
    )
    def test_boundaries(self, text: str, expected: list[str]) -> None:
        """Test case, digit and separator transitions."""
        assert words(text) == expected

    def test_empty_string(self) -> None:
        """Test empty input yields no words."""
        assert words("") == []

    def test_separators_only(self) -> None:
        """Test runs of separators never produce empty words."""
        assert words("--__  --") == []
        assert words("--a--") == ["a"]

    @pytest.mark.parametrize("code_point", [0x00A0, 0x2003, 0x3000, 0xFEFF, 0x0085])
    def test_unicode_whitespace_separates(self, code_point: int) -> None:
        """Test non-ASCII whitespace acts as a separator."""
        assert words(f"foo{chr(code_point)}bar") == ["foo", "bar"]

    def test_other_punctuation_is_kept(self) -> None:
        """Test characters that are not separators stay inside the word."""
        assert words("nodekey:abcd") == ["nodekey:abcd"]

    def test_separator_set(self) -> None:
        """Test hyphen and underscore join the whitespace set."""
        assert "-" in WORD_SEPARATORS
        assert "_" in WORD_SEPARATORS
        assert " " in WHITESPACE
        assert "." not in WORD_SEPARATORS


class TestToCamelCase:
    """Tests for single-key conversion."""

    @pytest.mark.parametrize(
        "key,expected",
        [
            ("BackendState", "backendState"),
            ("TailscaleIPs", "tailscaleIPs"),
            ("DNSName", "dNSName"),
            ("ID", "id"),
            ("TUN", "tun"),
            ("UserID", "userID"),
            ("PeerAPIURL", "peerAPIURL"),
            ("MagicDNSSuffix", "magicDNSSuffix"),
            ("IPAddress", "iPAddress"),
            ("user_id", "userId"),
            ("snake_case_key", "snakeCaseKey"),
            ("kebab-case", "kebabCase"),
            ("Version2Name", "version2Name"),
            ("alreadyCamel", "alreadyCamel"),
        ],
    )
    def test_conversion(self, key: str, expected: str) -> None:
        """Test Go-style and separator-style keys."""
        assert to_camel_case(key) == expected

    def test_empty_key(self) -> None:
        """Test empty key stays empty."""
        assert to_camel_case("") == ""

    @pytest.mark.parametrize(
        "key",
        ["BackendState", "TailscaleIPs", "DNSName", "ID", "PeerAPIURL", "IPAddress", "a_b-c"],
    )
    def test_idempotent(self, key: str) -> None:
        """Test converting twice equals converting once."""
        once = to_camel_case(key)
        assert to_camel_case(once) == once


class TestToCamelCaseKeys:
    """Tests for recursive key normalization."""

    def test_nested_structures(self) -> None:
        """Test keys are rewritten at every depth, values untouched."""
        data = {
            "BackendState": "Running",
            "Self": {"DNSName": "laptop.ts.net.", "TailscaleIPs": ["100.64.0.1"]},
            "Health": [{"WarnCode": "x"}, "plain string"],
        }

        assert to_camel_case_keys(data) == {
            "backendState": "Running",
            "self": {"dNSName": "laptop.ts.net.", "tailscaleIPs": ["100.64.0.1"]},
            "health": [{"warnCode": "x"}, "plain string"],
        }

    @pytest.mark.parametrize("value", [None, True, 0, 3.5, "Some_String"])
    def test_scalars_pass_through(self, value) -> None:
        """Test non-container values are returned unchanged."""
        assert to_camel_case_keys(value) == value

    def test_list_length_preserved(self) -> None:
        """Test list order and length survive normalization."""
        data = [{"A_B": 1}, [], None, {"ID": 2}]
        result = to_camel_case_keys(data)

        assert len(result) == len(data)
        assert result == [{"aB": 1}, [], None, {"id": 2}]

    def test_tuple_becomes_list(self) -> None:
        """Test tuples are emitted as lists."""
        assert to_camel_case_keys(({"ID": 1},)) == [{"id": 1}]

    def test_input_not_mutated(self) -> None:
        """Test the input structure is left as it was."""
        data = {"Peer": {"nodekey:a": {"HostName": "h"}}, "List": [{"ID": 1}]}
        snapshot = copy.deepcopy(data)

        to_camel_case_keys(data)

        assert data == snapshot

    def test_collision_last_key_wins(self) -> None:
        """Test keys collapsing to the same name keep the later value."""
        assert to_camel_case_keys({"foo_bar": 1, "fooBar": 2}) == {"fooBar": 2}
        assert to_camel_case_keys({"fooBar": 2, "foo_bar": 1}) == {"fooBar": 1}

    def test_idempotent(self, raw_status_payload) -> None:
        """Test normalizing an already-normalized payload changes nothing."""
        once = to_camel_case_keys(raw_status_payload)
        assert to_camel_case_keys(once) == once

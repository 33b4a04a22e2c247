"""Tests for the ABI snippets."""

from __future__ import annotations

from unittest.mock import patch

import pytest
from eth_abi import encode as abi_encode

from ensres.protocol.abi import (
    MULTICALL_TRY_AGGREGATE,
    OFFCHAIN_LOOKUP,
    REGISTRAR_OWNER_OF,
    REGISTRY_OWNER,
    RESOLVER_ABI,
    RESOLVER_ADDR,
    RESOLVER_MULTICOIN_ADDR,
    RESOLVER_TEXT,
    UNIVERSAL_RESOLVE,
    WRAPPER_OWNER_OF,
    FunctionSnippet,
)
from ensres.protocol.errors import DecodingError


class TestSelectors:
    """Selectors match the deployed contracts' function ids."""

    @pytest.mark.parametrize(
        ("snippet", "selector"),
        [
            (REGISTRY_OWNER, "02571be3"),
            (REGISTRAR_OWNER_OF, "6352211e"),
            (RESOLVER_ADDR, "3b3b57de"),
            (RESOLVER_MULTICOIN_ADDR, "f1cb7e06"),
            (RESOLVER_TEXT, "59d1d43c"),
            (RESOLVER_ABI, "2203ab56"),
            (UNIVERSAL_RESOLVE, "9061b923"),
            (MULTICALL_TRY_AGGREGATE, "bce38bd7"),
            (OFFCHAIN_LOOKUP, "556f1830"),
        ],
    )
    def test_selector(self, snippet, selector):
        assert snippet.selector.hex() == selector

    def test_registrar_and_wrapper_share_owner_of(self):
        assert REGISTRAR_OWNER_OF.selector == WRAPPER_OWNER_OF.selector

    def test_selector_computed_once(self):
        snippet = FunctionSnippet("owner", ("bytes32",), ("address",))
        with patch(
            "ensres.protocol.abi.function_signature_to_4byte_selector",
            return_value=b"\x02\x57\x1b\xe3",
        ) as selector_fn:
            snippet.encode(b"\x00" * 32)
            snippet.matches(b"\x02\x57\x1b\xe3")
            assert snippet.selector == b"\x02\x57\x1b\xe3"
        selector_fn.assert_called_once_with("owner(bytes32)")


class TestEncodeDecode:
    def test_encode_prefixes_selector(self):
        data = REGISTRY_OWNER.encode(b"\x00" * 32)
        assert data[:4] == REGISTRY_OWNER.selector
        assert len(data) == 4 + 32

    def test_decode_output(self):
        raw = abi_encode(["string"], ["hello"])
        assert RESOLVER_TEXT.decode(raw) == ("hello",)

    def test_decode_input_roundtrip(self):
        data = RESOLVER_TEXT.encode(b"\x01" * 32, "url")
        assert RESOLVER_TEXT.decode_input(data) == (b"\x01" * 32, "url")

    def test_signature(self):
        snippet = FunctionSnippet("foo", ("uint256", "bytes"))
        assert snippet.signature == "foo(uint256,bytes)"

    def test_matches(self):
        assert RESOLVER_ADDR.matches(RESOLVER_ADDR.encode(b"\x00" * 32))
        assert not RESOLVER_ADDR.matches(b"\x00\x00")


class TestDecodingErrors:
    def test_short_data(self):
        with pytest.raises(DecodingError):
            REGISTRY_OWNER.decode(b"\x01")

    def test_empty_data(self):
        with pytest.raises(DecodingError):
            RESOLVER_TEXT.decode(b"")

    def test_decode_input_wrong_selector(self):
        with pytest.raises(DecodingError, match="selector"):
            OFFCHAIN_LOOKUP.decode_input(b"\xde\xad\xbe\xef" + b"\x00" * 32)

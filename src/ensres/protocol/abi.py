"""Minimal ABI snippets for the fixed set of calls ensres issues.

Each :class:`FunctionSnippet` pairs a Solidity signature with its return
types and exposes selector/encode/decode on top of ``eth_abi``.  Decoding
failures surface as :class:`~ensres.protocol.errors.DecodingError`.
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import cached_property
from typing import Any

from eth_abi import decode as abi_decode
from eth_abi import encode as abi_encode
from eth_abi.exceptions import DecodingError as AbiDecodingError
from eth_utils import function_signature_to_4byte_selector

from ensres.protocol.errors import DecodingError


@dataclass(frozen=True)
class FunctionSnippet:
    """A single contract function (or custom error) signature."""

    name: str
    inputs: tuple[str, ...] = ()
    outputs: tuple[str, ...] = ()

    @property
    def signature(self) -> str:
        return f"{self.name}({','.join(self.inputs)})"

    @cached_property
    def selector(self) -> bytes:
        return function_signature_to_4byte_selector(self.signature)

    def encode(self, *args: Any) -> bytes:
        """Return calldata: selector followed by the ABI-encoded *args*."""
        return self.selector + abi_encode(list(self.inputs), list(args))

    def decode(self, data: bytes) -> tuple:
        """Decode return *data* against the output types."""
        return _decode(self.outputs, data, self.signature)

    def matches(self, data: bytes) -> bool:
        """True if *data* starts with this snippet's selector."""
        return data[:4] == self.selector

    def decode_input(self, data: bytes) -> tuple:
        """Decode selector-prefixed *data* against the input types.

        Used for revert payloads of custom errors.
        """
        if not self.matches(data):
            raise DecodingError(
                f"Data does not start with the {self.signature} selector"
            )
        return _decode(self.inputs, data[4:], self.signature)


def _decode(types: tuple[str, ...], data: bytes, signature: str) -> tuple:
    try:
        return tuple(abi_decode(list(types), data))
    except (AbiDecodingError, OverflowError) as exc:
        raise DecodingError(f"Cannot decode {signature} data: {exc}") from exc


# Registry
REGISTRY_OWNER = FunctionSnippet("owner", ("bytes32",), ("address",))

# Base registrar (ERC-721 over labelhashes)
REGISTRAR_OWNER_OF = FunctionSnippet("ownerOf", ("uint256",), ("address",))
REGISTRAR_NAME_EXPIRES = FunctionSnippet("nameExpires", ("uint256",), ("uint256",))
REGISTRAR_GRACE_PERIOD = FunctionSnippet("GRACE_PERIOD", (), ("uint256",))

# Name wrapper (ERC-1155 over namehashes)
WRAPPER_OWNER_OF = FunctionSnippet("ownerOf", ("uint256",), ("address",))
WRAPPER_GET_DATA = FunctionSnippet(
    "getData", ("uint256",), ("address", "uint32", "uint64")
)

# Multicall3
MULTICALL_TRY_AGGREGATE = FunctionSnippet(
    "tryAggregate", ("bool", "(address,bytes)[]"), ("(bool,bytes)[]",)
)
MULTICALL_GET_CURRENT_BLOCK_TIMESTAMP = FunctionSnippet(
    "getCurrentBlockTimestamp", (), ("uint256",)
)

# Resolver record functions
RESOLVER_ADDR = FunctionSnippet("addr", ("bytes32",), ("address",))
RESOLVER_MULTICOIN_ADDR = FunctionSnippet("addr", ("bytes32", "uint256"), ("bytes",))
RESOLVER_TEXT = FunctionSnippet("text", ("bytes32", "string"), ("string",))
RESOLVER_ABI = FunctionSnippet("ABI", ("bytes32", "uint256"), ("uint256", "bytes"))

# Universal resolver
UNIVERSAL_RESOLVE = FunctionSnippet("resolve", ("bytes", "bytes"), ("bytes", "address"))
UNIVERSAL_REVERSE = FunctionSnippet(
    "reverse", ("bytes",), ("string", "address", "address", "address")
)

# EIP-3668
OFFCHAIN_LOOKUP = FunctionSnippet(
    "OffchainLookup", ("address", "string[]", "bytes", "bytes4", "bytes")
)

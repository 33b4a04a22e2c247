"""Resolver record lookups: address, text and ABI records.

Each record type comes as a pair of operations:

  - an internal operation (``_get_addr``, ``_get_text``, ``_get_abi``) that
    encodes the resolver function itself, keyed by namehash and record key,
    and decodes that function's return value.  It targets the public
    resolver and can be pointed at any resolver by rewriting the target.
  - a public operation that wraps the internal call in the universal
    resolver's ``resolve(dnsName, data)`` and routes it to the universal
    resolver, which locates the name's resolver (following off-chain
    lookups when needed) and forwards the call.

All record operations take ``strict``: when the call fails (revert,
transport error, failed off-chain lookup) the error is raised if ``strict``
is set and ``None`` is returned otherwise.  Malformed result data always
raises :class:`DecodingError`.
"""

from __future__ import annotations

import json
import logging
import zlib
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from eth_utils import to_checksum_address

from ensres.protocol.abi import (
    RESOLVER_ABI,
    RESOLVER_ADDR,
    RESOLVER_MULTICOIN_ADDR,
    RESOLVER_TEXT,
    UNIVERSAL_RESOLVE,
)
from ensres.protocol.coins import ETH_COIN_TYPE, format_address_record, get_coin
from ensres.protocol.errors import DecodingError
from ensres.protocol.name import dns_encode, namehash
from ensres.protocol.types import EMPTY_ADDRESS, CallDescriptor
from ensres.sdk.function import Operation, RawResult, unwrap_result

if TYPE_CHECKING:
    from ensres.sdk.client import EnsClient

logger = logging.getLogger(__name__)

# ABI record content types (bit flags)
ABI_JSON = 1
ABI_ZLIB_JSON = 2
ABI_CBOR = 4
ABI_URI = 8

DEFAULT_ABI_CONTENT_TYPES = ABI_JSON | ABI_ZLIB_JSON | ABI_CBOR | ABI_URI


@dataclass(frozen=True)
class AddressRecord:
    """A coin address record."""

    id: int
    name: str | None
    value: str


@dataclass(frozen=True)
class AbiRecord:
    """An ABI record.  ``decoded`` is False when ``abi`` holds raw bytes."""

    content_type: int
    decoded: bool
    abi: Any


def _via_universal_resolver(client: EnsClient, name: str, inner: CallDescriptor) -> CallDescriptor:
    """Wrap a resolver call so the universal resolver forwards it."""
    wrapped = CallDescriptor(
        to=inner.to, data=UNIVERSAL_RESOLVE.encode(dns_encode(name), inner.data)
    )
    return wrapped.with_target(client.contract_address("universal_resolver"))


def _unwrap_universal(data: bytes) -> tuple[bytes, str]:
    inner, resolver = UNIVERSAL_RESOLVE.decode(data)
    return inner, to_checksum_address(resolver)


# ---------------------------------------------------------------------------
# Address records
# ---------------------------------------------------------------------------


class _GetAddr(Operation[AddressRecord]):
    """Resolver ``addr`` call (legacy single-address form for ETH)."""

    def encode(
        self,
        client: EnsClient,
        *,
        name: str,
        coin: int | str = ETH_COIN_TYPE,
        strict: bool = False,
        bypass_format: bool = False,
    ) -> CallDescriptor:
        node = namehash(name)
        coin_type = get_coin(coin).id
        if coin_type == ETH_COIN_TYPE:
            data = RESOLVER_ADDR.encode(node)
        else:
            data = RESOLVER_MULTICOIN_ADDR.encode(node, coin_type)
        return CallDescriptor(to=client.contract_address("public_resolver"), data=data)

    def decode(
        self,
        client: EnsClient,
        data: RawResult,
        *,
        name: str = "",
        coin: int | str = ETH_COIN_TYPE,
        strict: bool = False,
        bypass_format: bool = False,
    ) -> AddressRecord | None:
        raw = unwrap_result(data, strict=strict)
        if not raw:
            return None
        resolved = get_coin(coin)

        if resolved.id == ETH_COIN_TYPE:
            (address,) = RESOLVER_ADDR.decode(raw)
            address = to_checksum_address(address)
            if address == EMPTY_ADDRESS:
                return None
            value = address if not bypass_format else address.lower()
        else:
            (record,) = RESOLVER_MULTICOIN_ADDR.decode(raw)
            if not record:
                return None
            value = format_address_record(resolved.id, record, bypass_format)

        return AddressRecord(id=resolved.id, name=resolved.name, value=value)


class GetAddressRecord(_GetAddr):
    """Gets an address record for a name and coin (default ETH).

    Example::

        record = await get_address_record(client, name="ens.eth", coin="ETH")
        # AddressRecord(id=60, name='ETH', value='0xFe89cc7aBB2C4183683ab71653C4cdc9B02D44b7')
    """

    def encode(self, client: EnsClient, *, name: str, **params: Any) -> CallDescriptor:
        inner = super().encode(client, name=name, **params)
        return _via_universal_resolver(client, name, inner)

    def decode(
        self, client: EnsClient, data: RawResult, *, strict: bool = False, **params: Any
    ) -> AddressRecord | None:
        raw = unwrap_result(data, strict=strict)
        if not raw:
            return None
        inner, _resolver = _unwrap_universal(raw)
        return super().decode(client, inner, strict=strict, **params)


# ---------------------------------------------------------------------------
# Text records
# ---------------------------------------------------------------------------


class _GetText(Operation[str]):
    """Resolver ``text`` call."""

    def encode(
        self, client: EnsClient, *, name: str, key: str, strict: bool = False
    ) -> CallDescriptor:
        return CallDescriptor(
            to=client.contract_address("public_resolver"),
            data=RESOLVER_TEXT.encode(namehash(name), key),
        )

    def decode(
        self,
        client: EnsClient,
        data: RawResult,
        *,
        name: str = "",
        key: str = "",
        strict: bool = False,
    ) -> str | None:
        raw = unwrap_result(data, strict=strict)
        if not raw:
            return None
        (value,) = RESOLVER_TEXT.decode(raw)
        return value or None


class GetTextRecord(_GetText):
    """Gets a text record for a name.

    Example::

        await get_text_record(client, name="ens.eth", key="com.twitter")
        # 'ensdomains'
    """

    def encode(self, client: EnsClient, *, name: str, **params: Any) -> CallDescriptor:
        inner = super().encode(client, name=name, **params)
        return _via_universal_resolver(client, name, inner)

    def decode(
        self, client: EnsClient, data: RawResult, *, strict: bool = False, **params: Any
    ) -> str | None:
        raw = unwrap_result(data, strict=strict)
        if not raw:
            return None
        inner, _resolver = _unwrap_universal(raw)
        return super().decode(client, inner, strict=strict, **params)


# ---------------------------------------------------------------------------
# ABI records
# ---------------------------------------------------------------------------


def _decode_abi_payload(content_type: int, payload: bytes) -> AbiRecord:
    try:
        if content_type == ABI_JSON:
            return AbiRecord(content_type, True, json.loads(payload))
        if content_type == ABI_ZLIB_JSON:
            return AbiRecord(content_type, True, json.loads(zlib.decompress(payload)))
        if content_type == ABI_URI:
            return AbiRecord(content_type, True, payload.decode("utf-8"))
    except (ValueError, zlib.error) as exc:
        raise DecodingError(f"Invalid ABI record (content type {content_type}): {exc}") from exc
    # CBOR and unknown content types are handed back as-is
    return AbiRecord(content_type, False, payload)


class _GetAbi(Operation[AbiRecord]):
    """Resolver ``ABI`` call."""

    def encode(
        self,
        client: EnsClient,
        *,
        name: str,
        supported_content_types: int = DEFAULT_ABI_CONTENT_TYPES,
        strict: bool = False,
    ) -> CallDescriptor:
        return CallDescriptor(
            to=client.contract_address("public_resolver"),
            data=RESOLVER_ABI.encode(namehash(name), supported_content_types),
        )

    def decode(
        self,
        client: EnsClient,
        data: RawResult,
        *,
        name: str = "",
        supported_content_types: int = DEFAULT_ABI_CONTENT_TYPES,
        strict: bool = False,
    ) -> AbiRecord | None:
        raw = unwrap_result(data, strict=strict)
        if not raw:
            return None
        content_type, payload = RESOLVER_ABI.decode(raw)
        if content_type == 0 or not payload:
            return None
        return _decode_abi_payload(content_type, payload)


class GetAbiRecord(_GetAbi):
    """Gets the ABI record for a name.

    Example::

        record = await get_abi_record(client, name="ens.eth")
        # AbiRecord(content_type=1, decoded=True, abi=[...])
    """

    def encode(self, client: EnsClient, *, name: str, **params: Any) -> CallDescriptor:
        inner = super().encode(client, name=name, **params)
        return _via_universal_resolver(client, name, inner)

    def decode(
        self, client: EnsClient, data: RawResult, *, strict: bool = False, **params: Any
    ) -> AbiRecord | None:
        raw = unwrap_result(data, strict=strict)
        if not raw:
            return None
        inner, _resolver = _unwrap_universal(raw)
        return super().decode(client, inner, strict=strict, **params)


_get_addr = _GetAddr()
_get_text = _GetText()
_get_abi = _GetAbi()

get_address_record = GetAddressRecord()
get_text_record = GetTextRecord()
get_abi_record = GetAbiRecord()

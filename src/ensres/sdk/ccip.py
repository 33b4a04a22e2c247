"""Off-chain lookups (CCIP-read, EIP-3668).

A contract signals that data lives off-chain by reverting with
``OffchainLookup(sender, urls, callData, callbackFunction, extraData)``.
The client then fetches the data from one of the gateway URLs and calls
``callbackFunction(response, extraData)`` on *sender*, which verifies the
response and returns the final result (or reverts with another lookup).

Gateway URL templates:

    https://gw.example/{sender}/{data}.json   -> GET
    https://gw.example/lookup                 -> POST {"data": ..., "sender": ...}
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Awaitable, Callable

import httpx
from eth_abi import encode as abi_encode
from eth_utils import to_checksum_address

from ensres.protocol.abi import OFFCHAIN_LOOKUP
from ensres.protocol.errors import ContractRevertError, DecodingError, OffchainLookupError
from ensres.protocol.types import CallDescriptor

logger = logging.getLogger(__name__)

CallFn = Callable[[str, bytes], Awaitable[bytes]]


@dataclass(frozen=True)
class OffchainLookup:
    """Decoded ``OffchainLookup`` revert."""

    sender: str
    urls: tuple[str, ...]
    call_data: bytes
    callback_function: bytes
    extra_data: bytes


def is_offchain_lookup(data: bytes) -> bool:
    """True if a revert payload asks for an off-chain lookup."""
    return OFFCHAIN_LOOKUP.matches(data)


def parse_offchain_lookup(data: bytes) -> OffchainLookup:
    """Decode an ``OffchainLookup`` revert payload.

    Raises:
        OffchainLookupError: If the payload is not a well-formed lookup.
    """
    try:
        sender, urls, call_data, callback, extra = OFFCHAIN_LOOKUP.decode_input(data)
    except DecodingError as exc:
        raise OffchainLookupError(f"Malformed OffchainLookup revert: {exc}") from exc
    return OffchainLookup(
        sender=to_checksum_address(sender),
        urls=tuple(urls),
        call_data=call_data,
        callback_function=callback,
        extra_data=extra,
    )


async def fetch_gateway(
    lookup: OffchainLookup, http_client: httpx.AsyncClient
) -> bytes:
    """Query the lookup's gateways in order and return the first response.

    A 4xx response aborts the lookup; 5xx responses and network errors fall
    through to the next URL.
    """
    sender = lookup.sender.lower()
    data_hex = "0x" + lookup.call_data.hex()
    failures: list[str] = []

    for template in lookup.urls:
        url = template.replace("{sender}", sender)
        try:
            if "{data}" in template:
                resp = await http_client.get(url.replace("{data}", data_hex))
            else:
                resp = await http_client.post(
                    url, json={"data": data_hex, "sender": sender}
                )
        except httpx.HTTPError as exc:
            logger.debug("Gateway %s unreachable: %s", url, exc)
            failures.append(f"{url}: {exc}")
            continue

        if resp.is_success:
            return _parse_gateway_response(url, resp)
        if 400 <= resp.status_code < 500:
            raise OffchainLookupError(
                f"Gateway {url} rejected the lookup (HTTP {resp.status_code})"
            )
        failures.append(f"{url}: HTTP {resp.status_code}")

    raise OffchainLookupError(
        "All gateways failed: " + ("; ".join(failures) or "no gateway URLs")
    )


def _parse_gateway_response(url: str, resp: httpx.Response) -> bytes:
    try:
        payload = resp.json()
        data = payload["data"]
        if not isinstance(data, str) or not data.startswith("0x"):
            raise ValueError(f"expected 0x-prefixed hex, got {data!r}")
        return bytes.fromhex(data[2:])
    except (ValueError, KeyError, TypeError) as exc:
        raise OffchainLookupError(f"Invalid response from gateway {url}: {exc}") from exc


async def ccip_request(
    call: CallFn,
    tx: CallDescriptor,
    revert_data: bytes,
    *,
    max_redirects: int = 4,
    http_client: httpx.AsyncClient | None = None,
    timeout: float = 30.0,
) -> bytes:
    """Resolve an ``OffchainLookup`` raised by *tx* and return the callback result.

    *call* executes the callback (usually the client's transport).  At most
    *max_redirects* lookups are followed before giving up.
    """
    if http_client is None:
        async with httpx.AsyncClient(timeout=timeout) as client:
            return await ccip_request(
                call, tx, revert_data, max_redirects=max_redirects, http_client=client
            )

    data = revert_data
    for _ in range(max_redirects):
        lookup = parse_offchain_lookup(data)
        if lookup.sender.lower() != tx.to.lower():
            raise OffchainLookupError(
                f"OffchainLookup sender {lookup.sender} does not match called contract {tx.to}"
            )
        logger.debug("CCIP-read for %s via %d gateway(s)", tx.to, len(lookup.urls))
        response = await fetch_gateway(lookup, http_client)
        callback = lookup.callback_function + abi_encode(
            ["bytes", "bytes"], [response, lookup.extra_data]
        )
        try:
            return await call(tx.to, callback)
        except ContractRevertError as exc:
            if not is_offchain_lookup(exc.data):
                raise
            data = exc.data

    raise OffchainLookupError(f"Too many CCIP-read redirects (max {max_redirects})")

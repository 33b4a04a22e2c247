"""Reverse resolution: address -> primary name."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from eth_utils import to_checksum_address

from ensres.protocol.abi import UNIVERSAL_REVERSE
from ensres.protocol.errors import InvalidNameError
from ensres.protocol.name import dns_encode, normalise
from ensres.protocol.types import CallDescriptor
from ensres.sdk.function import Operation, RawResult, unwrap_result

if TYPE_CHECKING:
    from ensres.sdk.client import EnsClient

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PrimaryName:
    name: str
    # Whether forward resolution of ``name`` points back at the address
    match: bool
    reverse_resolver_address: str
    resolver_address: str


def reverse_node_name(address: str) -> str:
    """Return ``<hex address>.addr.reverse`` for *address*."""
    return f"{to_checksum_address(address).lower()[2:]}.addr.reverse"


class GetName(Operation[PrimaryName]):
    """Gets the primary name for an address.

    Parameters:
        address: Address to get the name for.
        allow_mismatch: Return the name even when it does not forward
            resolve to *address* (``match`` is then False).
        strict: Raise execution errors instead of returning ``None``.
    """

    def encode(
        self,
        client: EnsClient,
        *,
        address: str,
        allow_mismatch: bool = False,
        strict: bool = False,
    ) -> CallDescriptor:
        return CallDescriptor(
            to=client.contract_address("universal_resolver"),
            data=UNIVERSAL_REVERSE.encode(dns_encode(reverse_node_name(address))),
        )

    def decode(
        self,
        client: EnsClient,
        data: RawResult,
        *,
        address: str,
        allow_mismatch: bool = False,
        strict: bool = False,
    ) -> PrimaryName | None:
        raw = unwrap_result(data, strict=strict)
        if not raw:
            return None
        name, resolved_address, reverse_resolver, resolver = UNIVERSAL_REVERSE.decode(raw)
        if not name:
            return None
        match = to_checksum_address(resolved_address) == to_checksum_address(address)
        if not match and not allow_mismatch:
            logger.debug("Primary name %s does not resolve back to %s", name, address)
            return None
        try:
            normalised = normalise(name)
        except InvalidNameError:
            if strict:
                raise
            return None
        return PrimaryName(
            name=normalised,
            match=match,
            reverse_resolver_address=to_checksum_address(reverse_resolver),
            resolver_address=to_checksum_address(resolver),
        )


get_name = GetName()

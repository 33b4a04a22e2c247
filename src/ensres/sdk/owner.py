"""Ownership resolution across the registry, registrar and name wrapper.

A name's owner can be recorded on up to three contract layers:

  - registry:  ``owner(namehash)`` -- controller of the name's records
  - registrar: ``ownerOf(labelhash)`` -- registrant (NFT holder) of a
    second-level name under the managed TLD; reverts once expired
  - wrapper:   ``ownerOf(namehash)`` -- owner of a wrapped name; the
    wrapper itself then appears as the registry/registrar owner

All layers are queried in one aggregate call and reconciled into exactly
one :data:`Ownership` answer.  When the registrar or registry reports the
wrapper contract as owner, the wrapper's own owner is the effective owner.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, ClassVar, Union

from eth_utils import to_checksum_address

from ensres.protocol.abi import REGISTRAR_OWNER_OF, REGISTRY_OWNER, WRAPPER_OWNER_OF
from ensres.protocol.errors import (
    CallExecutionError,
    DecodingError,
    InvalidNameError,
    UnsupportedContractError,
)
from ensres.protocol.name import is_managed_tld_name, labelhash, namehash, split_labels
from ensres.protocol.types import EMPTY_ADDRESS, AggregateResult, CallDescriptor, OwnershipLevel
from ensres.sdk.function import Operation, RawResult
from ensres.sdk.multicall import multicall_wrapper

if TYPE_CHECKING:
    from ensres.sdk.client import EnsClient

logger = logging.getLogger(__name__)

# A reverted sub-call may come back as selector + one word (e.g. Panic(uint256))
_ERROR_ENCODED_LEN = 4 + 32


class OwnerContract(str, Enum):
    """Contract layer an ownership lookup can be pinned to."""

    REGISTRY = "registry"
    REGISTRAR = "registrar"
    NAME_WRAPPER = "nameWrapper"


@dataclass(frozen=True)
class RegistrarOnlyOwnership:
    """Registrar-pinned lookup: only the registrant is known."""

    registrant: str
    ownership_level: ClassVar[OwnershipLevel] = OwnershipLevel.REGISTRAR


@dataclass(frozen=True)
class WrappedOwnership:
    """The name is wrapped; the wrapper's owner controls it."""

    owner: str
    ownership_level: ClassVar[OwnershipLevel] = OwnershipLevel.NAME_WRAPPER


@dataclass(frozen=True)
class UnwrappedEth2ldOwnership:
    """Unwrapped second-level name under the managed TLD.

    ``registrant`` is ``None`` once the registration has expired while the
    registry record still names an owner.
    """

    registrant: str | None
    owner: str
    ownership_level: ClassVar[OwnershipLevel] = OwnershipLevel.REGISTRAR


@dataclass(frozen=True)
class RegistryOwnership:
    """Owner taken from the registry (subnames, other TLDs)."""

    owner: str
    ownership_level: ClassVar[OwnershipLevel] = OwnershipLevel.REGISTRY


Ownership = Union[
    RegistrarOnlyOwnership, WrappedOwnership, UnwrappedEth2ldOwnership, RegistryOwnership
]


def _parse_contract(contract: OwnerContract | str | None) -> OwnerContract | None:
    if contract is None:
        return None
    try:
        return OwnerContract(contract)
    except ValueError:
        raise UnsupportedContractError(
            contract, tuple(c.value for c in OwnerContract)
        ) from None


def owner_from_contract(
    client: EnsClient, contract: OwnerContract, labels: list[str]
) -> CallDescriptor:
    """Build the owner lookup for one contract layer.

    The registrar is keyed by the leftmost label's hash; the registry and
    wrapper by the full namehash.
    """
    if contract is OwnerContract.REGISTRY:
        return CallDescriptor(
            to=client.contract_address("registry"),
            data=REGISTRY_OWNER.encode(namehash(".".join(labels))),
        )
    if contract is OwnerContract.REGISTRAR:
        if not labels:
            raise InvalidNameError("The root name has no registrar entry")
        return CallDescriptor(
            to=client.contract_address("base_registrar"),
            data=REGISTRAR_OWNER_OF.encode(int.from_bytes(labelhash(labels[0]), "big")),
        )
    if contract is OwnerContract.NAME_WRAPPER:
        return CallDescriptor(
            to=client.contract_address("name_wrapper"),
            data=WRAPPER_OWNER_OF.encode(
                int.from_bytes(namehash(".".join(labels)), "big")
            ),
        )
    raise UnsupportedContractError(contract, tuple(c.value for c in OwnerContract))


def _decode_owner(result: AggregateResult | None) -> str | None:
    """Decode one owner lookup; every flavour of "no owner" becomes ``None``."""
    if result is None or not result.success:
        return None
    data = result.return_data
    if not data or len(data) == _ERROR_ENCODED_LEN:
        return None
    (owner,) = REGISTRY_OWNER.decode(data)
    owner = to_checksum_address(owner)
    if owner == EMPTY_ADDRESS:
        return None
    return owner


class _Plan:
    """Position of each layer's lookup within the aggregate call."""

    def __init__(self, client: EnsClient, labels: list[str], contract: OwnerContract | None):
        self.pinned: OwnerContract | None = None
        self.order: list[OwnerContract] = []
        if contract is not None or len(labels) <= 1:
            self.pinned = contract or OwnerContract.REGISTRY
            self.order = [self.pinned]
            return
        self.order.append(OwnerContract.REGISTRY)
        if is_managed_tld_name(labels, client.managed_tld):
            self.order.append(OwnerContract.REGISTRAR)
        if client.has_contract("name_wrapper"):
            self.order.append(OwnerContract.NAME_WRAPPER)


class GetOwner(Operation[Ownership]):
    """Gets the owner(s) of a name.

    Parameters:
        name: Name to get the owner for.
        contract: Optional layer (``registry``, ``registrar``,
            ``nameWrapper``) to read ownership from exclusively.

    Returns the reconciled :data:`Ownership`, or ``None`` when the name is
    unregistered or expired.  Execution errors are always raised; this
    operation has no lenient mode.

    Example::

        result = await get_owner(client, name="ens.eth")
        # UnwrappedEth2ldOwnership(registrant='0xb6E0...', owner='0xb6E0...')
    """

    def encode(
        self,
        client: EnsClient,
        *,
        name: str,
        contract: OwnerContract | str | None = None,
    ) -> CallDescriptor:
        labels = split_labels(name)
        plan = _Plan(client, labels, _parse_contract(contract))
        transactions = [owner_from_contract(client, layer, labels) for layer in plan.order]
        return multicall_wrapper.encode(client, transactions=transactions)

    def decode(
        self,
        client: EnsClient,
        data: RawResult,
        *,
        name: str,
        contract: OwnerContract | str | None = None,
    ) -> Ownership | None:
        if isinstance(data, CallExecutionError):
            raise data
        labels = split_labels(name)
        plan = _Plan(client, labels, _parse_contract(contract))
        results = multicall_wrapper.decode(client, data)
        if len(results) != len(plan.order):
            raise DecodingError(
                f"Expected {len(plan.order)} owner lookups, got {len(results)}"
            )
        owners = {
            layer: _decode_owner(result) for layer, result in zip(plan.order, results)
        }

        if plan.pinned is not None:
            return _pinned_ownership(plan.pinned, owners[plan.pinned])

        ownership = reconcile_ownership(
            labels,
            registry_owner=owners.get(OwnerContract.REGISTRY),
            registrar_owner=owners.get(OwnerContract.REGISTRAR),
            wrapper_owner=owners.get(OwnerContract.NAME_WRAPPER),
            wrapper_address=(
                to_checksum_address(client.contract_address("name_wrapper"))
                if OwnerContract.NAME_WRAPPER in owners
                else None
            ),
            managed_tld=client.managed_tld,
        )
        logger.debug("Ownership of %s: %r", name, ownership)
        return ownership


def _pinned_ownership(contract: OwnerContract, owner: str | None) -> Ownership | None:
    if owner is None:
        return None
    if contract is OwnerContract.REGISTRAR:
        return RegistrarOnlyOwnership(registrant=owner)
    if contract is OwnerContract.NAME_WRAPPER:
        return WrappedOwnership(owner=owner)
    return RegistryOwnership(owner=owner)


def reconcile_ownership(
    labels: list[str],
    *,
    registry_owner: str | None,
    registrar_owner: str | None = None,
    wrapper_owner: str | None = None,
    wrapper_address: str | None = None,
    managed_tld: str = "eth",
) -> Ownership | None:
    """Derive the single authoritative owner from per-layer owners.

    Owners are checksummed addresses or ``None`` for "no owner".  Rules are
    evaluated top-down and the first match wins.
    """
    registry_wrapped = (
        wrapper_address is not None
        and registry_owner == wrapper_address
        and wrapper_owner is not None
    )

    if labels[-1] == managed_tld:
        # Registrar NFT held by the wrapper: no registrant for wrapped names
        if wrapper_address is not None and registrar_owner == wrapper_address:
            if wrapper_owner is None:
                return None
            return WrappedOwnership(owner=wrapper_owner)
        # Unwrapped 2LD: registrant holds the NFT, owner controls the records
        if registrar_owner is not None:
            return UnwrappedEth2ldOwnership(
                registrant=registrar_owner, owner=registry_owner or EMPTY_ADDRESS
            )
        if registry_owner is not None:
            # Expired 2LD: registrant cleared, registry record retained
            if len(labels) == 2:
                return UnwrappedEth2ldOwnership(registrant=None, owner=registry_owner)
            if registry_wrapped:
                return WrappedOwnership(owner=wrapper_owner)
            return RegistryOwnership(owner=registry_owner)
        # Unregistered or fully expired
        return None

    # Outside the managed TLD there is never a registrant
    if registry_wrapped:
        return WrappedOwnership(owner=wrapper_owner)
    if registry_owner is not None:
        return RegistryOwnership(owner=registry_owner)
    return None


get_owner = GetOwner()

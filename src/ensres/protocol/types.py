"""Core value types and constants shared by every operation."""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum


EMPTY_ADDRESS = "0x0000000000000000000000000000000000000000"

EMPTY_BYTES32 = b"\x00" * 32


class OwnershipLevel(str, Enum):
    """Contract layer that is authoritative for a returned owner.

    Using ``str, Enum`` so that ``OwnershipLevel.REGISTRY == "registry"`` is True.
    """

    REGISTRY = "registry"
    REGISTRAR = "registrar"
    NAME_WRAPPER = "nameWrapper"


@dataclass(frozen=True)
class CallDescriptor:
    """A read call: target contract address plus ABI-encoded calldata."""

    to: str
    data: bytes

    def with_target(self, to: str) -> CallDescriptor:
        """Return a copy of this call aimed at a different contract."""
        return replace(self, to=to)

    def __repr__(self) -> str:
        return f"CallDescriptor(to={self.to!r}, data=0x{self.data.hex()})"


@dataclass(frozen=True)
class AggregateResult:
    """One entry of an aggregated call result, order-matched to its call.

    ``success=False`` means the sub-call reverted; ``return_data`` then holds
    the revert payload and must not be decoded as a value.
    """

    success: bool
    return_data: bytes

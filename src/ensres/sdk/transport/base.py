"""Abstract transport interface for read-only contract calls."""

from __future__ import annotations

import abc


class TransportBase(abc.ABC):
    """Executes a single ``eth_call`` against the latest block.

    Implementations must raise
    :class:`~ensres.protocol.errors.ContractRevertError` (with the raw revert
    payload) when the call reverts and
    :class:`~ensres.protocol.errors.TransportError` for anything else that
    prevents a result.  No retries, no caching.
    """

    @abc.abstractmethod
    async def call(self, to: str, data: bytes) -> bytes:
        """Execute calldata *data* against contract *to* and return raw bytes."""

    async def close(self) -> None:
        """Release any underlying connections."""

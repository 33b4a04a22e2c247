"""JSON-RPC transport via web3.py ``AsyncWeb3``."""

from __future__ import annotations

import logging

from eth_utils import to_checksum_address

from ensres.protocol.errors import ContractRevertError, TransportError
from ensres.sdk.transport.base import TransportBase

logger = logging.getLogger(__name__)


def _revert_data(exc: Exception) -> bytes:
    """Extract the raw revert payload web3 attaches to contract errors."""
    data = getattr(exc, "data", None)
    if isinstance(data, (bytes, bytearray)):
        return bytes(data)
    if isinstance(data, str) and data.startswith("0x"):
        try:
            return bytes.fromhex(data[2:])
        except ValueError:
            return b""
    return b""


class Web3Transport(TransportBase):
    """Read-only transport over an ``AsyncHTTPProvider``.

    The web3 instance is created lazily on first call.  CCIP-read is
    disabled at this layer: ``OffchainLookup`` reverts are surfaced as
    :class:`ContractRevertError` and handled by
    :class:`~ensres.sdk.client.EnsClient`.
    """

    def __init__(self, rpc_url: str, timeout: float = 30.0) -> None:
        self._rpc_url = rpc_url
        self._timeout = timeout
        self._w3 = None  # Lazy init

    def _get_web3(self):
        if self._w3 is None:
            from web3 import AsyncWeb3
            from web3.providers import AsyncHTTPProvider

            self._w3 = AsyncWeb3(
                AsyncHTTPProvider(
                    self._rpc_url, request_kwargs={"timeout": self._timeout}
                )
            )
        return self._w3

    async def call(self, to: str, data: bytes) -> bytes:
        from web3.exceptions import ContractLogicError

        w3 = self._get_web3()
        tx = {"to": to_checksum_address(to), "data": "0x" + data.hex()}
        try:
            result = await w3.eth.call(tx, ccip_read_enabled=False)
        except ContractLogicError as exc:
            logger.debug("eth_call to %s reverted: %s", to, exc)
            raise ContractRevertError(str(exc), data=_revert_data(exc)) from exc
        except Exception as exc:
            raise TransportError(f"eth_call to {to} failed: {exc}") from exc
        return bytes(result)

    async def close(self) -> None:
        if self._w3 is None:
            return
        disconnect = getattr(self._w3.provider, "disconnect", None)
        if disconnect is not None:
            await disconnect()
        self._w3 = None

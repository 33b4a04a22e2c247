"""EnsClient -- the network context every operation runs against.

Provides the two collaborators operations need:

  - contract address lookup for the active chain (used by ``encode``)
  - ``execute()`` of a :class:`CallDescriptor` (used by direct calls and
    the batch orchestrator), with transparent CCIP-read handling
"""

from __future__ import annotations

import logging

import httpx

from ensres.protocol.contracts import get_chain_contract_address, has_chain_contract
from ensres.protocol.errors import ContractRevertError
from ensres.protocol.types import CallDescriptor
from ensres.sdk.ccip import ccip_request, is_offchain_lookup
from ensres.sdk.config import ClientConfig
from ensres.sdk.transport import TransportBase, create_transport
from ensres.sdk._sync import _run_sync

logger = logging.getLogger(__name__)


class EnsClient:
    """Read-only client for one chain.

    Usage::

        client = EnsClient(rpc_url="https://...", chain_id=1)
        owner = await get_owner(client, name="alice.eth")
        await client.close()

    Async context manager::

        async with EnsClient() as client:
            record = await get_text_record(client, name="alice.eth", key="url")

    Holds no cached results: every operation is a fresh resolution.
    """

    def __init__(
        self,
        transport: TransportBase | None = None,
        *,
        config: ClientConfig | None = None,
        rpc_url: str | None = None,
        chain_id: int | None = None,
        contracts: dict[str, str] | None = None,
        managed_tld: str | None = None,
        ccip_read: bool | None = None,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        if config is None:
            config = ClientConfig(
                rpc_url=rpc_url,
                chain_id=chain_id,
                managed_tld=managed_tld,
                ccip_read=ccip_read,
                contracts=dict(contracts or {}),
            )
        self._config = config
        self._transport = transport or create_transport(config)
        self._http_client = http_client

    @property
    def config(self) -> ClientConfig:
        return self._config

    @property
    def chain_id(self) -> int:
        return self._config.chain_id

    @property
    def managed_tld(self) -> str:
        return self._config.managed_tld

    @property
    def transport(self) -> TransportBase:
        return self._transport

    def contract_address(self, contract: str) -> str:
        """Return the deployed address of *contract* on this client's chain.

        Raises:
            ConfigurationError: If the chain or contract is not in the table.
        """
        return get_chain_contract_address(
            self._config.chain_id, contract, self._config.contracts
        )

    def has_contract(self, contract: str) -> bool:
        return has_chain_contract(self._config.chain_id, contract, self._config.contracts)

    async def execute(self, tx: CallDescriptor) -> bytes:
        """Execute *tx* and return the raw result bytes.

        Raises:
            CallExecutionError: The call reverted or the transport failed.
        """
        logger.debug("eth_call %s (%d bytes)", tx.to, len(tx.data))
        try:
            return await self._transport.call(tx.to, tx.data)
        except ContractRevertError as exc:
            if not self._config.ccip_read or not is_offchain_lookup(exc.data):
                raise
            return await self.resolve_offchain(tx, exc.data)

    async def resolve_offchain(self, tx: CallDescriptor, revert_data: bytes) -> bytes:
        """Complete an ``OffchainLookup`` raised by *tx*."""
        return await ccip_request(
            self._transport.call,
            tx,
            revert_data,
            max_redirects=self._config.max_ccip_redirects,
            http_client=self._http_client,
            timeout=self._config.request_timeout,
        )

    async def close(self) -> None:
        await self._transport.close()

    async def __aenter__(self) -> EnsClient:
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    def close_sync(self) -> None:
        """Sync wrapper for close()."""
        _run_sync(self.close())

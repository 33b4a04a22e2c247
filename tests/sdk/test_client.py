"""Tests for EnsClient."""

from __future__ import annotations

import pytest

from ensres.protocol.abi import REGISTRY_OWNER
from ensres.protocol.contracts import MULTICALL3_ADDRESS
from ensres.protocol.errors import ContractAddressNotFoundError, UnsupportedChainError
from ensres.protocol.name import namehash
from ensres.protocol.types import CallDescriptor
from ensres.sdk.client import EnsClient
from ensres.sdk.config import ClientConfig
from ensres.sdk.records import get_text_record
from ensres.sdk.transport import Web3Transport
from tests.fakes import CONTRACTS, REGISTRY, TEST_CHAIN_ID, FakeChain


class TestConstruction:
    def test_defaults_to_web3_transport(self):
        client = EnsClient()
        assert isinstance(client.transport, Web3Transport)
        assert client.chain_id == 1
        assert client.managed_tld == "eth"

    def test_explicit_config(self, chain):
        cfg = ClientConfig(chain_id=11155111, ccip_read=False)
        client = EnsClient(chain, config=cfg)
        assert client.config is cfg
        assert client.chain_id == 11155111


class TestContractAddress:
    def test_override(self, client):
        assert client.contract_address("registry") == REGISTRY

    def test_builtin_table(self, chain):
        client = EnsClient(chain, chain_id=1)
        assert client.contract_address("multicall3") == MULTICALL3_ADDRESS
        assert client.has_contract("name_wrapper")

    def test_unknown_chain(self, chain):
        client = EnsClient(chain, chain_id=999)
        with pytest.raises(UnsupportedChainError):
            client.contract_address("registry")

    def test_missing_override(self, chain):
        client = EnsClient(chain, chain_id=999, contracts={"registry": REGISTRY})
        assert not client.has_contract("name_wrapper")
        with pytest.raises(ContractAddressNotFoundError):
            client.contract_address("name_wrapper")

    async def test_configuration_error_raised_before_io(self, chain):
        client = EnsClient(chain, chain_id=999)
        with pytest.raises(UnsupportedChainError):
            await get_text_record(client, name="alice.eth", key="url")
        assert chain.calls == []


class TestExecute:
    async def test_forwards_to_transport(self, client, chain):
        chain.set_registry_owner("alice.eth", REGISTRY)
        tx = CallDescriptor(to=REGISTRY, data=REGISTRY_OWNER.encode(namehash("alice.eth")))

        result = await client.execute(tx)

        assert result == b"\x00" * 12 + bytes.fromhex(REGISTRY[2:])
        assert chain.calls == [(REGISTRY, tx.data)]

    async def test_no_caching(self, client, chain):
        chain.set_text("alice.eth", "url", "v1")
        assert await get_text_record(client, name="alice.eth", key="url") == "v1"

        chain.set_text("alice.eth", "url", "v2")
        assert await get_text_record(client, name="alice.eth", key="url") == "v2"
        assert len(chain.calls) == 2


class TestLifecycle:
    async def test_async_context_manager(self):
        chain = FakeChain()
        async with EnsClient(chain, chain_id=TEST_CHAIN_ID, contracts=CONTRACTS) as client:
            assert client.transport is chain
        assert chain.closed is True

"""Tests for the multicall wrapper and the batch orchestrator."""

from __future__ import annotations

import pytest

from ensres.protocol.abi import REGISTRAR_OWNER_OF, REGISTRY_OWNER
from ensres.protocol.errors import ContractRevertError, DecodingError, TransportError
from ensres.protocol.name import labelhash, namehash
from ensres.protocol.types import AggregateResult, CallDescriptor
from ensres.sdk.multicall import _batch, batch, batch_sync, multicall_wrapper, to_raw_result
from ensres.sdk.owner import UnwrappedEth2ldOwnership, get_owner
from ensres.sdk.records import AddressRecord, get_address_record, get_text_record
from tests.fakes import ALICE, BOB, MULTICALL3, REGISTRAR, REGISTRY


def _registry_owner_call(name: str) -> CallDescriptor:
    return CallDescriptor(to=REGISTRY, data=REGISTRY_OWNER.encode(namehash(name)))


def _owner_word(address: str) -> bytes:
    return b"\x00" * 12 + bytes.fromhex(address[2:])


class TestMulticallWrapper:
    @pytest.mark.parametrize("count", [1, 2, 10, 50])
    async def test_order_preserved(self, client, chain, count):
        owners = [f"0x{i + 1:040x}" for i in range(count)]
        for i, owner in enumerate(owners):
            chain.set_registry_owner(f"n{i}.eth", owner)
        calls = [_registry_owner_call(f"n{i}.eth") for i in range(count)]

        results = await multicall_wrapper(client, transactions=calls)

        assert len(results) == count
        assert [r.return_data for r in results] == [_owner_word(o) for o in owners]
        assert len(chain.calls) == 1
        assert chain.calls[0][0] == MULTICALL3

    async def test_empty_is_no_op(self, client, chain):
        assert await multicall_wrapper(client, transactions=[]) == []
        assert chain.calls == []

    async def test_failure_is_distinct_from_zero_value(self, client, chain):
        """A reverting sub-call reports success=False; a zero owner reports success."""
        calls = [
            CallDescriptor(
                to=REGISTRAR,
                data=REGISTRAR_OWNER_OF.encode(int.from_bytes(labelhash("nobody"), "big")),
            ),
            _registry_owner_call("nobody.eth"),
        ]

        failed, zero = await multicall_wrapper(client, transactions=calls)

        assert failed.success is False
        assert zero == AggregateResult(success=True, return_data=b"\x00" * 32)

    async def test_aggregate_revert_fails_whole_call(self, client, chain):
        chain.revert_everything = b""
        with pytest.raises(ContractRevertError):
            await multicall_wrapper(client, transactions=[_registry_owner_call("a.eth")])

    async def test_transport_error(self, client, chain):
        chain.transport_error = TransportError("down")
        with pytest.raises(TransportError):
            await multicall_wrapper(client, transactions=[_registry_owner_call("a.eth")])

    async def test_length_mismatch(self, client, chain):
        calls = [_registry_owner_call("a.eth"), _registry_owner_call("b.eth")]
        data = await client.execute(multicall_wrapper.encode(client, transactions=calls[:1]))
        with pytest.raises(DecodingError):
            multicall_wrapper.decode(client, data, transactions=calls)

    def test_to_raw_result(self):
        assert to_raw_result(AggregateResult(True, b"\x01")) == b"\x01"
        failure = to_raw_result(AggregateResult(False, b"\x02"))
        assert isinstance(failure, ContractRevertError)
        assert failure.data == b"\x02"


class TestBatch:
    async def test_heterogeneous_batch(self, client, chain):
        chain.set_registry_owner("alice.eth", ALICE)
        chain.set_registrar("alice", BOB)
        chain.set_text("alice.eth", "url", "https://alice.example")
        chain.set_addr("alice.eth", bytes.fromhex(ALICE[2:]))

        owner, url, address = await batch(
            client,
            get_owner.batch(name="alice.eth"),
            get_text_record.batch(name="alice.eth", key="url"),
            get_address_record.batch(name="alice.eth"),
        )

        assert owner == UnwrappedEth2ldOwnership(registrant=BOB, owner=ALICE)
        assert url == "https://alice.example"
        assert address == AddressRecord(id=60, name="ETH", value=ALICE)
        assert len(chain.calls) == 1

    async def test_batch_matches_direct_calls(self, client, chain):
        chain.set_text("alice.eth", "url", "https://alice.example")
        chain.set_text("bob.eth", "url", "https://bob.example")

        direct = [
            await get_text_record(client, name="alice.eth", key="url"),
            await get_text_record(client, name="bob.eth", key="url"),
        ]
        batched = await batch(
            client,
            get_text_record.batch(name="alice.eth", key="url"),
            get_text_record.batch(name="bob.eth", key="url"),
        )

        assert batched == direct

    async def test_empty_batch(self, client, chain):
        assert await batch(client) == []
        assert chain.calls == []

    async def test_failing_participant_does_not_affect_siblings(self, client, chain):
        chain.unresolvable.add("broken.eth")
        chain.set_text("alice.eth", "url", "https://alice.example")

        broken, url = await batch(
            client,
            get_text_record.batch(name="broken.eth", key="url"),
            get_text_record.batch(name="alice.eth", key="url"),
        )

        assert broken is None
        assert url == "https://alice.example"

    async def test_strict_participant_raises(self, client, chain):
        chain.unresolvable.add("broken.eth")

        with pytest.raises(ContractRevertError):
            await batch(
                client,
                get_text_record.batch(name="broken.eth", key="url", strict=True),
                get_text_record.batch(name="alice.eth", key="url"),
            )

    async def test_aggregate_failure_fails_batch(self, client, chain):
        chain.transport_error = TransportError("down")

        with pytest.raises(TransportError):
            await batch(client, get_text_record.batch(name="alice.eth", key="url"))

    async def test_manual_batch_pair(self, client, chain):
        """A batch can itself be encoded and decoded by hand."""
        chain.set_text("alice.eth", "url", "https://alice.example")
        calls = [get_text_record.batch(name="alice.eth", key="url")]

        tx = _batch.encode(client, calls=calls)
        result = _batch.decode(client, await client.execute(tx), calls=calls)

        assert result == ["https://alice.example"]

    def test_batch_sync(self, client, chain):
        chain.set_text("alice.eth", "url", "https://alice.example")

        result = batch_sync(client, get_text_record.batch(name="alice.eth", key="url"))

        assert result == ["https://alice.example"]

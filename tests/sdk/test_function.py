"""Tests for the operation protocol: direct, manual pair, batch and sync use."""

from __future__ import annotations

import pytest

from ensres.protocol.abi import REGISTRY_OWNER
from ensres.protocol.errors import CallExecutionError, ContractRevertError, TransportError
from ensres.protocol.types import CallDescriptor
from ensres.sdk.function import BatchCall, Operation, unwrap_result
from ensres.sdk.multicall import batch
from ensres.sdk.owner import get_owner
from ensres.sdk.records import get_text_record
from tests.fakes import ALICE, BOB, REGISTRY


class _Echo(Operation[bytes]):
    """Calls the registry and hands back the raw bytes."""

    def encode(self, client, *, payload: bytes, strict: bool = False) -> CallDescriptor:
        return CallDescriptor(to=client.contract_address("registry"), data=payload)

    def decode(self, client, data, *, payload: bytes, strict: bool = False):
        return unwrap_result(data, strict=strict)


class TestUnwrapResult:
    def test_bytes_pass_through(self):
        assert unwrap_result(b"\x01", strict=True) == b"\x01"

    def test_lenient_error_is_none(self):
        assert unwrap_result(TransportError("down"), strict=False) is None

    def test_strict_error_raises(self):
        with pytest.raises(TransportError):
            unwrap_result(TransportError("down"), strict=True)


class TestThreeWaysEquivalent:
    """Direct, manual-pair and batch use produce the same result."""

    @pytest.fixture(autouse=True)
    def _records(self, chain):
        chain.set_registry_owner("alice.eth", ALICE)
        chain.set_registrar("alice", BOB)
        chain.set_text("alice.eth", "url", "https://alice.example")

    async def test_text_record(self, client):
        params = {"name": "alice.eth", "key": "url"}

        direct = await get_text_record(client, **params)
        tx = get_text_record.encode(client, **params)
        manual = get_text_record.decode(client, await client.execute(tx), **params)
        (batched,) = await batch(client, get_text_record.batch(**params))

        assert direct == manual == batched == "https://alice.example"

    async def test_owner(self, client):
        direct = await get_owner(client, name="alice.eth")
        tx = get_owner.encode(client, name="alice.eth")
        manual = get_owner.decode(client, await client.execute(tx), name="alice.eth")
        (batched,) = await batch(client, get_owner.batch(name="alice.eth"))

        assert direct == manual == batched

    async def test_failure_equivalent(self, client, chain):
        chain.unresolvable.add("alice.eth")
        params = {"name": "alice.eth", "key": "url"}

        direct = await get_text_record(client, **params)
        tx = get_text_record.encode(client, **params)
        try:
            raw = await client.execute(tx)
        except CallExecutionError as exc:
            raw = exc
        manual = get_text_record.decode(client, raw, **params)
        (batched,) = await batch(client, get_text_record.batch(**params))

        assert direct is manual is batched is None


class TestOperationBase:
    async def test_direct_call_passes_error_to_decode(self, client, chain):
        chain.revert_everything = b"\x08\xc3\x79\xa0"
        echo = _Echo()

        assert await echo(client, payload=b"\x00") is None
        with pytest.raises(ContractRevertError):
            await echo(client, payload=b"\x00", strict=True)

    async def test_direct_call_targets_encoded_address(self, client, chain):
        await _Echo()(client, payload=REGISTRY_OWNER.encode(b"\x00" * 32))
        assert chain.calls[0][0] == REGISTRY

    def test_batch_binds_params(self):
        echo = _Echo()
        call = echo.batch(payload=b"\x01")
        assert isinstance(call, BatchCall)
        assert call.operation is echo
        assert dict(call.args) == {"payload": b"\x01"}

    def test_sync(self, client, chain):
        chain.set_text("alice.eth", "url", "https://alice.example")
        assert get_text_record.sync(client, name="alice.eth", key="url") == (
            "https://alice.example"
        )

    def test_repr(self):
        assert repr(_Echo()) == "<_Echo>"

    def test_operation_is_abstract(self):
        with pytest.raises(TypeError):
            Operation()

"""Multicall aggregation: many reads, one ``eth_call``.

:data:`multicall_wrapper` folds an ordered list of call descriptors into a
single ``tryAggregate(false, calls)`` call on the Multicall3 contract and
turns the result back into one :class:`AggregateResult` per call.  Sub-call
failures are reported per entry; only a failure of the aggregate call
itself fails the whole batch.

:func:`batch` builds on it to run independently-authored operations in a
single round trip and hand each one its own slice of the result.  All
sub-calls execute within the same block, so their results are mutually
consistent.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import TYPE_CHECKING, Any

from eth_utils import to_checksum_address

from ensres.protocol.abi import MULTICALL_TRY_AGGREGATE
from ensres.protocol.errors import CallExecutionError, ContractRevertError, DecodingError
from ensres.protocol.types import AggregateResult, CallDescriptor
from ensres.sdk.ccip import is_offchain_lookup
from ensres.sdk.function import BatchCall, Operation, RawResult
from ensres.sdk._sync import _run_sync

if TYPE_CHECKING:
    from ensres.sdk.client import EnsClient

logger = logging.getLogger(__name__)


class MulticallWrapper(Operation[list[AggregateResult]]):
    """Aggregate call descriptors through Multicall3 ``tryAggregate``."""

    def encode(
        self, client: EnsClient, *, transactions: Sequence[CallDescriptor]
    ) -> CallDescriptor:
        calls = [(to_checksum_address(tx.to), tx.data) for tx in transactions]
        return CallDescriptor(
            to=client.contract_address("multicall3"),
            data=MULTICALL_TRY_AGGREGATE.encode(False, calls),
        )

    def decode(
        self,
        client: EnsClient,
        data: RawResult,
        *,
        transactions: Sequence[CallDescriptor] | None = None,
    ) -> list[AggregateResult]:
        # A failed aggregate is a single failure, never a per-call one
        if isinstance(data, CallExecutionError):
            raise data
        (entries,) = MULTICALL_TRY_AGGREGATE.decode(data)
        if transactions is not None and len(entries) != len(transactions):
            raise DecodingError(
                f"Multicall returned {len(entries)} results for {len(transactions)} calls"
            )
        return [
            AggregateResult(success=bool(success), return_data=bytes(return_data))
            for success, return_data in entries
        ]

    async def __call__(
        self, client: EnsClient, *, transactions: Sequence[CallDescriptor]
    ) -> list[AggregateResult]:
        if not transactions:
            return []
        return await super().__call__(client, transactions=transactions)


multicall_wrapper = MulticallWrapper()


def to_raw_result(result: AggregateResult) -> RawResult:
    """Map an aggregate entry onto what a participant's ``decode`` expects."""
    if result.success:
        return result.return_data
    return ContractRevertError("sub-call reverted", data=result.return_data)


class Batch(Operation[list[Any]]):
    """Run several :class:`BatchCall` participants as one aggregate call.

    The manual pair needs one extra step when CCIP-read is wanted::

        tx = _batch.encode(client, calls=calls)
        data = await client.execute(tx)
        data = await resolve_batch_results(client, calls, data)
        values = _batch.decode(client, data, calls=calls)

    ``decode`` accepts either the raw aggregate return data or the list
    produced by :func:`resolve_batch_results`.
    """

    def encode(self, client: EnsClient, *, calls: Sequence[BatchCall]) -> CallDescriptor:
        return multicall_wrapper.encode(
            client, transactions=[call.encode(client) for call in calls]
        )

    def decode(
        self,
        client: EnsClient,
        data: RawResult | list[RawResult],
        *,
        calls: Sequence[BatchCall],
    ) -> list[Any]:
        if isinstance(data, list):
            raw = data
        else:
            raw = [to_raw_result(result) for result in multicall_wrapper.decode(client, data)]
        if len(raw) != len(calls):
            raise DecodingError(
                f"Multicall returned {len(raw)} results for {len(calls)} calls"
            )
        return [call.decode(client, item) for call, item in zip(calls, raw)]

    async def __call__(self, client: EnsClient, *, calls: Sequence[BatchCall]) -> list[Any]:
        if not calls:
            return []
        tx = self.encode(client, calls=calls)
        logger.debug("Executing batch of %d calls", len(calls))
        data = await client.execute(tx)
        return self.decode(
            client, await resolve_batch_results(client, calls, data), calls=calls
        )


async def resolve_batch_results(
    client: EnsClient, calls: Sequence[BatchCall], data: RawResult
) -> list[RawResult]:
    """Split aggregate *data* per participant and complete off-chain lookups.

    Sub-calls that reverted with ``OffchainLookup`` are resolved through the
    client's gateways when CCIP-read is enabled; a lookup that fails becomes
    that participant's execution error.
    """
    transactions = [call.encode(client) for call in calls]
    results = multicall_wrapper.decode(client, data, transactions=transactions)
    raw = [to_raw_result(result) for result in results]
    if not client.config.ccip_read:
        return raw

    resolved: list[RawResult] = []
    for tx, item in zip(transactions, raw):
        if isinstance(item, ContractRevertError) and is_offchain_lookup(item.data):
            try:
                item = await client.resolve_offchain(tx, item.data)
            except CallExecutionError as exc:
                item = exc
        resolved.append(item)
    return resolved


_batch = Batch()


async def batch(client: EnsClient, *calls: BatchCall) -> list[Any]:
    """Execute *calls* in one round trip; results are returned in order.

    Each participant decodes its own entry with its own error policy, so a
    failing sub-call yields that operation's failure result (``None`` or an
    exception) without affecting its siblings.
    """
    return await _batch(client, calls=list(calls))


def batch_sync(client: EnsClient, *calls: BatchCall) -> list[Any]:
    """Sync wrapper for batch()."""
    return _run_sync(batch(client, *calls))

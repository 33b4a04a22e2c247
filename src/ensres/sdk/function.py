"""Operation protocol: a read described as an ``encode``/``decode`` pair.

Every operation can be used three ways, all behaviourally equivalent:

  1. Direct::

         result = await get_owner(client, name="alice.eth")

  2. Manual pair (e.g. to rewrite the target before executing)::

         tx = get_owner.encode(client, name="alice.eth")
         result = get_owner.decode(client, await client.execute(tx), name="alice.eth")

  3. Batch participant, merged with other reads into one aggregate call::

         owner, text = await batch(
             client,
             get_owner.batch(name="alice.eth"),
             get_text_record.batch(name="alice.eth", key="url"),
         )

``decode`` receives either the raw result bytes or the
:class:`CallExecutionError` raised while executing.  It returns the typed
result, ``None`` for "no data", or raises when the result is unusable.
"""

from __future__ import annotations

import abc
import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Generic, TypeVar, Union

from ensres.protocol.errors import CallExecutionError
from ensres.protocol.types import CallDescriptor
from ensres.sdk._sync import _run_sync

if TYPE_CHECKING:
    from ensres.sdk.client import EnsClient

logger = logging.getLogger(__name__)

R = TypeVar("R")

RawResult = Union[bytes, CallExecutionError]


def unwrap_result(data: RawResult, *, strict: bool) -> bytes | None:
    """Apply the strict/lenient policy to an execution error.

    Returns *data* unchanged when it is bytes.  An execution error is
    re-raised when *strict* is set and turned into ``None`` otherwise.
    """
    if isinstance(data, CallExecutionError):
        if strict:
            raise data
        logger.debug("Ignoring execution error (strict=False): %s", data)
        return None
    return data


class Operation(abc.ABC, Generic[R]):
    """Base class for every read operation.

    Subclasses implement :meth:`encode` and :meth:`decode` as pure
    functions of their keyword parameters; this class provides the direct,
    batch and sync entry points on top.
    """

    @abc.abstractmethod
    def encode(self, client: EnsClient, **params: Any) -> CallDescriptor:
        """Build the call for *params*.  Must not perform I/O."""

    @abc.abstractmethod
    def decode(self, client: EnsClient, data: RawResult, **params: Any) -> R | None:
        """Turn the raw result (or execution error) into the typed result."""

    async def __call__(self, client: EnsClient, **params: Any) -> R | None:
        tx = self.encode(client, **params)
        try:
            data: RawResult = await client.execute(tx)
        except CallExecutionError as exc:
            data = exc
        return self.decode(client, data, **params)

    def batch(self, **params: Any) -> BatchCall[R]:
        """Bind *params* for use with :func:`~ensres.sdk.multicall.batch`."""
        return BatchCall(operation=self, args=params)

    def sync(self, client: EnsClient, **params: Any) -> R | None:
        """Sync wrapper for a direct call."""
        return _run_sync(self(client, **params))

    def __repr__(self) -> str:
        return f"<{type(self).__name__}>"


@dataclass(frozen=True, eq=False)
class BatchCall(Generic[R]):
    """An operation with its parameters bound, ready to join a batch."""

    operation: Operation[R]
    args: Mapping[str, Any]

    def encode(self, client: EnsClient) -> CallDescriptor:
        return self.operation.encode(client, **self.args)

    def decode(self, client: EnsClient, data: RawResult) -> R | None:
        return self.operation.decode(client, data, **self.args)

"""Name expiry from the registrar or the name wrapper."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import TYPE_CHECKING

from ensres.protocol.abi import (
    MULTICALL_GET_CURRENT_BLOCK_TIMESTAMP,
    REGISTRAR_GRACE_PERIOD,
    REGISTRAR_NAME_EXPIRES,
    WRAPPER_GET_DATA,
)
from ensres.protocol.errors import (
    CallExecutionError,
    ContractRevertError,
    DecodingError,
    InvalidNameError,
    UnsupportedContractError,
)
from ensres.protocol.name import is_managed_tld_name, labelhash, namehash, split_labels
from ensres.protocol.types import CallDescriptor
from ensres.sdk.function import Operation, RawResult
from ensres.sdk.multicall import multicall_wrapper

if TYPE_CHECKING:
    from ensres.sdk.client import EnsClient

# 9999-12-31T23:59:59Z, the largest timestamp datetime can represent
_MAX_SAFE_SECONDS = 253402300799


class ExpiryContract(str, Enum):
    """Contract an expiry is read from."""

    REGISTRAR = "registrar"
    NAME_WRAPPER = "nameWrapper"


class ExpiryStatus(str, Enum):
    """Where a name stands relative to its expiry and grace period."""

    ACTIVE = "active"
    EXPIRED = "expired"
    GRACE_PERIOD = "gracePeriod"


@dataclass(frozen=True)
class Expiry:
    """Expiry of a name.  ``value`` is the raw unix timestamp."""

    value: int
    date: datetime
    # Seconds; zero for wrapper expiries, which already include it
    grace_period: int
    status: ExpiryStatus


def safe_seconds_date(seconds: int) -> datetime:
    """Convert a unix timestamp to an aware datetime, clamping far-future values."""
    return datetime.fromtimestamp(min(seconds, _MAX_SAFE_SECONDS), tz=timezone.utc)


def _resolve_contract(
    client: EnsClient, labels: list[str], contract: ExpiryContract | str | None
) -> ExpiryContract:
    if contract is None:
        if is_managed_tld_name(labels, client.managed_tld):
            return ExpiryContract.REGISTRAR
        return ExpiryContract.NAME_WRAPPER
    try:
        return ExpiryContract(contract)
    except ValueError:
        raise UnsupportedContractError(
            contract, tuple(c.value for c in ExpiryContract)
        ) from None


class GetExpiry(Operation[Expiry]):
    """Gets the expiry of a name.

    Reads the block timestamp in the same aggregate call so that ``status``
    reflects the chain's notion of "now".  Defaults to the registrar for
    second-level names under the managed TLD and to the wrapper otherwise.
    """

    def encode(
        self,
        client: EnsClient,
        *,
        name: str,
        contract: ExpiryContract | str | None = None,
    ) -> CallDescriptor:
        labels = split_labels(name)
        if not labels:
            raise InvalidNameError("The root name has no expiry")
        source = _resolve_contract(client, labels, contract)

        calls = [
            CallDescriptor(
                to=client.contract_address("multicall3"),
                data=MULTICALL_GET_CURRENT_BLOCK_TIMESTAMP.encode(),
            )
        ]
        if source is ExpiryContract.REGISTRAR:
            registrar = client.contract_address("base_registrar")
            calls.append(
                CallDescriptor(
                    to=registrar,
                    data=REGISTRAR_NAME_EXPIRES.encode(
                        int.from_bytes(labelhash(labels[0]), "big")
                    ),
                )
            )
            calls.append(CallDescriptor(to=registrar, data=REGISTRAR_GRACE_PERIOD.encode()))
        else:
            calls.append(
                CallDescriptor(
                    to=client.contract_address("name_wrapper"),
                    data=WRAPPER_GET_DATA.encode(int.from_bytes(namehash(name), "big")),
                )
            )
        return multicall_wrapper.encode(client, transactions=calls)

    def decode(
        self,
        client: EnsClient,
        data: RawResult,
        *,
        name: str,
        contract: ExpiryContract | str | None = None,
    ) -> Expiry | None:
        if isinstance(data, CallExecutionError):
            raise data
        source = _resolve_contract(client, split_labels(name), contract)
        results = multicall_wrapper.decode(client, data)
        expected = 3 if source is ExpiryContract.REGISTRAR else 2
        if len(results) != expected:
            raise DecodingError(f"Expected {expected} expiry results, got {len(results)}")
        for result in results:
            if not result.success:
                raise ContractRevertError("expiry sub-call reverted", data=result.return_data)

        (block_timestamp,) = MULTICALL_GET_CURRENT_BLOCK_TIMESTAMP.decode(results[0].return_data)
        grace_period = 0
        if source is ExpiryContract.REGISTRAR:
            (expiry,) = REGISTRAR_NAME_EXPIRES.decode(results[1].return_data)
            (grace_period,) = REGISTRAR_GRACE_PERIOD.decode(results[2].return_data)
        else:
            _owner, _fuses, expiry = WRAPPER_GET_DATA.decode(results[1].return_data)

        if expiry == 0:
            return None

        if block_timestamp > expiry + grace_period:
            status = ExpiryStatus.EXPIRED
        elif block_timestamp > expiry:
            status = ExpiryStatus.GRACE_PERIOD
        else:
            status = ExpiryStatus.ACTIVE

        return Expiry(
            value=expiry,
            date=safe_seconds_date(expiry),
            grace_period=grace_period,
            status=status,
        )


get_expiry = GetExpiry()

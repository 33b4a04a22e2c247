"""ensres SDK -- read operations over the naming contracts."""

from ensres.sdk.client import EnsClient
from ensres.sdk.config import ClientConfig
from ensres.sdk.expiry import Expiry, ExpiryStatus, get_expiry
from ensres.sdk.function import BatchCall, Operation
from ensres.sdk.multicall import batch, batch_sync, multicall_wrapper, resolve_batch_results
from ensres.sdk.owner import (
    Ownership,
    OwnerContract,
    RegistrarOnlyOwnership,
    RegistryOwnership,
    UnwrappedEth2ldOwnership,
    WrappedOwnership,
    get_owner,
)
from ensres.sdk.primary_name import PrimaryName, get_name
from ensres.sdk.records import (
    AbiRecord,
    AddressRecord,
    get_abi_record,
    get_address_record,
    get_text_record,
)

__all__ = [
    "EnsClient",
    "ClientConfig",
    "Operation",
    "BatchCall",
    "batch",
    "batch_sync",
    "multicall_wrapper",
    "resolve_batch_results",
    # Ownership
    "get_owner",
    "Ownership",
    "OwnerContract",
    "RegistrarOnlyOwnership",
    "WrappedOwnership",
    "UnwrappedEth2ldOwnership",
    "RegistryOwnership",
    # Records
    "get_address_record",
    "get_text_record",
    "get_abi_record",
    "AddressRecord",
    "AbiRecord",
    # Reverse + expiry
    "get_name",
    "PrimaryName",
    "get_expiry",
    "Expiry",
    "ExpiryStatus",
]

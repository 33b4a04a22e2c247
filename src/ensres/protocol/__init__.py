"""ensres protocol -- pure, I/O-free building blocks.

Public API re-exports for ``ensres.protocol``.
"""

from ensres.protocol.types import (
    EMPTY_ADDRESS,
    EMPTY_BYTES32,
    AggregateResult,
    CallDescriptor,
    OwnershipLevel,
)

from ensres.protocol.errors import (
    EnsResError,
    ConfigurationError,
    UnsupportedContractError,
    UnsupportedChainError,
    ContractAddressNotFoundError,
    UnsupportedCoinError,
    InvalidNameError,
    CallExecutionError,
    ContractRevertError,
    TransportError,
    OffchainLookupError,
    DecodingError,
)

from ensres.protocol.name import (
    DEFAULT_MANAGED_TLD,
    NameType,
    dns_encode,
    get_name_type,
    is_managed_tld_name,
    labelhash,
    namehash,
    normalise,
    split_labels,
)

from ensres.protocol.contracts import (
    SUPPORTED_CONTRACTS,
    get_chain_contract_address,
    has_chain_contract,
)

from ensres.protocol.coins import Coin, format_address_record, get_coin

__all__ = [
    # Types
    "EMPTY_ADDRESS",
    "EMPTY_BYTES32",
    "AggregateResult",
    "CallDescriptor",
    "OwnershipLevel",
    # Errors
    "EnsResError",
    "ConfigurationError",
    "UnsupportedContractError",
    "UnsupportedChainError",
    "ContractAddressNotFoundError",
    "UnsupportedCoinError",
    "InvalidNameError",
    "CallExecutionError",
    "ContractRevertError",
    "TransportError",
    "OffchainLookupError",
    "DecodingError",
    # Names
    "DEFAULT_MANAGED_TLD",
    "NameType",
    "dns_encode",
    "get_name_type",
    "is_managed_tld_name",
    "labelhash",
    "namehash",
    "normalise",
    "split_labels",
    # Contracts
    "SUPPORTED_CONTRACTS",
    "get_chain_contract_address",
    "has_chain_contract",
    # Coins
    "Coin",
    "format_address_record",
    "get_coin",
]

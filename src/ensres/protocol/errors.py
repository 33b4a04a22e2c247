"""ensres exception hierarchy.

All library exceptions inherit from :class:`EnsResError`.

Execution failures (:class:`CallExecutionError` and subclasses) are special:
operations receive them *as values* in ``decode`` and decide per their own
strict policy whether to raise them or turn them into ``None``.
"""

from __future__ import annotations


class EnsResError(Exception):
    """Base exception for all ensres errors."""


class ConfigurationError(EnsResError):
    """Raised at encode time when the network context cannot satisfy a call."""


class UnsupportedContractError(ConfigurationError):
    """Raised when an unknown contract layer is requested."""

    def __init__(self, contract: object, supported: tuple[str, ...]) -> None:
        self.contract = contract
        self.supported = supported
        super().__init__(
            f"Unsupported contract type: {contract!r}. "
            f"Must be one of: {', '.join(supported)}"
        )


class UnsupportedChainError(ConfigurationError):
    """Raised when no contract address table exists for a chain."""

    def __init__(self, chain_id: int) -> None:
        self.chain_id = chain_id
        super().__init__(f"Unsupported chain: {chain_id}")


class ContractAddressNotFoundError(ConfigurationError):
    """Raised when the chain's address table lacks a contract entry."""

    def __init__(self, chain_id: int, contract: str) -> None:
        self.chain_id = chain_id
        self.contract = contract
        super().__init__(
            f"No address for contract '{contract}' on chain {chain_id}"
        )


class UnsupportedCoinError(ConfigurationError):
    """Raised when a coin symbol is not in the coin table."""


class InvalidNameError(EnsResError):
    """Raised when a name string cannot be parsed into labels."""


class CallExecutionError(EnsResError):
    """Raised (or propagated as a value) when executing a call fails."""


class ContractRevertError(CallExecutionError):
    """The call reverted.  ``data`` holds the raw revert payload."""

    def __init__(self, message: str = "execution reverted", data: bytes = b"") -> None:
        self.data = data
        super().__init__(message)


class TransportError(CallExecutionError):
    """The RPC endpoint could not be reached or returned a non-revert error."""


class OffchainLookupError(CallExecutionError):
    """An off-chain (CCIP-read) round trip failed."""


class DecodingError(EnsResError):
    """Returned bytes do not match the expected ABI shape."""

"""Chain -> contract address table.

Built-in deployments cover mainnet and Sepolia.  Any other chain (a local
devnet, a fork) needs a full table passed as *overrides*.
"""

from __future__ import annotations

from collections.abc import Mapping

from ensres.protocol.errors import ContractAddressNotFoundError, UnsupportedChainError

SUPPORTED_CONTRACTS = (
    "registry",
    "base_registrar",
    "name_wrapper",
    "public_resolver",
    "universal_resolver",
    "multicall3",
)

# Multicall3 lives at the same address on every major EVM chain
MULTICALL3_ADDRESS = "0xcA11bde05977b3631167028862bE2a173976CA11"

DEFAULT_ADDRESSES: dict[int, dict[str, str]] = {
    1: {
        "registry": "0x00000000000C2E074eC69A0dFb2997BA6C7d2e1e",
        "base_registrar": "0x57f1887a8BF19b14fC0dF6Fd9B2acc9Af147eA85",
        "name_wrapper": "0xD4416b13d2b3a9aBae7AcD5D6C2BbDBE25686401",
        "public_resolver": "0x231b0Ee14048e9dCcD1d247744d114a4EB5E8E63",
        "universal_resolver": "0xce01f8eee7E479C928F8919abD53E553a36CeF67",
        "multicall3": MULTICALL3_ADDRESS,
    },
    11155111: {
        "registry": "0x00000000000C2E074eC69A0dFb2997BA6C7d2e1e",
        "base_registrar": "0x57f1887a8BF19b14fC0dF6Fd9B2acc9Af147eA85",
        "name_wrapper": "0x0635513f179D50A207757E05759CbD106d7dFcE8",
        "public_resolver": "0x8FADE66B79cC9f707aB26799354482EB93a5B7dD",
        "universal_resolver": "0xc8Af999e38273D658BE1b921b88A9Ddf005769cC",
        "multicall3": MULTICALL3_ADDRESS,
    },
}


def get_chain_contract_address(
    chain_id: int,
    contract: str,
    overrides: Mapping[str, str] | None = None,
) -> str:
    """Look up *contract* for *chain_id*.

    *overrides* take precedence over the built-in table.  When the chain has
    no built-in table, *overrides* must contain the entry.

    Raises:
        UnsupportedChainError: No table for *chain_id* and no overrides given.
        ContractAddressNotFoundError: The table has no entry for *contract*.
    """
    if overrides and contract in overrides:
        return overrides[contract]
    table = DEFAULT_ADDRESSES.get(chain_id)
    if table is None:
        if not overrides:
            raise UnsupportedChainError(chain_id)
        raise ContractAddressNotFoundError(chain_id, contract)
    try:
        return table[contract]
    except KeyError:
        raise ContractAddressNotFoundError(chain_id, contract) from None


def has_chain_contract(
    chain_id: int,
    contract: str,
    overrides: Mapping[str, str] | None = None,
) -> bool:
    """True if :func:`get_chain_contract_address` would succeed."""
    if overrides and contract in overrides:
        return True
    return contract in DEFAULT_ADDRESSES.get(chain_id, {})

"""Coin types for address records (SLIP-44 plus ENSIP-11 EVM chains).

Only EVM-style coins get a typed format (EIP-55 checksummed addresses);
every other coin type is returned as ``0x``-prefixed hex.
"""

from __future__ import annotations

from dataclasses import dataclass

from eth_utils import to_checksum_address

from ensres.protocol.errors import DecodingError, UnsupportedCoinError

ETH_COIN_TYPE = 60

# ENSIP-11: coin type for an EVM chain is 0x80000000 | chainId
EVM_COIN_TYPE_FLAG = 0x80000000

_EVM_CHAINS = {
    "OP": 10,
    "BSC": 56,
    "GNO": 100,
    "MATIC": 137,
    "BASE": 8453,
    "ARB1": 42161,
    "AVAXC": 43114,
    "LINEA": 59144,
    "SCR": 534352,
}

COIN_TYPES: dict[str, int] = {
    "BTC": 0,
    "LTC": 2,
    "DOGE": 3,
    "ETH": ETH_COIN_TYPE,
    "ETC": 61,
    **{symbol: EVM_COIN_TYPE_FLAG | chain_id for symbol, chain_id in _EVM_CHAINS.items()},
}

COIN_NAMES: dict[int, str] = {coin_type: symbol for symbol, coin_type in COIN_TYPES.items()}

_EVM_LIKE = {ETH_COIN_TYPE, COIN_TYPES["ETC"]}


@dataclass(frozen=True)
class Coin:
    id: int
    name: str | None


def get_coin(coin: int | str) -> Coin:
    """Resolve a coin symbol or numeric coin type.

    Numeric coin types outside the table are accepted with ``name=None``.

    Raises:
        UnsupportedCoinError: Unknown symbol, or a negative coin type.
    """
    if isinstance(coin, str):
        if coin.isdigit():
            coin = int(coin)
        else:
            symbol = coin.upper()
            if symbol not in COIN_TYPES:
                raise UnsupportedCoinError(f"Unsupported coin: {coin!r}")
            return Coin(id=COIN_TYPES[symbol], name=symbol)
    if coin < 0:
        raise UnsupportedCoinError(f"Invalid coin type: {coin}")
    return Coin(id=coin, name=COIN_NAMES.get(coin))


def is_evm_coin_type(coin_type: int) -> bool:
    return coin_type in _EVM_LIKE or coin_type & EVM_COIN_TYPE_FLAG != 0


def format_address_record(
    coin_type: int, raw: bytes, bypass_format: bool = False
) -> str:
    """Render raw record bytes in the coin's native address format."""
    if bypass_format or not is_evm_coin_type(coin_type):
        return "0x" + raw.hex()
    if len(raw) != 20:
        raise DecodingError(
            f"EVM address record for coin {coin_type} must be 20 bytes, got {len(raw)}"
        )
    return to_checksum_address(raw)

"""ensres transport layer."""

from ensres.sdk.transport.base import TransportBase
from ensres.sdk.transport.rpc import Web3Transport


def create_transport(config) -> TransportBase:
    """Factory to create the transport described by *config*."""
    return Web3Transport(rpc_url=config.rpc_url, timeout=config.request_timeout)


__all__ = [
    "TransportBase",
    "Web3Transport",
    "create_transport",
]

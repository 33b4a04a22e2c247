"""ensres -- client-side resolution for the on-chain naming system.

Top-level convenience re-exports::

    from ensres import EnsClient, get_owner, batch
    from ensres.protocol import namehash, OwnershipLevel  # pure helpers
"""

__version__ = "0.1.0"

from ensres.sdk import (
    EnsClient,
    batch,
    get_abi_record,
    get_address_record,
    get_expiry,
    get_name,
    get_owner,
    get_text_record,
)

__all__ = [
    "__version__",
    "EnsClient",
    "batch",
    "get_owner",
    "get_address_record",
    "get_text_record",
    "get_abi_record",
    "get_name",
    "get_expiry",
]

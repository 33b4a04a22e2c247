#!/usr/bin/env python3
"""ensres Profile Demo

Resolves a name's owner, expiry, address and a handful of text records in
a single aggregate call, then reverse-resolves the owner's primary name.
Uses only the public ensres API.

Usage:
    python3 demo.py --rpc-url https://ethereum-rpc.publicnode.com --name ens.eth
"""

from __future__ import annotations

import argparse
import asyncio

# Only public API -- no internal imports
from ensres import EnsClient, batch, get_name
from ensres.sdk import get_address_record, get_expiry, get_owner, get_text_record

TEXT_KEYS = ("url", "com.twitter", "com.github", "description")


async def main() -> None:
    parser = argparse.ArgumentParser(description="ensres Profile Demo")
    parser.add_argument("--rpc-url", default=None, help="JSON-RPC endpoint (default: ENSRES_RPC_URL or public node)")
    parser.add_argument("--chain-id", type=int, default=None, help="Chain id (default: 1)")
    parser.add_argument("--name", default="ens.eth", help="Name to look up (default: ens.eth)")
    args = parser.parse_args()

    print("=" * 60)
    print(f"  ensres Profile Demo -- {args.name}")
    print("=" * 60)
    print()

    async with EnsClient(rpc_url=args.rpc_url, chain_id=args.chain_id) as client:
        print("[1/2] Batch lookup (one eth_call)...")
        owner, expiry, address, *texts = await batch(
            client,
            get_owner.batch(name=args.name),
            get_expiry.batch(name=args.name),
            get_address_record.batch(name=args.name),
            *(get_text_record.batch(name=args.name, key=key) for key in TEXT_KEYS),
        )
        print(f"  Owner:    {owner}")
        print(f"  Expiry:   {expiry.date.isoformat() if expiry else '-'} ({expiry.status.value if expiry else 'n/a'})")
        print(f"  Address:  {address.value if address else '-'}")
        for key, value in zip(TEXT_KEYS, texts):
            print(f"  {key + ':':<14}{value or '-'}")
        print()

        if address is None:
            print("[2/2] No address record -- skipping reverse lookup")
            return

        print(f"[2/2] Primary name of {address.value}...")
        primary = await get_name(client, address=address.value)
        print(f"  Primary:  {primary.name if primary else '-'}")


if __name__ == "__main__":
    asyncio.run(main())

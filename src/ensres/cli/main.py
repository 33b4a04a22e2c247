"""ensres CLI -- resolve names from the command line.

Thin wrapper around the SDK operations using click.  Every command runs a
single operation through the sync bridge and closes the client afterwards.
"""

from __future__ import annotations

import dataclasses
import json
import logging
from datetime import datetime
from enum import Enum
from typing import Any

import click

from ensres.protocol import EnsResError
from ensres.sdk.client import EnsClient
from ensres.sdk.config import ClientConfig
from ensres.sdk.expiry import get_expiry
from ensres.sdk.function import Operation
from ensres.sdk.owner import OwnerContract, get_owner
from ensres.sdk.primary_name import get_name
from ensres.sdk.records import get_abi_record, get_address_record, get_text_record
from ensres.sdk._sync import _run_sync


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _error(msg: str) -> None:
    """Print an error message to stderr and exit 1."""
    click.echo(msg, err=True)
    raise SystemExit(1)


def _make_client(ctx: click.Context) -> EnsClient:
    cfg = ClientConfig(
        rpc_url=ctx.obj.get("rpc_url"),
        chain_id=ctx.obj.get("chain_id"),
    )
    return EnsClient(config=cfg)


async def _call_and_close(client: EnsClient, operation: Operation, params: dict) -> Any:
    try:
        return await operation(client, **params)
    finally:
        await client.close()


def _run(ctx: click.Context, operation: Operation, **params: Any) -> Any:
    try:
        client = _make_client(ctx)
        return _run_sync(_call_and_close(client, operation, params))
    except (EnsResError, ValueError) as exc:
        _error(f"Error: {exc}")


def _to_jsonable(value: Any) -> Any:
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        data = {f.name: _to_jsonable(getattr(value, f.name)) for f in dataclasses.fields(value)}
        level = getattr(value, "ownership_level", None)
        if level is not None:
            data["ownership_level"] = level.value
        return data
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, bytes):
        return "0x" + value.hex()
    if isinstance(value, (list, tuple)):
        return [_to_jsonable(v) for v in value]
    return value


def _output(result: Any, as_json: bool, empty_message: str) -> None:
    if as_json:
        click.echo(json.dumps(_to_jsonable(result), indent=2))
        return
    if result is None:
        click.echo(empty_message)
        return
    if isinstance(result, str):
        click.echo(result)
        return
    for key, value in _to_jsonable(result).items():
        if not isinstance(value, str):
            value = json.dumps(value)
        click.echo(f"{key + ':':<26} {value}")


json_option = click.option("--json", "as_json", is_flag=True, help="Print JSON output.")


# ---------------------------------------------------------------------------
# CLI group
# ---------------------------------------------------------------------------


@click.group()
@click.version_option(package_name="ensres")
@click.option("--rpc-url", default=None, help="JSON-RPC endpoint (env: ENSRES_RPC_URL).")
@click.option("--chain-id", type=int, default=None, help="Chain id (env: ENSRES_CHAIN_ID).")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging.")
@click.pass_context
def cli(ctx: click.Context, rpc_url: str | None, chain_id: int | None, verbose: bool) -> None:
    """ensres -- resolve names, owners and records."""
    ctx.ensure_object(dict)
    ctx.obj["rpc_url"] = rpc_url
    ctx.obj["chain_id"] = chain_id
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG, format="%(asctime)s %(name)s %(levelname)s %(message)s"
        )


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


@cli.command()
@click.argument("name")
@click.option(
    "--contract",
    type=click.Choice([c.value for c in OwnerContract]),
    default=None,
    help="Read ownership from this contract layer only.",
)
@json_option
@click.pass_context
def owner(ctx: click.Context, name: str, contract: str | None, as_json: bool) -> None:
    """Show who owns NAME."""
    result = _run(ctx, get_owner, name=name, contract=contract)
    _output(result, as_json, f"{name} has no owner")


@cli.command()
@click.argument("name")
@click.option("--coin", default="ETH", show_default=True, help="Coin symbol or coin type.")
@click.option("--strict", is_flag=True, help="Fail instead of printing nothing on errors.")
@json_option
@click.pass_context
def addr(ctx: click.Context, name: str, coin: str, strict: bool, as_json: bool) -> None:
    """Show the address record of NAME."""
    result = _run(ctx, get_address_record, name=name, coin=coin, strict=strict)
    _output(result, as_json, f"No {coin} address record for {name}")


@cli.command()
@click.argument("name")
@click.argument("key")
@click.option("--strict", is_flag=True, help="Fail instead of printing nothing on errors.")
@json_option
@click.pass_context
def text(ctx: click.Context, name: str, key: str, strict: bool, as_json: bool) -> None:
    """Show text record KEY of NAME."""
    result = _run(ctx, get_text_record, name=name, key=key, strict=strict)
    _output(result, as_json, f"No '{key}' text record for {name}")


@cli.command()
@click.argument("name")
@click.option("--strict", is_flag=True, help="Fail instead of printing nothing on errors.")
@json_option
@click.pass_context
def abi(ctx: click.Context, name: str, strict: bool, as_json: bool) -> None:
    """Show the ABI record of NAME."""
    result = _run(ctx, get_abi_record, name=name, strict=strict)
    _output(result, as_json, f"No ABI record for {name}")


@cli.command()
@click.argument("address")
@click.option("--allow-mismatch", is_flag=True, help="Show names that do not resolve back.")
@json_option
@click.pass_context
def name(ctx: click.Context, address: str, allow_mismatch: bool, as_json: bool) -> None:
    """Show the primary name of ADDRESS."""
    result = _run(ctx, get_name, address=address, allow_mismatch=allow_mismatch)
    _output(result, as_json, f"No primary name for {address}")


@cli.command()
@click.argument("name")
@click.option(
    "--contract",
    type=click.Choice(["registrar", "nameWrapper"]),
    default=None,
    help="Read expiry from this contract.",
)
@json_option
@click.pass_context
def expiry(ctx: click.Context, name: str, contract: str | None, as_json: bool) -> None:
    """Show when NAME expires."""
    result = _run(ctx, get_expiry, name=name, contract=contract)
    _output(result, as_json, f"{name} has no expiry")

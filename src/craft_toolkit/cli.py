#!/usr/bin/env python3
"""
craft command line

Assemble ContractCreate / ContractCall transactions from YAML definitions,
print them, or submit them to a node.
"""

import asyncio
import logging
import sys
from pathlib import Path
from typing import Any, Dict, Optional

import click

from craft_toolkit.client import LedgerClient
from craft_toolkit.codec_adapter import tx_to_json
from craft_toolkit.config import ClientConfig
from craft_toolkit.definitions import dump_yaml, load_call, load_create, load_definition
from craft_toolkit.errors import EncodeError

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(message)s",
)
logger = logging.getLogger(__name__)


def _emit(body: Dict[str, Any], fmt: str) -> None:
    if fmt == "yaml":
        click.echo(dump_yaml(body), nl=False)
    else:
        click.echo(tx_to_json(body, indent=2))


def _fail(e: EncodeError) -> None:
    click.echo(str(e), err=True)
    sys.exit(1)


_definition = click.argument("definition", type=click.Path(exists=True, dir_okay=False, path_type=Path))
_format = click.option(
    "--format",
    "fmt",
    type=click.Choice(["json", "yaml"]),
    default="json",
    show_default=True,
    help="Output format",
)


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output")
def main(verbose: bool) -> None:
    """Contract transaction toolkit."""
    if verbose:
        logging.getLogger().setLevel(logging.DEBUG)


@main.command()
@_definition
@_format
def create(definition: Path, fmt: str) -> None:
    """Print the ContractCreate body for DEFINITION."""
    try:
        body = load_create(definition)
    except EncodeError as e:
        _fail(e)
    _emit(body, fmt)


@main.command()
@_definition
@_format
def call(definition: Path, fmt: str) -> None:
    """Print the ContractCall body for DEFINITION."""
    try:
        body = load_call(definition)
    except EncodeError as e:
        _fail(e)
    _emit(body, fmt)


@main.command()
@_definition
@click.option("--secret", envvar="CRAFT_SECRET", required=True, help="Signing secret (sign-and-submit)")
@click.option("--endpoint", default=None, help="Node JSON-RPC URL (default: from XRPLD_* env)")
def submit(definition: Path, secret: str, endpoint: Optional[str]) -> None:
    """Assemble DEFINITION, submit it and wait for validation.

    A ContractCreate prints the new contract id and account.
    """
    try:
        kind, body = load_definition(definition)
    except EncodeError as e:
        _fail(e)
    logger.info(f"Submitting {kind} transaction from {definition}")

    async def run() -> Dict[str, Any]:
        async with LedgerClient(ClientConfig.from_env(), endpoint) as client:
            if kind == "create":
                return await client.create_contract(body, secret)
            return await client.submit_and_wait(body, secret)

    try:
        result = asyncio.run(run())
    except EncodeError as e:
        _fail(e)
    click.echo(tx_to_json(result, indent=2))
    if kind == "create":
        logger.info(f"Contract {result['id']} created at {result['account']}")
    elif not str(result.get("engine_result", "")).startswith("tes"):
        sys.exit(1)


if __name__ == "__main__":
    main()

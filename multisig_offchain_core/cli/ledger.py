"""CLI commands for the local ledger."""

import logging
from pathlib import Path

import click

from multisig_offchain_core.blockchain.exceptions import LedgerError

from .config.formatting import (
    print_address_info,
    print_confirmation_message_prompt,
    print_header,
    print_status,
    print_value_info,
)
from .config.utils import async_command
from .setup import create_ledger, load_config, parse_identity

logger = logging.getLogger(__name__)

config_option = click.option(
    "--config",
    type=click.Path(exists=True, path_type=Path),
    required=True,
    help="Path to configuration YAML",
)


@click.group()
def ledger() -> None:
    """Local ledger commands."""


@ledger.command()
@config_option
@click.option("--force", is_flag=True, help="Overwrite existing state without asking")
def init(config: Path, force: bool) -> None:
    """Create an empty ledger state file."""
    multisig_config = load_config(config)
    state_path = Path(multisig_config.ledger.state_path)

    if state_path.exists():
        if not force and not print_confirmation_message_prompt(
            f"{state_path} exists. Reset the ledger?"
        ):
            raise click.Abort()
        state_path.unlink()

    try:
        local_ledger = create_ledger(multisig_config)
        local_ledger.save()
    except (LedgerError, OSError) as e:
        logger.error("Ledger init failed", exc_info=e)
        raise click.ClickException(str(e)) from e

    print_status("Ledger", f"initialized at {state_path}")
    print_address_info("Program", multisig_config.program_id.hex())


@ledger.command()
@config_option
@click.argument("address", callback=parse_identity)
@click.argument("amount", type=click.IntRange(min=1))
@async_command
async def airdrop(config: Path, address: bytes, amount: int) -> None:
    """Credit AMOUNT lamports to ADDRESS."""
    try:
        local_ledger = create_ledger(load_config(config))
        balance = await local_ledger.airdrop(address, amount)
    except (LedgerError, OSError) as e:
        logger.error("Airdrop failed", exc_info=e)
        raise click.ClickException(str(e)) from e

    print_status("Airdrop", f"{amount} lamports to {address.hex()}")
    print_value_info("Balance", balance)


@ledger.command()
@config_option
@click.argument("address", callback=parse_identity)
@async_command
async def balance(config: Path, address: bytes) -> None:
    """Show the balance of ADDRESS."""
    try:
        local_ledger = create_ledger(load_config(config))
        account = await local_ledger.get_account(address)
    except LedgerError as e:
        raise click.ClickException(str(e)) from e

    print_header("Account")
    print_address_info("Address", address.hex())
    print_value_info("Balance", account.balance if account else 0)
    if account and account.space:
        print_value_info("Rent reserve", local_ledger.minimum_balance(account.space))


@ledger.command()
@config_option
@click.argument("seconds", type=click.IntRange(min=0))
def warp(config: Path, seconds: int) -> None:
    """Move the ledger clock forward by SECONDS."""
    try:
        local_ledger = create_ledger(load_config(config))
        now = local_ledger.warp_time(seconds)
    except (LedgerError, OSError) as e:
        raise click.ClickException(str(e)) from e

    print_status("Clock", f"advanced {seconds}s")
    print_value_info("Ledger time", now)

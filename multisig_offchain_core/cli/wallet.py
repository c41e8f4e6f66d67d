"""CLI commands for multisig wallet operations."""

import logging
from pathlib import Path

import click

from multisig_offchain_core.blockchain.exceptions import LedgerError
from multisig_offchain_core.constants.status import ProcessStatus
from multisig_offchain_core.wallet.lifecycle.orchestrator import WalletResult

from .config.formatting import (
    print_address_info,
    print_hash_info,
    print_header,
    print_progress,
    print_proposals_table,
    print_status,
    print_wallet_summary,
)
from .config.utils import async_command
from .setup import (
    load_signing_key,
    parse_identity,
    setup_wallet_from_config,
    signer_identity,
)

logger = logging.getLogger(__name__)

config_option = click.option(
    "--config",
    type=click.Path(exists=True, path_type=Path),
    required=True,
    help="Path to configuration YAML",
)
signing_key_option = click.option(
    "--signing-key",
    type=click.Path(exists=True, path_type=Path),
    help="Signing key file, overrides the wallet section of the config",
)
wallet_option = click.option(
    "--wallet",
    "wallet_address",
    required=True,
    callback=parse_identity,
    help="Wallet address (hex)",
)
proposal_option = click.option(
    "--proposal",
    "proposal_address",
    required=True,
    callback=parse_identity,
    help="Proposal address (hex)",
)


def error_code(error: Exception | None) -> str:
    return getattr(error, "code", type(error).__name__)


def report_result(operation: str, result: WalletResult) -> None:
    """Print a completed result or raise ``ClickException`` for a failed one."""
    if result.status != ProcessStatus.COMPLETED:
        raise click.ClickException(
            f"{operation} failed: {error_code(result.error)}: {result.error}"
        )

    print_status(operation, "Transaction confirmed")
    if result.address:
        print_address_info("Address", result.address.hex())
    if result.receipt:
        print_hash_info("Transaction ID", result.receipt.transaction_id)
        for line in result.receipt.logs:
            click.echo(f"  {line}")


@click.group()
def wallet() -> None:
    """Multisig wallet commands."""


@wallet.command()
@config_option
@signing_key_option
@click.option(
    "--owners",
    multiple=True,
    required=True,
    callback=parse_identity,
    help="Owner public key (hex), repeat per owner. The signer is prepended if absent.",
)
@click.option("--threshold", type=int, required=True, help="Approvals required")
@async_command
async def create(
    config: Path, signing_key: Path | None, owners: list[bytes], threshold: int
) -> None:
    """Create a wallet funded by the signer."""
    setup = setup_wallet_from_config(config)
    key = load_signing_key(setup.config, signing_key)

    creator = signer_identity(key)
    owner_list = list(owners)
    if creator not in owner_list:
        owner_list.insert(0, creator)

    print_progress(f"Creating {threshold}-of-{len(owner_list)} wallet")
    result = await setup.orchestrator.create_wallet(owner_list, threshold, key)
    report_result("Create wallet", result)


@wallet.command()
@config_option
@signing_key_option
@wallet_option
@click.option("--amount", type=click.IntRange(min=0), required=True)
@click.option("--recipient", required=True, callback=parse_identity)
@click.option(
    "--expires-in-hours", type=click.IntRange(min=0), default=24, show_default=True
)
@async_command
async def propose(
    config: Path,
    signing_key: Path | None,
    wallet_address: bytes,
    amount: int,
    recipient: bytes,
    expires_in_hours: int,
) -> None:
    """Propose a transfer out of a wallet."""
    setup = setup_wallet_from_config(config)
    key = load_signing_key(setup.config, signing_key)

    result = await setup.orchestrator.propose(
        wallet_address, amount, recipient, expires_in_hours, key
    )
    report_result("Propose", result)


@wallet.command()
@config_option
@signing_key_option
@wallet_option
@proposal_option
@async_command
async def approve(
    config: Path,
    signing_key: Path | None,
    wallet_address: bytes,
    proposal_address: bytes,
) -> None:
    """Approve a pending proposal."""
    setup = setup_wallet_from_config(config)
    key = load_signing_key(setup.config, signing_key)

    result = await setup.orchestrator.approve(wallet_address, proposal_address, key)
    report_result("Approve", result)


@wallet.command()
@config_option
@signing_key_option
@wallet_option
@proposal_option
@async_command
async def execute(
    config: Path,
    signing_key: Path | None,
    wallet_address: bytes,
    proposal_address: bytes,
) -> None:
    """Execute a proposal that reached its threshold."""
    setup = setup_wallet_from_config(config)
    key = load_signing_key(setup.config, signing_key)

    result = await setup.orchestrator.execute(wallet_address, proposal_address, key)
    report_result("Execute", result)


@wallet.command()
@config_option
@signing_key_option
@wallet_option
@proposal_option
@async_command
async def cancel(
    config: Path,
    signing_key: Path | None,
    wallet_address: bytes,
    proposal_address: bytes,
) -> None:
    """Cancel a pending proposal."""
    setup = setup_wallet_from_config(config)
    key = load_signing_key(setup.config, signing_key)

    result = await setup.orchestrator.cancel(wallet_address, proposal_address, key)
    report_result("Cancel", result)


@wallet.command()
@config_option
@wallet_option
@async_command
async def show(config: Path, wallet_address: bytes) -> None:
    """Show a wallet's owners, threshold and funds."""
    setup = setup_wallet_from_config(config)
    try:
        record = await setup.query.get_wallet(wallet_address)
    except LedgerError as e:
        raise click.ClickException(f"{error_code(e)}: {e}") from e

    if record is None:
        raise click.ClickException(f"No wallet at {wallet_address.hex()}")

    print_wallet_summary(
        wallet_address,
        record,
        await setup.ledger.get_balance(wallet_address),
        await setup.query.spendable_balance(wallet_address),
    )


@wallet.command()
@config_option
@wallet_option
@async_command
async def proposals(config: Path, wallet_address: bytes) -> None:
    """List a wallet's proposals."""
    setup = setup_wallet_from_config(config)
    try:
        views = await setup.query.list_proposal_views(wallet_address)
    except LedgerError as e:
        raise click.ClickException(f"{error_code(e)}: {e}") from e

    print_header(f"Wallet {wallet_address.hex()}")
    print_proposals_table(views)

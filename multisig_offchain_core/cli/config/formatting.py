"""CLI output formatting for wallet operations."""

import click
from tabulate import tabulate

from multisig_offchain_core.models.wallet_accounts import (
    MultisigWallet,
    ProposalStatus,
)
from multisig_offchain_core.wallet.queries import ProposalView

from ...constants.colors import CliColor
from ...constants.status import ProcessStatus


def print_header(text: str) -> None:
    """Print styled header text."""
    click.echo()
    click.secho(f"=== {text} ===", fg=CliColor.HEADER, bold=True)
    click.echo()


def print_address_info(label: str, address: str) -> None:
    """Print formatted address information."""
    click.echo(
        f"{click.style(label, fg=CliColor.INFO)}: "
        f"{click.style(address, fg=CliColor.ADDRESS)}"
    )


def print_hash_info(label: str, hash_value: str) -> None:
    """Print formatted hash information."""
    click.echo(
        f"{click.style(label, fg=CliColor.INFO)}: "
        f"{click.style(hash_value, fg=CliColor.HASH)}"
    )


def print_value_info(label: str, value: object) -> None:
    click.echo(
        f"{click.style(label, fg=CliColor.INFO)}: "
        f"{click.style(str(value), fg=CliColor.VALUE)}"
    )


def print_status(status: str, message: str, success: bool = True) -> None:
    """Print status message with appropriate styling."""
    icon = "✓" if success else "✗"
    color = CliColor.SUCCESS if success else CliColor.ERROR
    click.secho(f"{icon} {status}: {message}", fg=color)


def print_progress(message: str) -> None:
    """Print progress message."""
    click.secho(f"⟳ {message}...", fg=CliColor.PROGRESS)


def format_status_update(status: ProcessStatus, message: str) -> None:
    """Format and display orchestrator status updates."""
    colors = {
        ProcessStatus.NOT_STARTED: CliColor.INFO,
        ProcessStatus.BUILDING_TRANSACTION: CliColor.INFO,
        ProcessStatus.TRANSACTION_BUILT: CliColor.INFO,
        ProcessStatus.SIGNING_TRANSACTION: CliColor.WARNING,
        ProcessStatus.TRANSACTION_SIGNED: CliColor.SUCCESS,
        ProcessStatus.SUBMITTING_TRANSACTION: CliColor.WARNING,
        ProcessStatus.TRANSACTION_CONFIRMED: CliColor.SUCCESS,
        ProcessStatus.COMPLETED: CliColor.SUCCESS,
        ProcessStatus.FAILED: CliColor.ERROR,
    }

    click.secho(f"\n[{status.value}]", fg=colors.get(status, CliColor.INFO), bold=True)
    click.secho(message, fg=colors.get(status, CliColor.INFO))


def print_confirmation_message_prompt(message: str) -> bool:
    """Print colored confirmation prompt for message."""
    return click.confirm(click.style(message, fg=CliColor.WARNING, bold=True))


def print_wallet_summary(
    address: bytes, wallet: MultisigWallet, balance: int, spendable: int
) -> None:
    print_header("Multisig Wallet")
    print_address_info("Address", address.hex())
    print_value_info("Threshold", f"{wallet.threshold} of {wallet.owner_count}")
    print_value_info("Proposals", wallet.nonce)
    print_value_info("Balance", balance)
    print_value_info("Spendable", spendable)

    click.echo()
    for i, owner in enumerate(wallet.active_owners):
        print_address_info(f"Owner {i}", owner.hex())


STATUS_COLORS = {
    ProposalStatus.PENDING: CliColor.PENDING,
    ProposalStatus.EXPIRED: CliColor.EXPIRED,
    ProposalStatus.EXECUTED: CliColor.EXECUTED,
    ProposalStatus.CANCELLED: CliColor.CANCELLED,
}


def print_proposals_table(views: list[ProposalView]) -> None:
    """Print a wallet's proposals in a table."""
    print_header("Proposals")
    if not views:
        click.secho("No proposals", fg=CliColor.NEUTRAL)
        return

    headers = ["#", "Address", "Amount", "Recipient", "Approvals", "Status", "Ready"]
    table_data = [
        [
            view.proposal.nonce,
            view.address.hex(),
            view.proposal.amount,
            view.proposal.recipient.hex()[:16],
            f"{view.approval_count}/{view.threshold}",
            click.style(view.status.value, fg=STATUS_COLORS[view.status]),
            "yes" if view.can_execute else "no",
        ]
        for view in views
    ]

    table = tabulate(
        table_data,
        headers=headers,
        tablefmt="rst",
        stralign="center",
        numalign="center",
    )
    click.echo(table)

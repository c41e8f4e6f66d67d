"""Main CLI entry point for multisig wallet tools."""

import click

from multisig_offchain_core.cli.config.utils import setup_logging
from multisig_offchain_core.cli.keys import keys
from multisig_offchain_core.cli.ledger import ledger
from multisig_offchain_core.cli.wallet import wallet


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Enable verbose logging")
def cli(verbose: bool) -> None:
    """Multisig wallet CLI tools."""
    setup_logging(verbose)


# Add command groups
cli.add_command(keys)
cli.add_command(ledger)
cli.add_command(wallet)


if __name__ == "__main__":
    cli()

"""Shared setup for CLI commands: config, ledger, keys and orchestrator."""

import logging
from pathlib import Path
from typing import NamedTuple

import click
from nacl.signing import SigningKey

from multisig_offchain_core.blockchain.exceptions import LedgerError
from multisig_offchain_core.blockchain.local_ledger import LocalLedger
from multisig_offchain_core.blockchain.transactions import TransactionManager
from multisig_offchain_core.models.base import Identity, identity_from_hex
from multisig_offchain_core.program.processor import MultisigProgram
from multisig_offchain_core.wallet.lifecycle.orchestrator import WalletOrchestrator
from multisig_offchain_core.wallet.queries import WalletQuery

from .config.formatting import format_status_update
from .config.keys import KeyManager
from .config.multisig import MultisigConfig

logger = logging.getLogger(__name__)


class WalletSetup(NamedTuple):
    config: MultisigConfig
    ledger: LocalLedger
    tx_manager: TransactionManager
    orchestrator: WalletOrchestrator
    query: WalletQuery


def parse_identity(ctx: click.Context, param: click.Parameter, value):
    """Click callback turning hex options into 32-byte identities."""
    if value is None:
        return None
    try:
        if isinstance(value, tuple):
            return [identity_from_hex(v, param.name) for v in value]
        return identity_from_hex(value, param.name)
    except ValueError as e:
        raise click.BadParameter(str(e)) from e


def load_config(config_path: Path) -> MultisigConfig:
    try:
        return MultisigConfig.from_yaml(config_path)
    except (ValueError, FileNotFoundError) as e:
        raise click.ClickException(f"Invalid configuration: {e}") from e


def create_ledger(config: MultisigConfig) -> LocalLedger:
    """Open the configured ledger and register the multisig program on it."""
    try:
        ledger = LocalLedger(
            config=config.ledger.to_ledger_config(),
            state_path=config.ledger.state_path,
        )
    except LedgerError as e:
        raise click.ClickException(str(e)) from e
    ledger.register_program(MultisigProgram(config.program_id))
    return ledger


def setup_wallet_from_config(config_path: Path) -> WalletSetup:
    """Set up all modules required by wallet commands from a config file."""
    config = load_config(config_path)
    ledger = create_ledger(config)
    tx_manager = TransactionManager(ledger)
    orchestrator = WalletOrchestrator(
        ledger=ledger,
        tx_manager=tx_manager,
        program_id=config.program_id,
        status_callback=format_status_update,
    )
    query = WalletQuery(ledger, config.program_id)
    return WalletSetup(config, ledger, tx_manager, orchestrator, query)


def load_signing_key(config: MultisigConfig, key_path: Path | None) -> SigningKey:
    """Load the signing key from ``--signing-key`` or the config wallet section."""
    try:
        if key_path:
            signing_key, _ = KeyManager.load_signing_key(key_path)
        else:
            signing_key, _ = KeyManager.load_from_config(config.wallet)
    except (ValueError, FileNotFoundError) as e:
        raise click.ClickException(f"Failed to load signing key: {e}") from e

    logger.debug("Using signer %s", bytes(signing_key.verify_key).hex())
    return signing_key


def signer_identity(signing_key: SigningKey) -> Identity:
    return bytes(signing_key.verify_key)

"""Create a multisig wallet at the payer's derived address."""

import logging

from multisig_offchain_core.blockchain.ledger import (
    SYSTEM_PROGRAM_ID,
    InstructionContext,
)
from multisig_offchain_core.models.base import IDENTITY_SIZE, MAX_OWNERS, short_hex
from multisig_offchain_core.models.instructions import CreateWallet
from multisig_offchain_core.models.wallet_accounts import MultisigWallet
from multisig_offchain_core.program.addressing import derive_wallet_address
from multisig_offchain_core.program.exceptions import (
    AddressMismatchError,
    AlreadyExistsError,
    InvalidOwnerListError,
    InvalidThresholdError,
)
from multisig_offchain_core.program.utils.state_checks import (
    require_signer,
    store_record,
)

logger = logging.getLogger(__name__)

MIN_OWNERS = 2


def validate_owner_list(owners: list, payer: bytes) -> None:
    """Check owner count, identity format, uniqueness and the funding slot.

    Raises:
        InvalidOwnerListError: If any rule is violated
    """
    if not isinstance(owners, list) or not MIN_OWNERS <= len(owners) <= MAX_OWNERS:
        raise InvalidOwnerListError(
            f"Owner count must be between {MIN_OWNERS} and {MAX_OWNERS}"
        )
    if any(
        not isinstance(owner, bytes) or len(owner) != IDENTITY_SIZE for owner in owners
    ):
        raise InvalidOwnerListError("Owners must be 32-byte public keys")
    if len(set(owners)) != len(owners):
        raise InvalidOwnerListError("Owners must be distinct")
    if owners[0] != payer:
        raise InvalidOwnerListError("The first owner must be the paying creator")


def validate_threshold(threshold: int, owner_count: int) -> None:
    if (
        isinstance(threshold, bool)
        or not isinstance(threshold, int)
        or not 1 <= threshold <= owner_count
    ):
        raise InvalidThresholdError(
            f"Threshold must be between 1 and {owner_count}, got {threshold}"
        )


def process_create_wallet(ctx: InstructionContext, instruction: CreateWallet) -> None:
    payer = require_signer(ctx, "payer")
    wallet_address = ctx.account_address("wallet")

    validate_owner_list(instruction.owners, payer)
    validate_threshold(instruction.threshold, len(instruction.owners))

    expected, bump = derive_wallet_address(payer, ctx.program_id)
    if wallet_address != expected:
        raise AddressMismatchError(
            f"Wallet address {wallet_address.hex()} is not derived from the payer"
        )

    existing = ctx.get_account(wallet_address)
    if existing is not None and (
        existing.owner != SYSTEM_PROGRAM_ID or existing.space
    ):
        raise AlreadyExistsError(f"Wallet {wallet_address.hex()} already exists")

    wallet = MultisigWallet.new(instruction.owners, instruction.threshold, bump)
    ctx.create_account(wallet_address, payer, MultisigWallet.SPACE)
    store_record(ctx, wallet_address, wallet)

    ctx.log(
        f"Wallet created: {wallet_address.hex()} with {wallet.owner_count} owners, "
        f"threshold {wallet.threshold}"
    )
    logger.info(
        "Created wallet %s (%d-of-%d)",
        short_hex(wallet_address),
        wallet.threshold,
        wallet.owner_count,
    )

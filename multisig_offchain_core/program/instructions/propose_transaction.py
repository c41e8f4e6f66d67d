"""Propose a transfer out of a wallet."""

import logging

from multisig_offchain_core.blockchain.ledger import (
    SYSTEM_PROGRAM_ID,
    InstructionContext,
)
from multisig_offchain_core.models.base import (
    I64_MAX,
    IDENTITY_SIZE,
    is_u64,
    short_hex,
)
from multisig_offchain_core.models.instructions import ProposeTransaction
from multisig_offchain_core.models.wallet_accounts import TransactionProposal
from multisig_offchain_core.program.addressing import derive_proposal_address
from multisig_offchain_core.program.exceptions import (
    AddressMismatchError,
    AlreadyExistsError,
    InvalidInstructionError,
    SequenceOverflowError,
)
from multisig_offchain_core.program.utils.state_checks import (
    load_wallet,
    require_owner,
    require_signer,
    store_record,
)

logger = logging.getLogger(__name__)


def validate_proposal_args(instruction: ProposeTransaction, current_time: int) -> int:
    """Check the instruction arguments and return the expiry timestamp.

    Raises:
        InvalidInstructionError: If an argument is out of range
    """
    if not is_u64(instruction.amount):
        raise InvalidInstructionError("Amount must be an unsigned 64-bit integer")
    if (
        not isinstance(instruction.recipient, bytes)
        or len(instruction.recipient) != IDENTITY_SIZE
    ):
        raise InvalidInstructionError("Recipient must be a 32-byte address")
    if not is_u64(instruction.expires_in_hours):
        raise InvalidInstructionError(
            "Expiry hours must be an unsigned 64-bit integer"
        )

    expires_at = TransactionProposal.expiry_from(
        current_time, instruction.expires_in_hours
    )
    if expires_at > I64_MAX:
        raise InvalidInstructionError("Expiry is too far in the future")
    return expires_at


def process_propose_transaction(
    ctx: InstructionContext, instruction: ProposeTransaction
) -> None:
    proposer = require_signer(ctx, "proposer")
    proposal_address = ctx.account_address("proposal")
    wallet_address = ctx.account_address("wallet")

    expires_at = validate_proposal_args(instruction, ctx.current_time)

    wallet = load_wallet(ctx, wallet_address)
    proposer_index = require_owner(wallet, proposer)

    expected, bump = derive_proposal_address(
        wallet_address, wallet.nonce, ctx.program_id
    )
    if proposal_address != expected:
        raise AddressMismatchError(
            f"Proposal address {proposal_address.hex()} does not match "
            f"sequence number {wallet.nonce}"
        )

    existing = ctx.get_account(proposal_address)
    if existing is not None and (
        existing.owner != SYSTEM_PROGRAM_ID or existing.space
    ):
        raise AlreadyExistsError(f"Proposal {proposal_address.hex()} already exists")

    proposal = TransactionProposal.new(
        wallet=wallet_address,
        proposer=proposer,
        proposer_index=proposer_index,
        amount=instruction.amount,
        recipient=instruction.recipient,
        owner_count=wallet.owner_count,
        expires_at=expires_at,
        nonce=wallet.nonce,
        bump=bump,
    )

    try:
        wallet.increment_nonce()
    except OverflowError as e:
        raise SequenceOverflowError(str(e)) from e

    ctx.create_account(proposal_address, proposer, TransactionProposal.SPACE)
    store_record(ctx, proposal_address, proposal)
    store_record(ctx, wallet_address, wallet)

    ctx.log(
        f"Transaction proposed: {proposal.amount} to {proposal.recipient.hex()} "
        f"(sequence {proposal.nonce})"
    )
    logger.info(
        "Proposal %s #%d created on wallet %s",
        short_hex(proposal_address),
        proposal.nonce,
        short_hex(wallet_address),
    )

"""Transfer funds for a proposal that reached its threshold."""

import logging

from multisig_offchain_core.blockchain.ledger import InstructionContext
from multisig_offchain_core.models.base import short_hex
from multisig_offchain_core.models.instructions import ExecuteTransaction
from multisig_offchain_core.program.exceptions import (
    InsufficientApprovalsError,
    InsufficientFundsError,
    RecipientMismatchError,
)
from multisig_offchain_core.program.utils.state_checks import (
    load_linked,
    require_not_cancelled,
    require_not_executed,
    require_not_expired,
    require_signer,
    store_record,
)

logger = logging.getLogger(__name__)


def process_execute_transaction(
    ctx: InstructionContext, instruction: ExecuteTransaction
) -> None:
    require_signer(ctx, "executor")
    proposal_address, proposal, wallet_address, wallet = load_linked(ctx)

    require_not_executed(proposal)
    require_not_cancelled(proposal)

    recipient = ctx.account_address("recipient")
    if recipient != proposal.recipient:
        raise RecipientMismatchError(
            f"Recipient {recipient.hex()} differs from proposal recipient "
            f"{proposal.recipient.hex()}"
        )

    require_not_expired(proposal, ctx.current_time)

    approvals = proposal.get_approval_count()
    if approvals < wallet.threshold:
        raise InsufficientApprovalsError(
            f"{approvals} approvals, {wallet.threshold} required"
        )

    wallet_account = ctx.require_account(wallet_address)
    spendable = wallet_account.balance - ctx.config.minimum_balance(
        wallet_account.space
    )
    if spendable < proposal.amount:
        raise InsufficientFundsError(
            f"Wallet can spend {max(spendable, 0)}, proposal needs {proposal.amount}"
        )

    ctx.transfer(wallet_address, recipient, proposal.amount)
    proposal.executed = True
    store_record(ctx, proposal_address, proposal)

    ctx.log(f"Transaction executed: {proposal.amount} to {recipient.hex()}")
    logger.info(
        "Transaction executed: %d to %s", proposal.amount, short_hex(recipient)
    )

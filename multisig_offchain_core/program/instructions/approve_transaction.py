"""Record an owner's approval on a pending proposal."""

import logging

from multisig_offchain_core.blockchain.ledger import InstructionContext
from multisig_offchain_core.models.base import short_hex
from multisig_offchain_core.models.instructions import ApproveTransaction
from multisig_offchain_core.program.utils.state_checks import (
    load_linked,
    require_not_cancelled,
    require_not_executed,
    require_not_expired,
    require_owner,
    require_signer,
    store_record,
)

logger = logging.getLogger(__name__)


def process_approve_transaction(
    ctx: InstructionContext, instruction: ApproveTransaction
) -> None:
    approver = require_signer(ctx, "approver")
    proposal_address, proposal, _, wallet = load_linked(ctx)

    owner_index = require_owner(wallet, approver)
    require_not_cancelled(proposal)
    require_not_executed(proposal)
    require_not_expired(proposal, ctx.current_time)

    # The owner set never changes, so the index lies inside the snapshot
    proposal.approve(owner_index)
    store_record(ctx, proposal_address, proposal)

    ctx.log(
        f"Transaction approved by {approver.hex()}: "
        f"{proposal.get_approval_count()}/{wallet.threshold}"
    )
    logger.info(
        "Proposal %s approved by %s (%d/%d)",
        short_hex(proposal_address),
        short_hex(approver),
        proposal.get_approval_count(),
        wallet.threshold,
    )

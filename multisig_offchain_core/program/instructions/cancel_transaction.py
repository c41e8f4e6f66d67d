"""Cancel a pending proposal."""

import logging

from multisig_offchain_core.blockchain.ledger import InstructionContext
from multisig_offchain_core.models.base import short_hex
from multisig_offchain_core.models.instructions import CancelTransaction
from multisig_offchain_core.program.utils.state_checks import (
    load_linked,
    require_not_cancelled,
    require_not_executed,
    require_owner,
    require_signer,
    store_record,
)

logger = logging.getLogger(__name__)


def process_cancel_transaction(
    ctx: InstructionContext, instruction: CancelTransaction
) -> None:
    canceller = require_signer(ctx, "canceller")
    proposal_address, proposal, _, wallet = load_linked(ctx)

    require_owner(wallet, canceller)
    require_not_executed(proposal)
    require_not_cancelled(proposal)

    proposal.cancelled = True
    store_record(ctx, proposal_address, proposal)

    ctx.log(f"Transaction cancelled by {canceller.hex()}")
    logger.info(
        "Proposal %s cancelled by %s",
        short_hex(proposal_address),
        short_hex(canceller),
    )

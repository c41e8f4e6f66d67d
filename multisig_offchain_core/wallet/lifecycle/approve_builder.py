"""Approve transaction builder."""

from multisig_offchain_core.models.base import AccountAddress, Identity
from multisig_offchain_core.models.instructions import ApproveTransaction
from multisig_offchain_core.wallet.lifecycle.base import BaseBuilder, WalletTxResult


class ApproveBuilder(BaseBuilder):
    """Builds proposal approval transaction"""

    async def build_tx(
        self,
        wallet_address: AccountAddress,
        proposal_address: AccountAddress,
        approver: Identity,
    ) -> WalletTxResult:
        tx = self.tx_manager.build_tx(
            program_id=self.program_id,
            instruction=ApproveTransaction(),
            accounts={
                "proposal": proposal_address,
                "wallet": wallet_address,
                "approver": approver,
            },
            signers=[approver],
        )
        return WalletTxResult(transaction=tx, address=proposal_address)

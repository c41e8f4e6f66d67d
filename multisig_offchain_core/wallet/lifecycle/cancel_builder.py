"""Cancel transaction builder."""

from multisig_offchain_core.models.base import AccountAddress, Identity
from multisig_offchain_core.models.instructions import CancelTransaction
from multisig_offchain_core.wallet.lifecycle.base import BaseBuilder, WalletTxResult


class CancelBuilder(BaseBuilder):
    """Builds proposal cancellation transaction"""

    async def build_tx(
        self,
        wallet_address: AccountAddress,
        proposal_address: AccountAddress,
        canceller: Identity,
    ) -> WalletTxResult:
        tx = self.tx_manager.build_tx(
            program_id=self.program_id,
            instruction=CancelTransaction(),
            accounts={
                "proposal": proposal_address,
                "wallet": wallet_address,
                "canceller": canceller,
            },
            signers=[canceller],
        )
        return WalletTxResult(transaction=tx, address=proposal_address)

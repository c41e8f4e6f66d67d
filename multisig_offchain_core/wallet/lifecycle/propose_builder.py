"""Propose transaction builder."""

from multisig_offchain_core.models.base import AccountAddress, Identity, Lamports
from multisig_offchain_core.models.instructions import ProposeTransaction
from multisig_offchain_core.program.addressing import derive_proposal_address
from multisig_offchain_core.wallet.lifecycle.base import BaseBuilder, WalletTxResult


class ProposeBuilder(BaseBuilder):
    """Builds proposal transaction at the wallet's next sequence number"""

    async def build_tx(
        self,
        wallet_address: AccountAddress,
        proposer: Identity,
        amount: Lamports,
        recipient: Identity,
        expires_in_hours: int,
    ) -> WalletTxResult:
        wallet = await self.query.require_wallet(wallet_address)
        proposal_address, _ = derive_proposal_address(
            wallet_address, wallet.nonce, self.program_id
        )

        tx = self.tx_manager.build_tx(
            program_id=self.program_id,
            instruction=ProposeTransaction(
                amount=amount,
                recipient=recipient,
                expires_in_hours=expires_in_hours,
            ),
            accounts={
                "proposal": proposal_address,
                "wallet": wallet_address,
                "proposer": proposer,
            },
            signers=[proposer],
        )
        return WalletTxResult(transaction=tx, address=proposal_address)

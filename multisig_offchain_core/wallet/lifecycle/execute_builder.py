"""Execute transaction builder."""

from multisig_offchain_core.models.base import AccountAddress, Identity
from multisig_offchain_core.models.instructions import ExecuteTransaction
from multisig_offchain_core.wallet.lifecycle.base import BaseBuilder, WalletTxResult


class ExecuteBuilder(BaseBuilder):
    """Builds proposal execution transaction, paying the proposal's recipient"""

    async def build_tx(
        self,
        wallet_address: AccountAddress,
        proposal_address: AccountAddress,
        executor: Identity,
    ) -> WalletTxResult:
        proposal = await self.query.require_proposal(proposal_address)

        tx = self.tx_manager.build_tx(
            program_id=self.program_id,
            instruction=ExecuteTransaction(),
            accounts={
                "proposal": proposal_address,
                "wallet": wallet_address,
                "recipient": proposal.recipient,
                "executor": executor,
            },
            signers=[executor],
        )
        return WalletTxResult(transaction=tx, address=proposal_address)

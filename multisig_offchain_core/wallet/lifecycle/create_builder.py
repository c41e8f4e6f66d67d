"""Create wallet transaction builder."""

from multisig_offchain_core.models.base import Identity
from multisig_offchain_core.models.instructions import CreateWallet
from multisig_offchain_core.program.addressing import derive_wallet_address
from multisig_offchain_core.wallet.lifecycle.base import BaseBuilder, WalletTxResult


class CreateWalletBuilder(BaseBuilder):
    """Builds wallet creation transaction"""

    async def build_tx(
        self, payer: Identity, owners: list[Identity], threshold: int
    ) -> WalletTxResult:
        wallet_address, _ = derive_wallet_address(payer, self.program_id)

        tx = self.tx_manager.build_tx(
            program_id=self.program_id,
            instruction=CreateWallet(owners=list(owners), threshold=threshold),
            accounts={"wallet": wallet_address, "payer": payer},
            signers=[payer],
        )
        return WalletTxResult(transaction=tx, address=wallet_address)

"""Base classes for wallet lifecycle operations."""

from dataclasses import dataclass

from multisig_offchain_core.blockchain.ledger import Ledger
from multisig_offchain_core.blockchain.transactions import (
    Transaction,
    TransactionManager,
)
from multisig_offchain_core.models.base import AccountAddress, ProgramId
from multisig_offchain_core.wallet.queries import WalletQuery


@dataclass
class WalletTxResult:
    """Result of wallet transaction build"""

    transaction: Transaction
    address: AccountAddress | None = None


class BaseBuilder:
    """Base builder for wallet transactions"""

    def __init__(
        self, ledger: Ledger, tx_manager: TransactionManager, program_id: ProgramId
    ) -> None:
        self.ledger = ledger
        self.tx_manager = tx_manager
        self.program_id = program_id
        self.query = WalletQuery(ledger, program_id)

"""Multisig wallet lifecycle orchestrator."""

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from nacl.signing import SigningKey

from multisig_offchain_core.blockchain.ledger import Ledger, TransactionReceipt
from multisig_offchain_core.blockchain.transactions import (
    Transaction,
    TransactionManager,
)
from multisig_offchain_core.constants.status import ProcessStatus
from multisig_offchain_core.models.base import (
    AccountAddress,
    Identity,
    Lamports,
    ProgramId,
)

from .approve_builder import ApproveBuilder
from .base import WalletTxResult
from .cancel_builder import CancelBuilder
from .create_builder import CreateWalletBuilder
from .execute_builder import ExecuteBuilder
from .propose_builder import ProposeBuilder

logger = logging.getLogger(__name__)


@dataclass
class WalletResult:
    """Result of wallet operation"""

    status: ProcessStatus
    transaction: Transaction | None = None
    address: AccountAddress | None = None
    receipt: TransactionReceipt | None = None
    error: Exception | None = None


class WalletOrchestrator:
    """Orchestrates multisig wallet operations from build to confirmation.

    Every public method runs one lifecycle step as a single transaction and
    never raises: failures come back as ``WalletResult`` with ``FAILED``
    status and the original exception in ``error``.
    """

    def __init__(
        self,
        ledger: Ledger,
        tx_manager: TransactionManager,
        program_id: ProgramId,
        status_callback: Callable | None = None,
    ) -> None:
        self.ledger = ledger
        self.tx_manager = tx_manager
        self.program_id = program_id
        self.status_callback = status_callback
        self.current_status = ProcessStatus.NOT_STARTED

    def _update_status(self, status: ProcessStatus, message: str = "") -> None:
        self.current_status = status
        if self.status_callback:
            self.status_callback(status, message)

    async def create_wallet(
        self, owners: list[Identity], threshold: int, signing_key: SigningKey
    ) -> WalletResult:
        """Create a wallet funded and created by the key holder.

        Args:
            owners: Owner identities, the signer first
            threshold: Approvals required to execute a proposal
            signing_key: Key of the paying creator

        Returns:
            WalletResult with the new wallet address
        """
        builder = CreateWalletBuilder(self.ledger, self.tx_manager, self.program_id)
        return await self._run(
            "create wallet",
            lambda: builder.build_tx(
                payer=bytes(signing_key.verify_key),
                owners=owners,
                threshold=threshold,
            ),
            signing_key,
        )

    async def propose(
        self,
        wallet_address: AccountAddress,
        amount: Lamports,
        recipient: Identity,
        expires_in_hours: int,
        signing_key: SigningKey,
    ) -> WalletResult:
        """Propose a transfer at the wallet's next sequence number.

        Returns:
            WalletResult with the new proposal address
        """
        builder = ProposeBuilder(self.ledger, self.tx_manager, self.program_id)
        return await self._run(
            "propose",
            lambda: builder.build_tx(
                wallet_address=wallet_address,
                proposer=bytes(signing_key.verify_key),
                amount=amount,
                recipient=recipient,
                expires_in_hours=expires_in_hours,
            ),
            signing_key,
        )

    async def approve(
        self,
        wallet_address: AccountAddress,
        proposal_address: AccountAddress,
        signing_key: SigningKey,
    ) -> WalletResult:
        builder = ApproveBuilder(self.ledger, self.tx_manager, self.program_id)
        return await self._run(
            "approve",
            lambda: builder.build_tx(
                wallet_address=wallet_address,
                proposal_address=proposal_address,
                approver=bytes(signing_key.verify_key),
            ),
            signing_key,
        )

    async def execute(
        self,
        wallet_address: AccountAddress,
        proposal_address: AccountAddress,
        signing_key: SigningKey,
    ) -> WalletResult:
        builder = ExecuteBuilder(self.ledger, self.tx_manager, self.program_id)
        return await self._run(
            "execute",
            lambda: builder.build_tx(
                wallet_address=wallet_address,
                proposal_address=proposal_address,
                executor=bytes(signing_key.verify_key),
            ),
            signing_key,
        )

    async def cancel(
        self,
        wallet_address: AccountAddress,
        proposal_address: AccountAddress,
        signing_key: SigningKey,
    ) -> WalletResult:
        builder = CancelBuilder(self.ledger, self.tx_manager, self.program_id)
        return await self._run(
            "cancel",
            lambda: builder.build_tx(
                wallet_address=wallet_address,
                proposal_address=proposal_address,
                canceller=bytes(signing_key.verify_key),
            ),
            signing_key,
        )

    async def _run(
        self,
        operation: str,
        build: Callable[[], Awaitable[WalletTxResult]],
        signing_key: SigningKey,
    ) -> WalletResult:
        try:
            self._update_status(
                ProcessStatus.BUILDING_TRANSACTION, f"Building {operation} transaction"
            )
            result = await build()
            self._update_status(
                ProcessStatus.TRANSACTION_BUILT, f"{operation.capitalize()} built"
            )

            self._update_status(
                ProcessStatus.SIGNING_TRANSACTION, "Signing transaction"
            )
            self.tx_manager.sign_tx(result.transaction, signing_key)
            self._update_status(ProcessStatus.TRANSACTION_SIGNED, "Transaction signed")

            self._update_status(
                ProcessStatus.SUBMITTING_TRANSACTION, "Submitting transaction"
            )
            receipt = await self.tx_manager.submit_tx(result.transaction)
            self._update_status(
                ProcessStatus.TRANSACTION_CONFIRMED,
                f"Confirmed {receipt.transaction_id} at slot {receipt.slot}",
            )

            self._update_status(
                ProcessStatus.COMPLETED, f"{operation.capitalize()} completed"
            )
            return WalletResult(
                status=ProcessStatus.COMPLETED,
                transaction=result.transaction,
                address=result.address,
                receipt=receipt,
            )

        except Exception as e:
            logger.error("%s failed: %s", operation.capitalize(), str(e))
            self._update_status(
                ProcessStatus.FAILED, f"{operation.capitalize()} failed: {e!s}"
            )
            return WalletResult(status=ProcessStatus.FAILED, error=e)

"""Read-only views over wallets and their proposals."""

import logging
from dataclasses import dataclass

from multisig_offchain_core.blockchain.ledger import Ledger
from multisig_offchain_core.models.base import (
    AccountAddress,
    Identity,
    Lamports,
    PosixTime,
    ProgramId,
)
from multisig_offchain_core.models.wallet_accounts import (
    MultisigWallet,
    ProposalStatus,
    TransactionProposal,
)
from multisig_offchain_core.program.addressing import derive_proposal_address
from multisig_offchain_core.program.exceptions import AccountDataError

logger = logging.getLogger(__name__)


@dataclass
class ProposalView:
    """A proposal together with the wallet context needed to judge it"""

    address: AccountAddress
    proposal: TransactionProposal
    threshold: int
    owners: list[Identity]
    current_time: PosixTime

    @property
    def approval_count(self) -> int:
        return self.proposal.get_approval_count()

    @property
    def approvers(self) -> list[Identity]:
        return [
            owner
            for owner, approved in zip(
                self.owners[: self.proposal.owner_count], self.proposal.approvals
            )
            if approved
        ]

    @property
    def status(self) -> ProposalStatus:
        return self.proposal.status(self.current_time)

    @property
    def can_execute(self) -> bool:
        return (
            self.status == ProposalStatus.PENDING
            and self.approval_count >= self.threshold
        )


class WalletQuery:
    """Decodes program accounts from a ledger."""

    def __init__(self, ledger: Ledger, program_id: ProgramId) -> None:
        self.ledger = ledger
        self.program_id = program_id

    async def get_wallet(self, address: AccountAddress) -> MultisigWallet | None:
        """Get the wallet at an address, or None if nothing is stored there.

        Raises:
            AccountDataError: If the account holds something other than a wallet
        """
        account = await self.ledger.get_account(address)
        if account is None or account.owner != self.program_id:
            return None
        try:
            return MultisigWallet.from_cbor(account.data)
        except ValueError as e:
            raise AccountDataError(f"Invalid wallet data: {e}") from e

    async def get_proposal(
        self, address: AccountAddress
    ) -> TransactionProposal | None:
        """Get the proposal at an address, or None if nothing is stored there.

        Raises:
            AccountDataError: If the account holds something other than a proposal
        """
        account = await self.ledger.get_account(address)
        if account is None or account.owner != self.program_id:
            return None
        try:
            return TransactionProposal.from_cbor(account.data)
        except ValueError as e:
            raise AccountDataError(f"Invalid proposal data: {e}") from e

    async def require_wallet(self, address: AccountAddress) -> MultisigWallet:
        wallet = await self.get_wallet(address)
        if wallet is None:
            raise AccountDataError(f"Wallet {address.hex()} does not exist")
        return wallet

    async def require_proposal(self, address: AccountAddress) -> TransactionProposal:
        proposal = await self.get_proposal(address)
        if proposal is None:
            raise AccountDataError(f"Proposal {address.hex()} does not exist")
        return proposal

    async def list_proposals(
        self, wallet_address: AccountAddress
    ) -> list[tuple[AccountAddress, TransactionProposal]]:
        """Enumerate the wallet's proposals by sequence number, oldest first."""
        wallet = await self.require_wallet(wallet_address)

        proposals = []
        for sequence_number in range(wallet.nonce):
            address, _ = derive_proposal_address(
                wallet_address, sequence_number, self.program_id
            )
            proposal = await self.get_proposal(address)
            if proposal is None:
                logger.warning(
                    "Proposal #%d of wallet %s is missing",
                    sequence_number,
                    wallet_address.hex(),
                )
                continue
            proposals.append((address, proposal))
        return proposals

    async def get_proposal_view(self, address: AccountAddress) -> ProposalView:
        proposal = await self.require_proposal(address)
        wallet = await self.require_wallet(proposal.wallet)
        return ProposalView(
            address=address,
            proposal=proposal,
            threshold=wallet.threshold,
            owners=wallet.active_owners,
            current_time=self.ledger.current_time(),
        )

    async def list_proposal_views(
        self, wallet_address: AccountAddress
    ) -> list[ProposalView]:
        wallet = await self.require_wallet(wallet_address)
        now = self.ledger.current_time()
        return [
            ProposalView(
                address=address,
                proposal=proposal,
                threshold=wallet.threshold,
                owners=wallet.active_owners,
                current_time=now,
            )
            for address, proposal in await self.list_proposals(wallet_address)
        ]

    async def spendable_balance(self, wallet_address: AccountAddress) -> Lamports:
        """Balance the wallet can transfer without dropping below its rent floor."""
        account = await self.ledger.get_account(wallet_address)
        if account is None:
            return 0
        floor = self.ledger.minimum_balance(account.space) if account.space else 0
        return max(account.balance - floor, 0)

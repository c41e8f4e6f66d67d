"""Test read-only wallet and proposal queries."""

import pytest
from nacl.signing import SigningKey

from multisig_offchain_core.models.wallet_accounts import (
    MultisigWallet,
    ProposalStatus,
)
from multisig_offchain_core.program.exceptions import AccountDataError

from .base import LAMPORTS_PER_SOL, TestBase
from .test_utils import HOUR, identity


class TestWalletQuery(TestBase):
    """Test decoding program accounts from the ledger."""

    @pytest.mark.asyncio
    async def test_missing_wallet(self) -> None:
        missing = identity(SigningKey.generate())

        assert await self.query.get_wallet(missing) is None
        with pytest.raises(AccountDataError):
            await self.query.require_wallet(missing)

    @pytest.mark.asyncio
    async def test_system_account_is_not_a_wallet(self) -> None:
        await self.fund(self.outsider_key)

        assert await self.query.get_wallet(identity(self.outsider_key)) is None

    @pytest.mark.asyncio
    async def test_proposal_read_as_wallet(self) -> None:
        wallet_address = await self.create_wallet()
        proposal_address = await self.propose(wallet_address)

        with pytest.raises(AccountDataError):
            await self.query.get_wallet(proposal_address)
        with pytest.raises(AccountDataError):
            await self.query.get_proposal(wallet_address)

    @pytest.mark.asyncio
    async def test_list_proposals_in_sequence(self) -> None:
        wallet_address = await self.create_wallet()
        addresses = [
            await self.propose(wallet_address, amount) for amount in (10, 20, 30)
        ]

        proposals = await self.query.list_proposals(wallet_address)

        assert [address for address, _ in proposals] == addresses
        assert [p.nonce for _, p in proposals] == [0, 1, 2]
        assert [p.amount for _, p in proposals] == [10, 20, 30]

    @pytest.mark.asyncio
    async def test_list_proposals_empty(self) -> None:
        wallet_address = await self.create_wallet()

        assert await self.query.list_proposals(wallet_address) == []

    @pytest.mark.asyncio
    async def test_proposal_views(self) -> None:
        wallet_address = await self.create_wallet()
        ready = await self.propose(wallet_address)
        waiting = await self.propose(wallet_address)
        cancelled = await self.propose(wallet_address)
        await self.approve(wallet_address, ready, self.owner_keys[1])
        await self.cancel(wallet_address, cancelled, self.owner_keys[2])

        views = {
            view.address: view
            for view in await self.query.list_proposal_views(wallet_address)
        }

        assert views[ready].can_execute
        assert views[ready].approvers == self.owners[:2]
        assert views[waiting].status == ProposalStatus.PENDING
        assert not views[waiting].can_execute
        assert views[cancelled].status == ProposalStatus.CANCELLED
        assert not views[cancelled].can_execute

    @pytest.mark.asyncio
    async def test_view_reports_expiry(self) -> None:
        wallet_address = await self.create_wallet(threshold=1)
        proposal_address = await self.propose(wallet_address, expires_in_hours=1)

        view = await self.query.get_proposal_view(proposal_address)
        assert view.can_execute

        self.ledger.warp_time(HOUR + 1)
        view = await self.query.get_proposal_view(proposal_address)
        assert view.status == ProposalStatus.EXPIRED
        assert not view.can_execute

    @pytest.mark.asyncio
    async def test_spendable_balance(self) -> None:
        wallet_address = await self.create_wallet(funding=LAMPORTS_PER_SOL)
        reserve = self.ledger.minimum_balance(MultisigWallet.SPACE)

        balance = await self.ledger.get_balance(wallet_address)
        assert balance == reserve + LAMPORTS_PER_SOL
        assert await self.query.spendable_balance(wallet_address) == LAMPORTS_PER_SOL

    @pytest.mark.asyncio
    async def test_spendable_balance_missing(self) -> None:
        missing = identity(SigningKey.generate())

        assert await self.query.spendable_balance(missing) == 0

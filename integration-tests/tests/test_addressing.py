"""Test deterministic derivation of wallet and proposal addresses."""

import pytest
from nacl.signing import SigningKey

from multisig_offchain_core.models.wallet_accounts import (
    MultisigWallet,
    TransactionProposal,
)
from multisig_offchain_core.program.addressing import (
    PROPOSAL_SEED,
    WALLET_SEED,
    create_program_address,
    derive_proposal_address,
    derive_wallet_address,
    find_program_address,
    is_on_curve,
    verify_proposal_address,
    verify_wallet_address,
)
from multisig_offchain_core.program.exceptions import (
    AddressMismatchError,
    InvalidSeedsError,
)
from multisig_offchain_core.program.processor import DEFAULT_PROGRAM_ID

from .test_utils import identity


class TestAddressing:
    """Test the address deriver."""

    def setup_method(self) -> None:
        self.creator = identity(SigningKey.generate())
        self.other = identity(SigningKey.generate())
        self.program_id = DEFAULT_PROGRAM_ID

    def test_wallet_address_is_deterministic(self) -> None:
        first = derive_wallet_address(self.creator, self.program_id)
        second = derive_wallet_address(self.creator, self.program_id)
        assert first == second

    def test_wallet_address_depends_on_creator_and_program(self) -> None:
        address, _ = derive_wallet_address(self.creator, self.program_id)
        other_creator, _ = derive_wallet_address(self.other, self.program_id)
        other_program, _ = derive_wallet_address(self.creator, bytes(range(32)))

        assert len({address, other_creator, other_program}) == 3

    def test_derived_address_is_off_curve(self) -> None:
        address, bump = derive_wallet_address(self.creator, self.program_id)
        assert not is_on_curve(address)
        assert 0 <= bump <= 255
        # A real public key is always on the curve
        assert is_on_curve(self.creator)

    def test_bump_reproduces_address(self) -> None:
        address, bump = derive_wallet_address(self.creator, self.program_id)
        recreated = create_program_address(
            [WALLET_SEED, self.creator, bytes([bump])], self.program_id
        )
        assert recreated == address

    def test_find_returns_highest_valid_bump(self) -> None:
        seeds = [WALLET_SEED, self.creator]
        _, bump = find_program_address(seeds, self.program_id)
        for higher in range(bump + 1, 256):
            with pytest.raises(InvalidSeedsError):
                create_program_address([*seeds, bytes([higher])], self.program_id)

    def test_proposal_addresses_distinct_per_sequence(self) -> None:
        wallet, _ = derive_wallet_address(self.creator, self.program_id)
        addresses = {
            derive_proposal_address(wallet, n, self.program_id)[0]
            for n in (0, 1, 2, 255, 256, 65_536, 2**64 - 1)
        }
        assert len(addresses) == 7

    def test_proposal_seed_uses_little_endian_nonce(self) -> None:
        wallet, _ = derive_wallet_address(self.creator, self.program_id)
        address, bump = derive_proposal_address(wallet, 1, self.program_id)
        recreated = create_program_address(
            [PROPOSAL_SEED, wallet, (1).to_bytes(8, "little"), bytes([bump])],
            self.program_id,
        )
        assert recreated == address

    def test_proposal_sequence_out_of_range(self) -> None:
        wallet, _ = derive_wallet_address(self.creator, self.program_id)
        with pytest.raises(InvalidSeedsError):
            derive_proposal_address(wallet, -1, self.program_id)
        with pytest.raises(InvalidSeedsError):
            derive_proposal_address(wallet, 2**64, self.program_id)

    def test_oversized_seed_rejected(self) -> None:
        with pytest.raises(InvalidSeedsError):
            create_program_address([b"x" * 33, b"\x01"], self.program_id)

    def test_invalid_creator_rejected(self) -> None:
        with pytest.raises(ValueError):
            derive_wallet_address(b"short", self.program_id)

    def test_verify_wallet_address(self) -> None:
        address, bump = derive_wallet_address(self.creator, self.program_id)
        wallet = MultisigWallet.new([self.creator, self.other], 1, bump)

        verify_wallet_address(address, wallet, self.program_id)

        other_address, _ = derive_wallet_address(self.other, self.program_id)
        with pytest.raises(AddressMismatchError):
            verify_wallet_address(other_address, wallet, self.program_id)

    def test_verify_proposal_address(self) -> None:
        wallet, _ = derive_wallet_address(self.creator, self.program_id)
        address, bump = derive_proposal_address(wallet, 3, self.program_id)
        proposal = TransactionProposal.new(
            wallet=wallet,
            proposer=self.creator,
            proposer_index=0,
            amount=10,
            recipient=self.other,
            owner_count=2,
            expires_at=0,
            nonce=3,
            bump=bump,
        )

        verify_proposal_address(address, proposal, self.program_id)

        proposal.nonce = 4
        with pytest.raises(AddressMismatchError):
            verify_proposal_address(address, proposal, self.program_id)

"""Account records owned by the multisig program"""

from dataclasses import dataclass
from enum import Enum

from multisig_offchain_core.models.base import (
    EMPTY_IDENTITY,
    IDENTITY_SIZE,
    MAX_OWNERS,
    U64_MAX,
    AccountAddress,
    Identity,
    Lamports,
    PosixTime,
    TaggedRecord,
)

SECONDS_PER_HOUR = 3600


class ProposalStatus(str, Enum):
    """Observable state of a transaction proposal"""

    PENDING = "pending"
    EXPIRED = "expired"
    EXECUTED = "executed"
    CANCELLED = "cancelled"


@dataclass
class MultisigWallet(TaggedRecord):
    """Owner set and quorum threshold guarding a shared account.

    ``owners`` is always ``MAX_OWNERS`` long; only the first ``owner_count``
    slots are meaningful, the rest hold zero bytes. The position of an owner
    in this list is its approval index for every proposal of the wallet.
    """

    CONSTR_ID = 0
    # tag(2) + array(1) + owners(1 + 10 * 34) + owner_count(1) + threshold(1)
    # + nonce(9) + bump(2), rounded up
    SPACE = 360

    owners: list[Identity]
    owner_count: int
    threshold: int
    nonce: int
    bump: int

    def __post_init__(self) -> None:
        if len(self.owners) != MAX_OWNERS:
            raise ValueError(f"Owner array must hold exactly {MAX_OWNERS} slots")
        if any(
            not isinstance(owner, bytes) or len(owner) != IDENTITY_SIZE
            for owner in self.owners
        ):
            raise ValueError("Owner slots must be 32-byte identities")
        if not 0 <= self.owner_count <= MAX_OWNERS:
            raise ValueError("Owner count out of range")

    @classmethod
    def new(
        cls, owners: list[Identity], threshold: int, bump: int
    ) -> "MultisigWallet":
        """Create a wallet record, padding the owner array to capacity."""
        padded = list(owners) + [EMPTY_IDENTITY] * (MAX_OWNERS - len(owners))
        return cls(
            owners=padded,
            owner_count=len(owners),
            threshold=threshold,
            nonce=0,
            bump=bump,
        )

    @property
    def active_owners(self) -> list[Identity]:
        return self.owners[: self.owner_count]

    @property
    def creator(self) -> Identity:
        """Funding party the wallet address is derived from."""
        return self.owners[0]

    def is_owner(self, pubkey: Identity) -> bool:
        return self.get_owner_index(pubkey) is not None

    def get_owner_index(self, pubkey: Identity) -> int | None:
        for i in range(self.owner_count):
            if self.owners[i] == pubkey:
                return i
        return None

    def increment_nonce(self) -> None:
        if self.nonce >= U64_MAX:
            raise OverflowError("Wallet nonce exhausted")
        self.nonce += 1


@dataclass
class TransactionProposal(TaggedRecord):
    """A single transfer request and its approval bitmap.

    ``approvals[i]`` refers to ``wallet.owners[i]`` at creation time; only
    the first ``owner_count`` entries are evaluated.
    """

    CONSTR_ID = 1
    # tag(2) + array(1) + wallet(34) + proposer(34) + amount(9) + recipient(34)
    # + approvals(11) + owner_count(1) + executed(1) + cancelled(1)
    # + expires_at(9) + nonce(9) + bump(2), rounded up
    SPACE = 160

    wallet: AccountAddress
    proposer: Identity
    amount: Lamports
    recipient: Identity
    approvals: list[bool]
    owner_count: int
    executed: bool
    cancelled: bool
    expires_at: PosixTime
    nonce: int
    bump: int

    def __post_init__(self) -> None:
        if len(self.approvals) != MAX_OWNERS:
            raise ValueError(f"Approval bitmap must hold exactly {MAX_OWNERS} bits")
        if self.executed and self.cancelled:
            raise ValueError("Proposal cannot be both executed and cancelled")

    @classmethod
    def new(
        cls,
        wallet: AccountAddress,
        proposer: Identity,
        proposer_index: int,
        amount: Lamports,
        recipient: Identity,
        owner_count: int,
        expires_at: PosixTime,
        nonce: int,
        bump: int,
    ) -> "TransactionProposal":
        """Create a pending proposal carrying the proposer's own approval."""
        approvals = [False] * MAX_OWNERS
        approvals[proposer_index] = True
        return cls(
            wallet=wallet,
            proposer=proposer,
            amount=amount,
            recipient=recipient,
            approvals=approvals,
            owner_count=owner_count,
            executed=False,
            cancelled=False,
            expires_at=expires_at,
            nonce=nonce,
            bump=bump,
        )

    @staticmethod
    def expiry_from(current_time: PosixTime, expires_in_hours: int) -> PosixTime:
        return current_time + expires_in_hours * SECONDS_PER_HOUR

    def is_expired(self, current_time: PosixTime) -> bool:
        return current_time > self.expires_at

    @property
    def is_resolved(self) -> bool:
        return self.executed or self.cancelled

    def get_approval_count(self) -> int:
        return sum(1 for approved in self.approvals[: self.owner_count] if approved)

    def approve(self, index: int) -> None:
        if not 0 <= index < self.owner_count:
            raise IndexError("Approval index outside the owner snapshot")
        self.approvals[index] = True

    def status(self, current_time: PosixTime) -> ProposalStatus:
        if self.executed:
            return ProposalStatus.EXECUTED
        if self.cancelled:
            return ProposalStatus.CANCELLED
        if self.is_expired(current_time):
            return ProposalStatus.EXPIRED
        return ProposalStatus.PENDING

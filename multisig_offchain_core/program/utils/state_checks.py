"""Utilities for loading and validating multisig records inside a transaction."""

from multisig_offchain_core.blockchain.exceptions import MissingSignatureError
from multisig_offchain_core.blockchain.ledger import InstructionContext
from multisig_offchain_core.models.base import AccountAddress, Identity
from multisig_offchain_core.models.wallet_accounts import (
    MultisigWallet,
    TransactionProposal,
)
from multisig_offchain_core.program.addressing import (
    verify_proposal_address,
    verify_wallet_address,
)
from multisig_offchain_core.program.exceptions import (
    AccountDataError,
    AlreadyCancelledError,
    AlreadyExecutedError,
    OwnerNotFoundError,
    TransactionExpiredError,
    WalletMismatchError,
)


def load_wallet(ctx: InstructionContext, address: AccountAddress) -> MultisigWallet:
    """Load the wallet stored at ``address`` and check it re-derives there.

    Raises:
        AccountDataError: If the account is missing, foreign or not a wallet
        AddressMismatchError: If the record does not belong at this address
    """
    account = ctx.get_account(address)
    if account is None:
        raise AccountDataError(f"Wallet account {address.hex()} does not exist")
    if account.owner != ctx.program_id:
        raise AccountDataError(
            f"Wallet account {address.hex()} is not owned by the program"
        )

    try:
        wallet = MultisigWallet.from_cbor(account.data)
    except ValueError as e:
        raise AccountDataError(f"Invalid wallet data: {e}") from e

    verify_wallet_address(address, wallet, ctx.program_id)
    return wallet


def load_proposal(
    ctx: InstructionContext, address: AccountAddress
) -> TransactionProposal:
    """Load the proposal stored at ``address`` and check it re-derives there.

    Raises:
        AccountDataError: If the account is missing, foreign or not a proposal
        AddressMismatchError: If the record does not belong at this address
    """
    account = ctx.get_account(address)
    if account is None:
        raise AccountDataError(f"Proposal account {address.hex()} does not exist")
    if account.owner != ctx.program_id:
        raise AccountDataError(
            f"Proposal account {address.hex()} is not owned by the program"
        )

    try:
        proposal = TransactionProposal.from_cbor(account.data)
    except ValueError as e:
        raise AccountDataError(f"Invalid proposal data: {e}") from e

    verify_proposal_address(address, proposal, ctx.program_id)
    return proposal


def load_linked(
    ctx: InstructionContext,
) -> tuple[AccountAddress, TransactionProposal, AccountAddress, MultisigWallet]:
    """Load the ``proposal`` and ``wallet`` accounts and check they belong together.

    Raises:
        WalletMismatchError: If the proposal names a different wallet
    """
    proposal_address = ctx.account_address("proposal")
    wallet_address = ctx.account_address("wallet")

    proposal = load_proposal(ctx, proposal_address)
    if proposal.wallet != wallet_address:
        raise WalletMismatchError(
            f"Proposal {proposal_address.hex()} belongs to wallet "
            f"{proposal.wallet.hex()}, not {wallet_address.hex()}"
        )

    wallet = load_wallet(ctx, wallet_address)
    return proposal_address, proposal, wallet_address, wallet


def store_record(ctx: InstructionContext, address: AccountAddress, record) -> None:
    ctx.write_data(address, record.to_cbor())


def require_owner(wallet: MultisigWallet, signer: Identity) -> int:
    """Return the signer's owner index.

    Raises:
        OwnerNotFoundError: If the signer is not an owner of the wallet
    """
    index = wallet.get_owner_index(signer)
    if index is None:
        raise OwnerNotFoundError(f"{signer.hex()} is not a wallet owner")
    return index


def require_signer(ctx: InstructionContext, role: str) -> Identity:
    """Return the address supplied for a role that must have signed."""
    signer = ctx.account_address(role)
    if not ctx.is_signer(signer):
        raise MissingSignatureError(f"The {role} {signer.hex()} must sign")
    return signer


def require_not_executed(proposal: TransactionProposal) -> None:
    if proposal.executed:
        raise AlreadyExecutedError("Proposal has already been executed")


def require_not_cancelled(proposal: TransactionProposal) -> None:
    if proposal.cancelled:
        raise AlreadyCancelledError("Proposal has already been cancelled")


def require_not_expired(proposal: TransactionProposal, current_time: int) -> None:
    if proposal.is_expired(current_time):
        raise TransactionExpiredError(
            f"Proposal expired at {proposal.expires_at}, now {current_time}"
        )

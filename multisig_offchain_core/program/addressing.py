"""Deterministic derivation of wallet and proposal addresses.

A derived address is the SHA-256 of the seeds, a one-byte bump, the program
id and a fixed marker. Only digests that are not valid ed25519 points are
accepted, so no private key exists for a derived address and only the
program can move its funds.
"""

import hashlib
from collections.abc import Sequence

from nacl.bindings import crypto_core_ed25519_is_valid_point

from multisig_offchain_core.models.base import (
    U64_MAX,
    AccountAddress,
    Identity,
    ProgramId,
    validate_identity,
)
from multisig_offchain_core.models.wallet_accounts import (
    MultisigWallet,
    TransactionProposal,
)

from .exceptions import AddressMismatchError, InvalidSeedsError

WALLET_SEED = b"multisig_wallet"
PROPOSAL_SEED = b"transaction_proposal"
PDA_MARKER = b"ProgramDerivedAddress"
MAX_SEED_LENGTH = 32
MAX_SEEDS = 16
MAX_BUMP = 255


def is_on_curve(candidate: bytes) -> bool:
    return bool(crypto_core_ed25519_is_valid_point(candidate))


def create_program_address(
    seeds: Sequence[bytes], program_id: ProgramId
) -> AccountAddress:
    """Derive the address for seeds that already end with a bump byte.

    Raises:
        InvalidSeedsError: If a seed is too long or the digest is on the curve
    """
    if len(seeds) > MAX_SEEDS:
        raise InvalidSeedsError(f"At most {MAX_SEEDS} seeds are allowed")
    if any(len(seed) > MAX_SEED_LENGTH for seed in seeds):
        raise InvalidSeedsError(f"Seeds are limited to {MAX_SEED_LENGTH} bytes")

    digest = hashlib.sha256()
    for seed in seeds:
        digest.update(seed)
    digest.update(program_id)
    digest.update(PDA_MARKER)
    candidate = digest.digest()

    if is_on_curve(candidate):
        raise InvalidSeedsError("Derived address is a valid ed25519 point")
    return candidate


def find_program_address(
    seeds: Sequence[bytes], program_id: ProgramId
) -> tuple[AccountAddress, int]:
    """Search bumps from 255 down and return the first off-curve address."""
    for bump in range(MAX_BUMP, -1, -1):
        try:
            return create_program_address([*seeds, bytes([bump])], program_id), bump
        except InvalidSeedsError:
            continue
    raise InvalidSeedsError("No bump yields an off-curve address")


def wallet_seeds(creator: Identity) -> list[bytes]:
    return [WALLET_SEED, validate_identity(creator, "creator")]


def proposal_seeds(wallet_address: AccountAddress, sequence_number: int) -> list[bytes]:
    if not 0 <= sequence_number <= U64_MAX:
        raise InvalidSeedsError("Sequence number must fit in 64 bits")
    return [
        PROPOSAL_SEED,
        validate_identity(wallet_address, "wallet address"),
        sequence_number.to_bytes(8, "little"),
    ]


def derive_wallet_address(
    creator: Identity, program_id: ProgramId
) -> tuple[AccountAddress, int]:
    return find_program_address(wallet_seeds(creator), program_id)


def derive_proposal_address(
    wallet_address: AccountAddress, sequence_number: int, program_id: ProgramId
) -> tuple[AccountAddress, int]:
    return find_program_address(
        proposal_seeds(wallet_address, sequence_number), program_id
    )


def verify_wallet_address(
    address: AccountAddress, wallet: MultisigWallet, program_id: ProgramId
) -> None:
    """Check a wallet record against the address it is stored under.

    Raises:
        AddressMismatchError: If the creator and bump derive another address
    """
    try:
        expected = create_program_address(
            [*wallet_seeds(wallet.creator), bytes([wallet.bump])], program_id
        )
    except (InvalidSeedsError, ValueError) as e:
        raise AddressMismatchError(f"Wallet record cannot be re-derived: {e}") from e

    if expected != address:
        raise AddressMismatchError(
            f"Wallet {address.hex()} does not match its derived address"
        )


def verify_proposal_address(
    address: AccountAddress, proposal: TransactionProposal, program_id: ProgramId
) -> None:
    """Check a proposal record against the address it is stored under.

    Raises:
        AddressMismatchError: If wallet, nonce and bump derive another address
    """
    try:
        expected = create_program_address(
            [*proposal_seeds(proposal.wallet, proposal.nonce), bytes([proposal.bump])],
            program_id,
        )
    except (InvalidSeedsError, ValueError) as e:
        raise AddressMismatchError(
            f"Proposal record cannot be re-derived: {e}"
        ) from e

    if expected != address:
        raise AddressMismatchError(
            f"Proposal {address.hex()} does not match its derived address"
        )

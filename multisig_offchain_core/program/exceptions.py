"""Custom exceptions raised by the multisig program.

Every error carries a stable ``code`` that clients can match on without
depending on the class hierarchy.
"""

from multisig_offchain_core.blockchain.exceptions import ProgramError


class MultisigError(ProgramError):
    """Base exception for all multisig program errors."""

    code = "MultisigError"


# Validation Errors
class ValidationError(MultisigError):
    """Base exception for malformed requests."""

    code = "ValidationError"


class InvalidOwnerListError(ValidationError):
    """Raised when the owner list has a bad size, duplicates or a foreign payer."""

    code = "InvalidOwnerList"


class InvalidThresholdError(ValidationError):
    """Raised when the threshold is zero or exceeds the owner count."""

    code = "InvalidThreshold"


class InvalidInstructionError(ValidationError):
    """Raised when instruction data cannot be decoded or has bad arguments."""

    code = "InvalidInstruction"


# Authorization Errors
class OwnerNotFoundError(MultisigError):
    """Raised when the signer is not an owner of the wallet."""

    code = "OwnerNotFound"


# State Conflict Errors
class StateConflictError(MultisigError):
    """Base exception for operations invalid in the current record state."""

    code = "StateConflict"


class AlreadyExecutedError(StateConflictError):
    """Raised when the proposal has already been executed."""

    code = "AlreadyExecuted"


class AlreadyCancelledError(StateConflictError):
    """Raised when the proposal has already been cancelled."""

    code = "AlreadyCancelled"


class AlreadyExistsError(StateConflictError):
    """Raised when the target address already holds an account."""

    code = "AlreadyExists"


class TransactionExpiredError(StateConflictError):
    """Raised when approving or executing a proposal past its expiry."""

    code = "TransactionExpired"


class SequenceOverflowError(StateConflictError):
    """Raised when the wallet nonce cannot be incremented further."""

    code = "SequenceOverflow"


# Quorum and Funds Errors
class InsufficientApprovalsError(MultisigError):
    """Raised when a proposal has fewer approvals than the threshold."""

    code = "InsufficientApprovals"


class InsufficientFundsError(MultisigError):
    """Raised when the wallet cannot cover the proposal amount."""

    code = "InsufficientFunds"


# Addressing Errors
class AddressingError(MultisigError):
    """Base exception for derived address and account linkage errors."""

    code = "AddressingError"


class AddressMismatchError(AddressingError):
    """Raised when a supplied address differs from the derived one."""

    code = "AddressMismatch"


class WalletMismatchError(AddressingError):
    """Raised when a proposal does not belong to the supplied wallet."""

    code = "WalletMismatch"


class RecipientMismatchError(AddressingError):
    """Raised when the supplied recipient differs from the proposal's."""

    code = "RecipientMismatch"


class InvalidSeedsError(AddressingError):
    """Raised when seeds and bump do not produce an off-curve address."""

    code = "InvalidSeeds"


# Account Data Errors
class AccountDataError(MultisigError):
    """Raised when account data is missing, foreign or undecodable."""

    code = "AccountDataError"

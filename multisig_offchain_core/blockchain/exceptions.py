"""Custom exceptions for ledger operations."""


class LedgerError(Exception):
    """Base exception for ledger errors."""

    pass


class LedgerConfigError(LedgerError):
    """Raised when there are ledger configuration issues."""

    pass


class AccountNotFoundError(LedgerError):
    """Raised when a required account does not exist."""

    pass


class AccountAlreadyInUseError(LedgerError):
    """Raised when allocating an address that already holds an account."""

    pass


class AccountDataTooLargeError(LedgerError):
    """Raised when account data exceeds the allocated space."""

    pass


class ReadOnlyAccountError(LedgerError):
    """Raised when a program writes to an account it does not own."""

    pass


class InsufficientBalanceError(LedgerError):
    """Raised when an account cannot cover a debit or rent."""

    pass


class ProgramNotFoundError(LedgerError):
    """Raised when a transaction targets an unregistered program."""

    pass


class TransactionError(LedgerError):
    """Base class for transaction related errors."""

    pass


class MissingSignatureError(TransactionError):
    """Raised when a required signer did not sign the transaction."""

    pass


class SignatureVerificationError(TransactionError):
    """Raised when a transaction signature does not verify."""

    pass


class DuplicateTransactionError(TransactionError):
    """Raised when an already processed transaction is resubmitted."""

    pass


class TransactionBuildError(TransactionError):
    """Raised when transaction building fails."""

    pass


class TransactionSubmissionError(TransactionError):
    """Raised when transaction submission fails."""

    pass


class ProgramError(LedgerError):
    """Base class for errors raised by a program while processing an instruction.

    The ledger aborts the transaction and re-raises the error unchanged.
    """

    pass

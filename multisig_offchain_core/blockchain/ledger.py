"""Ledger interface the multisig program is executed against.

The ledger owns account storage, balance transfers, signature verification
and serialization of submitted transactions. A program only ever sees an
``InstructionContext``: a copy-on-write view of the accounts a transaction
names. The ledger commits the view if the program returns and discards it
if the program raises, so every check a program performs and the writes it
makes land as one unit.
"""

import logging
from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING

from multisig_offchain_core.constants.status import ProcessStatus
from multisig_offchain_core.models.base import (
    IDENTITY_SIZE,
    AccountAddress,
    Lamports,
    PosixTime,
    ProgramId,
)

from .exceptions import (
    AccountAlreadyInUseError,
    AccountDataTooLargeError,
    AccountNotFoundError,
    InsufficientBalanceError,
    MissingSignatureError,
    ReadOnlyAccountError,
)

if TYPE_CHECKING:
    from .transactions import Transaction

logger = logging.getLogger(__name__)

SYSTEM_PROGRAM_ID: ProgramId = bytes(IDENTITY_SIZE)


@dataclass
class Account:
    """A ledger account: a balance plus data owned by one program."""

    address: AccountAddress
    balance: Lamports
    owner: ProgramId = SYSTEM_PROGRAM_ID
    space: int = 0
    data: bytes = b""

    def copy(self) -> "Account":
        return replace(self)


@dataclass
class LedgerConfig:
    """Ledger rent and clock parameters."""

    lamports_per_byte_year: int = 3480
    exemption_years: int = 2
    account_storage_overhead: int = 128
    use_wall_clock: bool = True
    genesis_time: PosixTime = 1_700_000_000

    def minimum_balance(self, space: int) -> Lamports:
        """Rent-exempt minimum for an account with ``space`` bytes of data."""
        return (
            (self.account_storage_overhead + space)
            * self.lamports_per_byte_year
            * self.exemption_years
        )


@dataclass
class TransactionReceipt:
    """Result of a committed transaction."""

    transaction_id: str
    slot: int
    timestamp: PosixTime
    status: ProcessStatus = ProcessStatus.TRANSACTION_CONFIRMED
    logs: list[str] = field(default_factory=list)


class InstructionContext:
    """Copy-on-write account view handed to a program for one transaction."""

    def __init__(
        self,
        program_id: ProgramId,
        accounts: dict[str, AccountAddress],
        signers: frozenset[bytes],
        current_time: PosixTime,
        loader: Callable[[AccountAddress], Account | None],
        config: LedgerConfig,
    ) -> None:
        self.program_id = program_id
        self.accounts = accounts
        self.signers = signers
        self.current_time = current_time
        self.config = config
        self.logs: list[str] = []
        self._loader = loader
        self._working: dict[AccountAddress, Account | None] = {}

    def account_address(self, role: str) -> AccountAddress:
        """Address the transaction supplied for an account role."""
        try:
            return self.accounts[role]
        except KeyError as e:
            raise AccountNotFoundError(f"Missing '{role}' account") from e

    def is_signer(self, address: AccountAddress) -> bool:
        return address in self.signers

    def get_account(self, address: AccountAddress) -> Account | None:
        if address not in self._working:
            account = self._loader(address)
            self._working[address] = account.copy() if account else None
        return self._working[address]

    def require_account(self, address: AccountAddress) -> Account:
        account = self.get_account(address)
        if account is None:
            raise AccountNotFoundError(f"Account {address.hex()} not found")
        return account

    def create_account(
        self, address: AccountAddress, payer: AccountAddress, space: int
    ) -> Account:
        """Allocate a program-owned account, funded with rent by the payer."""
        existing = self.get_account(address)
        if existing is not None and (
            existing.owner != SYSTEM_PROGRAM_ID or existing.space
        ):
            raise AccountAlreadyInUseError(f"Account {address.hex()} already in use")

        if not self.is_signer(payer):
            raise MissingSignatureError(f"Payer {payer.hex()} must sign")

        rent = self.config.minimum_balance(space)
        payer_account = self.require_account(payer)
        if payer_account.balance < rent:
            raise InsufficientBalanceError(
                f"Payer {payer.hex()} cannot cover rent of {rent}"
            )
        payer_account.balance -= rent

        prior_balance = existing.balance if existing else 0
        account = Account(
            address=address,
            balance=prior_balance + rent,
            owner=self.program_id,
            space=space,
        )
        self._working[address] = account
        return account

    def write_data(self, address: AccountAddress, data: bytes) -> None:
        account = self.require_account(address)
        if account.owner != self.program_id:
            raise ReadOnlyAccountError(
                f"Account {address.hex()} is not owned by the program"
            )
        if len(data) > account.space:
            raise AccountDataTooLargeError(
                f"{len(data)} bytes exceed the {account.space} allocated"
            )
        account.data = data

    def transfer(
        self, source: AccountAddress, destination: AccountAddress, amount: Lamports
    ) -> None:
        """Move lamports between accounts inside the working set."""
        if amount < 0:
            raise ValueError("Transfer amount must not be negative")

        source_account = self.require_account(source)
        if source_account.owner != self.program_id and not self.is_signer(source):
            raise ReadOnlyAccountError(f"Cannot debit account {source.hex()}")

        floor = (
            self.config.minimum_balance(source_account.space)
            if source_account.space
            else 0
        )
        if source_account.balance - amount < floor:
            raise InsufficientBalanceError(
                f"Account {source.hex()} cannot transfer {amount}"
            )

        destination_account = self.get_account(destination)
        if destination_account is None:
            destination_account = Account(address=destination, balance=0)
            self._working[destination] = destination_account

        source_account.balance -= amount
        destination_account.balance += amount

    def log(self, message: str) -> None:
        self.logs.append(message)
        logger.debug("Program log: %s", message)

    @property
    def modified(self) -> dict[AccountAddress, Account]:
        """Accounts to write back on commit."""
        return {
            address: account
            for address, account in self._working.items()
            if account is not None
        }


class Program(ABC):
    """On-ledger program invoked by transactions that name its id."""

    program_id: ProgramId

    @abstractmethod
    def process(self, ctx: InstructionContext, instruction_data: bytes) -> None:
        """Validate and apply one instruction, raising to abort it."""


class Ledger(ABC):
    """External ledger the multisig engine relies on."""

    config: LedgerConfig

    @abstractmethod
    async def get_account(self, address: AccountAddress) -> Account | None:
        """Get an account, or None if the address holds nothing."""

    async def get_balance(self, address: AccountAddress) -> Lamports:
        account = await self.get_account(address)
        return account.balance if account else 0

    @abstractmethod
    async def get_program_accounts(
        self,
        program_id: ProgramId,
        predicate: Callable[[Account], bool] | None = None,
    ) -> list[Account]:
        """Get all accounts owned by a program, optionally filtered."""

    @abstractmethod
    def current_time(self) -> PosixTime:
        """Ledger clock in unix seconds."""

    @abstractmethod
    async def submit_transaction(self, tx: "Transaction") -> TransactionReceipt:
        """Verify, execute and atomically commit a transaction."""

    def minimum_balance(self, space: int) -> Lamports:
        return self.config.minimum_balance(space)


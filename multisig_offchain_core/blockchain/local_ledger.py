"""In-process ledger with optional on-disk persistence.

Implements the ``Ledger`` contract for tests, the CLI and local use: one
submission at a time, copy-on-write execution and an all-or-nothing commit.
When ``state_path`` is set the full account state is rewritten atomically to
a CBOR snapshot after every commit.
"""

import asyncio
import logging
import os
import tempfile
import time
from collections import OrderedDict
from collections.abc import Callable, Mapping
from pathlib import Path

import cbor2

from multisig_offchain_core.models.base import (
    AccountAddress,
    Lamports,
    PosixTime,
    ProgramId,
    short_hex,
)

from .exceptions import (
    DuplicateTransactionError,
    LedgerConfigError,
    MissingSignatureError,
    ProgramNotFoundError,
)
from .ledger import (
    Account,
    InstructionContext,
    Ledger,
    LedgerConfig,
    Program,
    TransactionReceipt,
)
from .transactions import Transaction

logger = logging.getLogger(__name__)

SNAPSHOT_VERSION = 1
MAX_PROCESSED_HISTORY = 10_000


class LocalLedger(Ledger):
    """Single-writer ledger kept in memory."""

    def __init__(
        self,
        config: LedgerConfig | None = None,
        state_path: Path | str | None = None,
    ) -> None:
        self.config = config or LedgerConfig()
        self.state_path = Path(state_path) if state_path else None
        self._accounts: dict[AccountAddress, Account] = {}
        self._programs: dict[ProgramId, Program] = {}
        self._processed: OrderedDict[str, int] = OrderedDict()
        self._slot = 0
        self._time_offset = 0
        self._lock = asyncio.Lock()

        if self.state_path and self.state_path.exists():
            self._load()

    def register_program(self, program: Program) -> None:
        self._programs[program.program_id] = program
        logger.debug("Registered program %s", short_hex(program.program_id))

    def current_time(self) -> PosixTime:
        if self.config.use_wall_clock:
            base = int(time.time())
        else:
            base = self.config.genesis_time
        return base + self._time_offset

    def warp_time(self, seconds: int) -> PosixTime:
        """Move the ledger clock forward."""
        if seconds < 0:
            raise ValueError("Cannot move the ledger clock backwards")
        self._persist(self._accounts, time_offset=self._time_offset + seconds)
        self._time_offset += seconds
        return self.current_time()

    def save(self) -> None:
        """Write the current state to ``state_path``."""
        self._persist(self._accounts)

    @property
    def slot(self) -> int:
        return self._slot

    async def get_account(self, address: AccountAddress) -> Account | None:
        account = self._accounts.get(address)
        return account.copy() if account else None

    async def get_program_accounts(
        self,
        program_id: ProgramId,
        predicate: Callable[[Account], bool] | None = None,
    ) -> list[Account]:
        return [
            account.copy()
            for account in self._accounts.values()
            if account.owner == program_id and (predicate is None or predicate(account))
        ]

    async def airdrop(self, address: AccountAddress, amount: Lamports) -> Lamports:
        """Credit an account out of thin air. Returns the new balance."""
        if amount <= 0:
            raise ValueError("Airdrop amount must be positive")

        async with self._lock:
            account = self._accounts.get(address)
            updated = account.copy() if account else Account(address=address, balance=0)
            updated.balance += amount
            accounts = {**self._accounts, address: updated}
            self._persist(accounts)
            self._accounts = accounts

        logger.info("Airdropped %d to %s", amount, short_hex(address))
        return updated.balance

    async def submit_transaction(self, tx: Transaction) -> TransactionReceipt:
        tx_id = tx.id
        signers = tx.verify_signatures()

        missing = [s for s in tx.signers if s not in signers]
        if missing:
            raise MissingSignatureError(
                f"Missing signatures from {', '.join(s.hex() for s in missing)}"
            )

        program = self._programs.get(tx.program_id)
        if program is None:
            raise ProgramNotFoundError(f"Program {tx.program_id.hex()} not registered")

        async with self._lock:
            if tx_id in self._processed:
                raise DuplicateTransactionError(
                    f"Transaction {tx_id} already processed"
                )

            ctx = InstructionContext(
                program_id=tx.program_id,
                accounts=dict(tx.accounts),
                signers=signers,
                current_time=self.current_time(),
                loader=self._accounts.get,
                config=self.config,
            )

            try:
                program.process(ctx, tx.instruction)
            except Exception as e:
                logger.warning(
                    "Transaction %s rejected: %s: %s",
                    tx_id[:16],
                    getattr(e, "code", type(e).__name__),
                    e,
                )
                raise

            accounts = {**self._accounts, **ctx.modified}
            slot = self._slot + 1
            processed = OrderedDict(self._processed)
            processed[tx_id] = slot
            while len(processed) > MAX_PROCESSED_HISTORY:
                processed.popitem(last=False)

            # Nothing is visible until the snapshot is on disk
            self._persist(accounts, slot=slot, processed=processed)
            self._accounts = accounts
            self._slot = slot
            self._processed = processed

            receipt = TransactionReceipt(
                transaction_id=tx_id,
                slot=self._slot,
                timestamp=ctx.current_time,
                logs=list(ctx.logs),
            )

        logger.info("Committed transaction %s at slot %d", tx_id[:16], receipt.slot)
        return receipt

    def _persist(
        self,
        accounts: dict[AccountAddress, Account],
        slot: int | None = None,
        processed: OrderedDict[str, int] | None = None,
        time_offset: int | None = None,
    ) -> None:
        """Atomically rewrite the snapshot file, if persistence is enabled.

        Values not passed are taken from the committed state.
        """
        if not self.state_path:
            return

        slot = self._slot if slot is None else slot
        processed = self._processed if processed is None else processed
        time_offset = self._time_offset if time_offset is None else time_offset

        snapshot = {
            "version": SNAPSHOT_VERSION,
            "slot": slot,
            "time_offset": time_offset,
            "processed": list(processed.items()),
            "accounts": [
                [a.address, a.balance, a.owner, a.space, a.data]
                for a in accounts.values()
            ],
        }

        self.state_path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(
            dir=self.state_path.parent, prefix=f".{self.state_path.name}."
        )
        try:
            with os.fdopen(fd, "wb") as f:
                cbor2.dump(snapshot, f)
            os.replace(tmp_path, self.state_path)
        except BaseException:
            Path(tmp_path).unlink(missing_ok=True)
            raise

    def _load(self) -> None:
        try:
            with self.state_path.open("rb") as f:
                snapshot = cbor2.load(f)
        except (OSError, cbor2.CBORDecodeError, ValueError, EOFError) as e:
            raise LedgerConfigError(
                f"Failed to load ledger state from {self.state_path}: {e}"
            ) from e

        if not isinstance(snapshot, Mapping):
            raise LedgerConfigError(f"Malformed ledger state in {self.state_path}")
        if snapshot.get("version") != SNAPSHOT_VERSION:
            raise LedgerConfigError(
                f"Unsupported ledger state version: {snapshot.get('version')}"
            )

        self._slot = snapshot["slot"]
        self._time_offset = snapshot["time_offset"]
        self._processed = OrderedDict(
            (tx_id, slot) for tx_id, slot in snapshot["processed"]
        )
        self._accounts = {
            address: Account(
                address=address, balance=balance, owner=owner, space=space, data=data
            )
            for address, balance, owner, space, data in snapshot["accounts"]
        }
        logger.debug(
            "Loaded %d accounts from %s at slot %d",
            len(self._accounts),
            self.state_path,
            self._slot,
        )

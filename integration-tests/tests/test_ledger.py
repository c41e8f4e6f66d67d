"""Test the local ledger: signatures, replay, atomic commits and persistence."""

import pytest
from nacl.signing import SigningKey

from multisig_offchain_core.blockchain.exceptions import (
    AccountAlreadyInUseError,
    AccountDataTooLargeError,
    DuplicateTransactionError,
    InsufficientBalanceError,
    LedgerConfigError,
    MissingSignatureError,
    ProgramError,
    ProgramNotFoundError,
    ReadOnlyAccountError,
    SignatureVerificationError,
)
from multisig_offchain_core.blockchain.ledger import (
    Account,
    InstructionContext,
    LedgerConfig,
    Program,
)
from multisig_offchain_core.blockchain.local_ledger import LocalLedger
from multisig_offchain_core.blockchain.transactions import Transaction

from .test_utils import identity, make_context

TRANSFER_PROGRAM_ID = bytes([9]) * 32


class TransferProgram(Program):
    """Moves 100 lamports from payer to target, then fails if asked to."""

    program_id = TRANSFER_PROGRAM_ID

    def process(self, ctx: InstructionContext, instruction_data: bytes) -> None:
        ctx.transfer(ctx.account_address("payer"), ctx.account_address("target"), 100)
        ctx.log("moved 100")
        if instruction_data == b"fail":
            raise ProgramError("requested failure")


class TestLocalLedger:
    """Test transaction processing on the local ledger."""

    def setup_method(self) -> None:
        self.ledger = LocalLedger(LedgerConfig(use_wall_clock=False))
        self.ledger.register_program(TransferProgram())
        self.payer_key = SigningKey.generate()
        self.payer = identity(self.payer_key)
        self.target = identity(SigningKey.generate())

    def make_tx(self, instruction: bytes = b"ok", **kwargs) -> Transaction:
        values = {
            "program_id": TRANSFER_PROGRAM_ID,
            "instruction": instruction,
            "accounts": {"payer": self.payer, "target": self.target},
            "signers": [self.payer],
        }
        values.update(kwargs)
        return Transaction(**values)

    @pytest.mark.asyncio
    async def test_commit(self) -> None:
        await self.ledger.airdrop(self.payer, 1_000)
        tx = self.make_tx()
        tx.sign(self.payer_key)

        receipt = await self.ledger.submit_transaction(tx)

        assert receipt.slot == 1
        assert receipt.transaction_id == tx.id
        assert receipt.logs == ["moved 100"]
        assert await self.ledger.get_balance(self.payer) == 900
        assert await self.ledger.get_balance(self.target) == 100

    @pytest.mark.asyncio
    async def test_failed_program_commits_nothing(self) -> None:
        await self.ledger.airdrop(self.payer, 1_000)
        tx = self.make_tx(b"fail")
        tx.sign(self.payer_key)

        with pytest.raises(ProgramError, match="requested failure"):
            await self.ledger.submit_transaction(tx)

        assert await self.ledger.get_balance(self.payer) == 1_000
        assert await self.ledger.get_account(self.target) is None
        assert self.ledger.slot == 0

    @pytest.mark.asyncio
    async def test_failed_transaction_can_be_retried(self) -> None:
        await self.ledger.airdrop(self.payer, 50)
        tx = self.make_tx()
        tx.sign(self.payer_key)

        with pytest.raises(InsufficientBalanceError):
            await self.ledger.submit_transaction(tx)

        await self.ledger.airdrop(self.payer, 1_000)
        receipt = await self.ledger.submit_transaction(tx)
        assert receipt.slot == 1

    @pytest.mark.asyncio
    async def test_missing_signature(self) -> None:
        await self.ledger.airdrop(self.payer, 1_000)

        with pytest.raises(MissingSignatureError):
            await self.ledger.submit_transaction(self.make_tx())

    @pytest.mark.asyncio
    async def test_tampered_transaction(self) -> None:
        await self.ledger.airdrop(self.payer, 1_000)
        tx = self.make_tx()
        tx.sign(self.payer_key)
        tx.accounts["target"] = identity(SigningKey.generate())

        with pytest.raises(SignatureVerificationError):
            await self.ledger.submit_transaction(tx)

    @pytest.mark.asyncio
    async def test_signature_from_wrong_key(self) -> None:
        tx = self.make_tx()
        forged = SigningKey.generate().sign(tx.message_bytes()).signature
        tx.signatures[self.payer] = forged

        with pytest.raises(SignatureVerificationError):
            await self.ledger.submit_transaction(tx)

    @pytest.mark.asyncio
    async def test_duplicate_rejected(self) -> None:
        await self.ledger.airdrop(self.payer, 1_000)
        tx = self.make_tx()
        tx.sign(self.payer_key)

        await self.ledger.submit_transaction(tx)
        with pytest.raises(DuplicateTransactionError):
            await self.ledger.submit_transaction(tx)

        assert await self.ledger.get_balance(self.target) == 100

    @pytest.mark.asyncio
    async def test_unknown_program(self) -> None:
        tx = self.make_tx(program_id=bytes([1]) * 32)
        tx.sign(self.payer_key)

        with pytest.raises(ProgramNotFoundError):
            await self.ledger.submit_transaction(tx)

    @pytest.mark.asyncio
    async def test_airdrop_must_be_positive(self) -> None:
        with pytest.raises(ValueError):
            await self.ledger.airdrop(self.payer, 0)

    def test_clock(self) -> None:
        start = self.ledger.current_time()
        assert start == LedgerConfig().genesis_time

        assert self.ledger.warp_time(3_600) == start + 3_600
        with pytest.raises(ValueError):
            self.ledger.warp_time(-1)

    def test_minimum_balance(self) -> None:
        assert self.ledger.minimum_balance(0) == 128 * 3480 * 2
        assert self.ledger.minimum_balance(360) == (128 + 360) * 3480 * 2


class TestPersistence:
    """Test the on-disk ledger snapshot."""

    @pytest.mark.asyncio
    async def test_state_survives_reload(self, tmp_path) -> None:
        state_path = tmp_path / "ledger.cbor"
        config = LedgerConfig(use_wall_clock=False)
        payer_key = SigningKey.generate()
        payer = identity(payer_key)
        target = identity(SigningKey.generate())

        ledger = LocalLedger(config, state_path)
        ledger.register_program(TransferProgram())
        await ledger.airdrop(payer, 1_000)
        tx = Transaction(
            program_id=TRANSFER_PROGRAM_ID,
            instruction=b"ok",
            accounts={"payer": payer, "target": target},
            signers=[payer],
        )
        tx.sign(payer_key)
        await ledger.submit_transaction(tx)
        ledger.warp_time(60)

        reloaded = LocalLedger(config, state_path)
        reloaded.register_program(TransferProgram())

        assert await reloaded.get_balance(payer) == 900
        assert await reloaded.get_balance(target) == 100
        assert reloaded.slot == 1
        assert reloaded.current_time() == config.genesis_time + 60
        with pytest.raises(DuplicateTransactionError):
            await reloaded.submit_transaction(tx)

    @pytest.mark.asyncio
    async def test_failed_snapshot_write_commits_nothing(
        self, tmp_path, monkeypatch
    ) -> None:
        state_path = tmp_path / "ledger.cbor"
        payer_key = SigningKey.generate()
        payer = identity(payer_key)
        target = identity(SigningKey.generate())

        ledger = LocalLedger(LedgerConfig(use_wall_clock=False), state_path)
        ledger.register_program(TransferProgram())
        await ledger.airdrop(payer, 1_000)
        tx = Transaction(
            program_id=TRANSFER_PROGRAM_ID,
            instruction=b"ok",
            accounts={"payer": payer, "target": target},
            signers=[payer],
        )
        tx.sign(payer_key)

        def disk_full(*args, **kwargs) -> None:
            raise OSError("No space left on device")

        with monkeypatch.context() as patch:
            patch.setattr(ledger, "_persist", disk_full)
            with pytest.raises(OSError):
                await ledger.submit_transaction(tx)
            with pytest.raises(OSError):
                ledger.warp_time(60)

        assert ledger.slot == 0
        assert ledger.current_time() == ledger.config.genesis_time
        assert await ledger.get_balance(payer) == 1_000
        assert await ledger.get_account(target) is None

        receipt = await ledger.submit_transaction(tx)
        assert receipt.slot == 1
        assert await ledger.get_balance(target) == 100
        assert LocalLedger(state_path=state_path).slot == 1

    def test_corrupt_snapshot(self, tmp_path) -> None:
        state_path = tmp_path / "ledger.cbor"
        state_path.write_bytes(b"\xff\xff")

        with pytest.raises(LedgerConfigError):
            LocalLedger(state_path=state_path)


class TestInstructionContext:
    """Test the account rules enforced by the instruction context."""

    def setup_method(self) -> None:
        self.program_id = bytes([5]) * 32
        self.payer = identity(SigningKey.generate())
        self.config = LedgerConfig()

    def test_create_account_charges_rent(self) -> None:
        address = bytes([1]) * 32
        state = {self.payer: Account(address=self.payer, balance=10_000_000)}
        ctx = make_context(self.program_id, {}, [self.payer], state)

        account = ctx.create_account(address, self.payer, 100)

        rent = self.config.minimum_balance(100)
        assert account.balance == rent
        assert account.owner == self.program_id
        assert ctx.modified[self.payer].balance == 10_000_000 - rent
        # The loaded state is untouched until commit
        assert state[self.payer].balance == 10_000_000

    def test_create_account_keeps_prior_deposit(self) -> None:
        address = bytes([1]) * 32
        state = {
            self.payer: Account(address=self.payer, balance=10_000_000),
            address: Account(address=address, balance=500),
        }
        ctx = make_context(self.program_id, {}, [self.payer], state)

        account = ctx.create_account(address, self.payer, 0)
        assert account.balance == 500 + self.config.minimum_balance(0)

    def test_create_account_in_use(self) -> None:
        address = bytes([1]) * 32
        state = {
            self.payer: Account(address=self.payer, balance=10_000_000),
            address: Account(
                address=address, balance=1, owner=self.program_id, space=10
            ),
        }
        ctx = make_context(self.program_id, {}, [self.payer], state)

        with pytest.raises(AccountAlreadyInUseError):
            ctx.create_account(address, self.payer, 10)

    def test_create_account_requires_payer_signature(self) -> None:
        state = {self.payer: Account(address=self.payer, balance=10_000_000)}
        ctx = make_context(self.program_id, {}, [], state)

        with pytest.raises(MissingSignatureError):
            ctx.create_account(bytes([1]) * 32, self.payer, 10)

    def test_write_data_rules(self) -> None:
        owned = bytes([1]) * 32
        state = {
            owned: Account(address=owned, balance=1, owner=self.program_id, space=4),
            self.payer: Account(address=self.payer, balance=1),
        }
        ctx = make_context(self.program_id, {}, [self.payer], state)

        ctx.write_data(owned, b"abcd")
        with pytest.raises(AccountDataTooLargeError):
            ctx.write_data(owned, b"abcde")
        with pytest.raises(ReadOnlyAccountError):
            ctx.write_data(self.payer, b"")

    def test_transfer_respects_rent_floor(self) -> None:
        owned = bytes([1]) * 32
        floor = self.config.minimum_balance(10)
        state = {
            owned: Account(
                address=owned, balance=floor + 50, owner=self.program_id, space=10
            )
        }
        ctx = make_context(self.program_id, {}, [], state)

        ctx.transfer(owned, self.payer, 50)
        with pytest.raises(InsufficientBalanceError):
            ctx.transfer(owned, self.payer, 1)

    def test_transfer_from_foreign_account(self) -> None:
        state = {self.payer: Account(address=self.payer, balance=100)}
        ctx = make_context(self.program_id, {}, [], state)

        with pytest.raises(ReadOnlyAccountError):
            ctx.transfer(self.payer, bytes([1]) * 32, 10)


class TestTransactionModel:
    """Test the transaction model."""

    def test_hex_serialization(self) -> None:
        key = SigningKey.generate()
        tx = Transaction(
            program_id=TRANSFER_PROGRAM_ID,
            instruction=b"ok",
            accounts={"payer": identity(key)},
            signers=[identity(key)],
        )
        tx.sign(key)

        dumped = tx.model_dump()
        assert dumped["accounts"]["payer"] == identity(key).hex()

        restored = Transaction.model_validate(dumped)
        assert restored.id == tx.id
        assert restored.verify_signatures() == frozenset([identity(key)])

    def test_fresh_nonce_gives_fresh_id(self) -> None:
        values = {
            "program_id": TRANSFER_PROGRAM_ID,
            "instruction": b"ok",
            "accounts": {},
            "signers": [],
        }
        assert Transaction(**values).id != Transaction(**values).id

    def test_rejects_short_addresses(self) -> None:
        with pytest.raises(ValueError):
            Transaction(
                program_id=TRANSFER_PROGRAM_ID,
                instruction=b"",
                accounts={"payer": b"short"},
                signers=[],
            )

    def test_sign_requires_listed_signer(self) -> None:
        tx = Transaction(
            program_id=TRANSFER_PROGRAM_ID, instruction=b"", accounts={}, signers=[]
        )
        with pytest.raises(ValueError):
            tx.sign(SigningKey.generate())

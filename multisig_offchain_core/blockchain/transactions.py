"""Transaction model and utilities for building, signing and submitting transactions."""

import hashlib
import logging
import secrets
from dataclasses import dataclass
from typing import Any

import cbor2
from nacl.exceptions import BadSignatureError
from nacl.signing import SigningKey, VerifyKey
from pydantic import BaseModel, ConfigDict, Field, model_serializer, model_validator

from multisig_offchain_core.models.base import (
    IDENTITY_SIZE,
    SIGNATURE_SIZE,
    AccountAddress,
    Identity,
    ProgramId,
    TaggedRecord,
)

from .exceptions import (
    LedgerError,
    SignatureVerificationError,
    TransactionBuildError,
    TransactionSubmissionError,
)
from .ledger import Ledger, TransactionReceipt

logger = logging.getLogger(__name__)

HEX_FIELDS = ("program_id", "instruction", "recent_nonce")


class Transaction(BaseModel):
    """A program instruction, the accounts it touches and its signatures.

    Accounts are named by role (``wallet``, ``proposal`` ...). ``signers``
    lists the identities that must sign; ``signatures`` maps each of them to
    an ed25519 signature over ``message_bytes()``.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    program_id: ProgramId = Field(..., description="Program the instruction targets")
    instruction: bytes = Field(..., description="CBOR encoded instruction")
    accounts: dict[str, AccountAddress] = Field(..., description="Accounts by role")
    signers: list[Identity] = Field(..., description="Required signers")
    recent_nonce: bytes = Field(
        default_factory=lambda: secrets.token_bytes(16),
        description="Uniqueness nonce",
    )
    signatures: dict[Identity, bytes] = Field(default_factory=dict)

    @model_validator(mode="before")
    @classmethod
    def deserialize_fields(cls, data: Any) -> Any:
        """Convert hex encoded fields back to bytes."""
        if not isinstance(data, dict):
            return data

        data = dict(data)
        for name in HEX_FIELDS:
            if isinstance(data.get(name), str):
                data[name] = bytes.fromhex(data[name])

        if isinstance(data.get("accounts"), dict):
            data["accounts"] = {
                role: bytes.fromhex(addr) if isinstance(addr, str) else addr
                for role, addr in data["accounts"].items()
            }

        if isinstance(data.get("signers"), list):
            data["signers"] = [
                bytes.fromhex(s) if isinstance(s, str) else s for s in data["signers"]
            ]

        if isinstance(data.get("signatures"), dict):
            data["signatures"] = {
                bytes.fromhex(k) if isinstance(k, str) else k: (
                    bytes.fromhex(v) if isinstance(v, str) else v
                )
                for k, v in data["signatures"].items()
            }

        return data

    @model_validator(mode="after")
    def validate_sizes(self) -> "Transaction":
        if len(self.program_id) != IDENTITY_SIZE:
            raise ValueError("Program id must be 32 bytes long")
        for role, address in self.accounts.items():
            if len(address) != IDENTITY_SIZE:
                raise ValueError(f"Account '{role}' must be 32 bytes long")
        for signer in self.signers:
            if len(signer) != IDENTITY_SIZE:
                raise ValueError("Signer keys must be 32 bytes long")
        return self

    @model_serializer
    def serialize_model(self) -> dict[str, Any]:
        """Serialize to dict with hex strings."""
        return {
            "program_id": self.program_id.hex(),
            "instruction": self.instruction.hex(),
            "accounts": {role: addr.hex() for role, addr in self.accounts.items()},
            "signers": [signer.hex() for signer in self.signers],
            "recent_nonce": self.recent_nonce.hex(),
            "signatures": {k.hex(): v.hex() for k, v in self.signatures.items()},
        }

    def message_bytes(self) -> bytes:
        """Canonical bytes covered by every signature."""
        return cbor2.dumps(
            [
                self.program_id,
                self.instruction,
                sorted(self.accounts.items()),
                self.signers,
                self.recent_nonce,
            ]
        )

    @property
    def id(self) -> str:
        return hashlib.blake2b(self.message_bytes(), digest_size=32).hexdigest()

    @property
    def missing_signers(self) -> list[Identity]:
        return [s for s in self.signers if s not in self.signatures]

    def sign(self, signing_key: SigningKey) -> None:
        """Add the signature of one of the required signers."""
        signer = bytes(signing_key.verify_key)
        if signer not in self.signers:
            raise ValueError(f"Key {signer.hex()} is not a required signer")
        self.signatures[signer] = signing_key.sign(self.message_bytes()).signature

    def verify_signatures(self) -> frozenset[Identity]:
        """Verify every attached signature and return the verified signers.

        Raises:
            SignatureVerificationError: If any signature does not verify
        """
        message = self.message_bytes()
        verified = set()
        for signer, signature in self.signatures.items():
            if len(signature) != SIGNATURE_SIZE:
                raise SignatureVerificationError(
                    f"Malformed signature for {signer.hex()}"
                )
            try:
                VerifyKey(signer).verify(message, signature)
            except (BadSignatureError, ValueError) as e:
                raise SignatureVerificationError(
                    f"Invalid signature for {signer.hex()}"
                ) from e
            verified.add(signer)
        return frozenset(verified)


@dataclass
class TransactionConfig:
    """Transaction building configuration."""

    nonce_size: int = 16


class TransactionManager:
    """Manages transaction building and submission."""

    def __init__(self, ledger: Ledger, config: TransactionConfig | None = None) -> None:
        self.ledger = ledger
        self.config = config or TransactionConfig()

    def build_tx(
        self,
        program_id: ProgramId,
        instruction: TaggedRecord,
        accounts: dict[str, AccountAddress],
        signers: list[Identity],
    ) -> Transaction:
        """Build an unsigned transaction for one instruction."""
        try:
            return Transaction(
                program_id=program_id,
                instruction=instruction.to_cbor(),
                accounts=accounts,
                signers=signers,
                recent_nonce=secrets.token_bytes(self.config.nonce_size),
            )
        except Exception as e:
            raise TransactionBuildError(f"Failed to build transaction: {e}") from e

    def sign_tx(self, tx: Transaction, signing_key: SigningKey) -> None:
        """Sign transaction with key."""
        tx.sign(signing_key)

    async def submit_tx(self, tx: Transaction) -> TransactionReceipt:
        """Submit a signed transaction.

        Ledger and program errors propagate unchanged so callers can act on
        the exact failure; anything else is wrapped.
        """
        try:
            receipt = await self.ledger.submit_transaction(tx)
            logger.info("Transaction %s confirmed at slot %d", tx.id, receipt.slot)
            return receipt

        except LedgerError:
            raise
        except Exception as e:
            raise TransactionSubmissionError(
                f"Failed to submit transaction: {e}"
            ) from e

    async def sign_and_submit(
        self, tx: Transaction, signing_keys: list[SigningKey]
    ) -> TransactionReceipt:
        """Sign with multiple keys and submit."""
        for key in signing_keys:
            self.sign_tx(tx, key)
        return await self.submit_tx(tx)

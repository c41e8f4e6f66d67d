"""Key and wallet management utilities for CLI operations."""

import json
from dataclasses import dataclass
from pathlib import Path

import cbor2
from nacl.signing import SigningKey, VerifyKey

SIGNING_KEY_TYPE = "Ed25519SigningKey"
VERIFICATION_KEY_TYPE = "Ed25519VerificationKey"


@dataclass
class WalletConfig:
    """Configuration for wallet loading."""

    signing_key_path: str | None = None
    seed_hex: str | None = None

    @classmethod
    def from_dict(cls, config: dict) -> "WalletConfig":
        """Create wallet config from dictionary."""
        return cls(
            signing_key_path=config.get("signing_key_path"),
            seed_hex=config.get("seed_hex"),
        )


class KeyManager:
    """Manages generating, saving and loading ed25519 keys.

    Key files are JSON envelopes whose ``cborHex`` field holds the raw key
    bytes as a CBOR byte string.
    """

    @staticmethod
    def generate() -> tuple[SigningKey, VerifyKey]:
        signing_key = SigningKey.generate()
        return signing_key, signing_key.verify_key

    @staticmethod
    def load_from_seed(seed_hex: str) -> tuple[SigningKey, VerifyKey]:
        """Load keys from a 32-byte hex seed.

        Raises:
            ValueError: If the seed is not 32 bytes of hex
        """
        try:
            seed = bytes.fromhex(seed_hex.strip())
        except ValueError as e:
            raise ValueError("Seed must be hex encoded") from e
        if len(seed) != 32:
            raise ValueError("Seed must be 32 bytes long")

        signing_key = SigningKey(seed)
        return signing_key, signing_key.verify_key

    @staticmethod
    def save_key(
        key: SigningKey | VerifyKey, path: Path | str, description: str = ""
    ) -> None:
        key_type = (
            SIGNING_KEY_TYPE if isinstance(key, SigningKey) else VERIFICATION_KEY_TYPE
        )
        envelope = {
            "type": key_type,
            "description": description,
            "cborHex": cbor2.dumps(bytes(key)).hex(),
        }
        path = Path(path)
        with path.open("w", encoding="utf-8") as f:
            json.dump(envelope, f, indent=4)

    @staticmethod
    def _read_key_bytes(path: Path | str, expected_type: str) -> bytes:
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Key file not found: {path}")

        try:
            with path.open("r", encoding="utf-8") as f:
                envelope = json.load(f)
            if envelope.get("type") != expected_type:
                raise ValueError(f"Expected a {expected_type} file")
            key_bytes = cbor2.loads(bytes.fromhex(envelope["cborHex"]))
        except (KeyError, TypeError, AttributeError, cbor2.CBORDecodeError) as e:
            raise ValueError(f"Malformed key file {path}: {e}") from e

        if not isinstance(key_bytes, bytes) or len(key_bytes) != 32:
            raise ValueError(f"Key file {path} does not hold a 32-byte key")
        return key_bytes

    @classmethod
    def load_signing_key(cls, path: Path | str) -> tuple[SigningKey, VerifyKey]:
        signing_key = SigningKey(cls._read_key_bytes(path, SIGNING_KEY_TYPE))
        return signing_key, signing_key.verify_key

    @classmethod
    def load_verification_key(cls, path: Path | str) -> VerifyKey:
        return VerifyKey(cls._read_key_bytes(path, VERIFICATION_KEY_TYPE))

    @classmethod
    def load_from_config(cls, config: WalletConfig) -> tuple[SigningKey, VerifyKey]:
        """Load keys from configuration.

        Raises:
            ValueError: If neither a seed nor a key file is configured
        """
        if config.seed_hex:
            return cls.load_from_seed(config.seed_hex)

        elif config.signing_key_path:
            return cls.load_signing_key(config.signing_key_path)

        else:
            raise ValueError("Must provide either seed_hex or signing_key_path")

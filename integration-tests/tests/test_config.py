"""Test CLI configuration and key files."""

import json

import pytest

from multisig_offchain_core.cli.config import (
    KeyManager,
    MultisigConfig,
    WalletConfig,
)
from multisig_offchain_core.cli.config.utils import load_yaml_config, resolve_env_vars
from multisig_offchain_core.program.processor import DEFAULT_PROGRAM_ID

from .test_utils import write_config_file


class TestMultisigConfig:
    """Test loading configuration files."""

    def test_defaults(self, tmp_path) -> None:
        config_path = tmp_path / "config.yaml"
        config_path.write_text("")

        config = MultisigConfig.from_yaml(config_path)

        assert config.program_id == DEFAULT_PROGRAM_ID
        assert config.ledger.use_wall_clock
        assert config.ledger.state_path == str(tmp_path / "ledger-state.cbor")
        assert config.wallet.signing_key_path is None

    def test_full_config(self, tmp_path) -> None:
        program_id = bytes(range(32))
        config_path = tmp_path / "config.yaml"
        write_config_file(
            config_path,
            {
                "program_id": program_id.hex(),
                "ledger": {
                    "state_path": "/var/lib/multisig/state.cbor",
                    "use_wall_clock": False,
                    "lamports_per_byte_year": 10,
                    "unknown_setting": 1,
                },
                "wallet": {"signing_key_path": "keys/owner.skey"},
            },
        )

        config = MultisigConfig.from_yaml(config_path)
        ledger_config = config.ledger.to_ledger_config()

        assert config.program_id == program_id
        assert config.ledger.state_path == "/var/lib/multisig/state.cbor"
        assert not ledger_config.use_wall_clock
        assert ledger_config.minimum_balance(0) == 128 * 10 * 2
        assert config.wallet.signing_key_path == "keys/owner.skey"

    def test_env_vars_resolved(self, tmp_path, monkeypatch) -> None:
        monkeypatch.setenv("MULTISIG_SEED", "ab" * 32)
        config_path = tmp_path / "config.yaml"
        write_config_file(config_path, {"wallet": {"seed_hex": "$MULTISIG_SEED"}})

        config = MultisigConfig.from_yaml(config_path)

        assert config.wallet.seed_hex == "ab" * 32

    def test_unset_env_var_kept(self, monkeypatch) -> None:
        monkeypatch.delenv("MULTISIG_MISSING", raising=False)

        assert resolve_env_vars({"a": ["$MULTISIG_MISSING"]}) == {
            "a": ["$MULTISIG_MISSING"]
        }

    def test_invalid_program_id(self, tmp_path) -> None:
        config_path = tmp_path / "config.yaml"
        write_config_file(config_path, {"program_id": "abcd"})

        with pytest.raises(ValueError):
            MultisigConfig.from_yaml(config_path)

    def test_non_mapping_rejected(self, tmp_path) -> None:
        config_path = tmp_path / "config.yaml"
        config_path.write_text("- one\n- two\n")

        with pytest.raises(ValueError):
            load_yaml_config(config_path)

    def test_missing_file(self, tmp_path) -> None:
        with pytest.raises(FileNotFoundError):
            load_yaml_config(tmp_path / "absent.yaml")


class TestKeyManager:
    """Test key generation and key files."""

    def test_save_and_load_signing_key(self, tmp_path) -> None:
        signing_key, verify_key = KeyManager.generate()
        KeyManager.save_key(signing_key, tmp_path / "owner.skey", "Owner 0")

        loaded, loaded_verify = KeyManager.load_signing_key(tmp_path / "owner.skey")

        assert bytes(loaded) == bytes(signing_key)
        assert bytes(loaded_verify) == bytes(verify_key)
        envelope = json.loads((tmp_path / "owner.skey").read_text())
        assert envelope["type"] == "Ed25519SigningKey"
        assert envelope["description"] == "Owner 0"

    def test_key_type_checked(self, tmp_path) -> None:
        _, verify_key = KeyManager.generate()
        KeyManager.save_key(verify_key, tmp_path / "owner.vkey")

        assert bytes(KeyManager.load_verification_key(tmp_path / "owner.vkey")) == (
            bytes(verify_key)
        )
        with pytest.raises(ValueError):
            KeyManager.load_signing_key(tmp_path / "owner.vkey")

    def test_malformed_key_file(self, tmp_path) -> None:
        path = tmp_path / "broken.skey"
        path.write_text(json.dumps({"type": "Ed25519SigningKey"}))

        with pytest.raises(ValueError):
            KeyManager.load_signing_key(path)

    def test_missing_key_file(self, tmp_path) -> None:
        with pytest.raises(FileNotFoundError):
            KeyManager.load_signing_key(tmp_path / "absent.skey")

    def test_load_from_seed(self) -> None:
        first, _ = KeyManager.load_from_seed("01" * 32)
        second, _ = KeyManager.load_from_seed("01" * 32)

        assert bytes(first.verify_key) == bytes(second.verify_key)

    @pytest.mark.parametrize("seed", ["zz" * 32, "01" * 31, ""])
    def test_invalid_seed(self, seed: str) -> None:
        with pytest.raises(ValueError):
            KeyManager.load_from_seed(seed)

    def test_load_from_config(self, tmp_path) -> None:
        signing_key, _ = KeyManager.generate()
        KeyManager.save_key(signing_key, tmp_path / "owner.skey")

        loaded, _ = KeyManager.load_from_config(
            WalletConfig(signing_key_path=str(tmp_path / "owner.skey"))
        )

        assert bytes(loaded) == bytes(signing_key)
        with pytest.raises(ValueError):
            KeyManager.load_from_config(WalletConfig())

"""Configuration for the multisig CLI."""

from dataclasses import dataclass, field
from pathlib import Path

from multisig_offchain_core.blockchain.ledger import LedgerConfig
from multisig_offchain_core.models.base import ProgramId, identity_from_hex
from multisig_offchain_core.program.processor import DEFAULT_PROGRAM_ID

from .keys import WalletConfig
from .utils import ConfigFromDict, load_yaml_config


@dataclass
class LedgerSettings(ConfigFromDict):
    """Local ledger state file and rent parameters."""

    state_path: str = "ledger-state.cbor"
    lamports_per_byte_year: int = 3480
    exemption_years: int = 2
    account_storage_overhead: int = 128
    use_wall_clock: bool = True

    def to_ledger_config(self) -> LedgerConfig:
        return LedgerConfig(
            lamports_per_byte_year=self.lamports_per_byte_year,
            exemption_years=self.exemption_years,
            account_storage_overhead=self.account_storage_overhead,
            use_wall_clock=self.use_wall_clock,
        )


@dataclass
class MultisigConfig:
    """Top-level CLI configuration."""

    ledger: LedgerSettings = field(default_factory=LedgerSettings)
    program_id: ProgramId = DEFAULT_PROGRAM_ID
    wallet: WalletConfig = field(default_factory=WalletConfig)

    @classmethod
    def from_dict(cls, data: dict) -> "MultisigConfig":
        """Create configuration from dictionary."""
        program_id = data.get("program_id")
        return cls(
            ledger=LedgerSettings.from_dict(data.get("ledger") or {}),
            program_id=(
                identity_from_hex(str(program_id), "program id")
                if program_id
                else DEFAULT_PROGRAM_ID
            ),
            wallet=WalletConfig.from_dict(data.get("wallet") or {}),
        )

    @classmethod
    def from_yaml(cls, path: Path | str) -> "MultisigConfig":
        """Load configuration from YAML, resolving ``$VAR`` values."""
        config = cls.from_dict(load_yaml_config(path))

        # Relative state paths are relative to the config file
        state_path = Path(config.ledger.state_path)
        if not state_path.is_absolute():
            config.ledger.state_path = str(Path(path).parent / state_path)
        return config

""" Configuration classes for the CLI. """

from .keys import KeyManager, WalletConfig
from .multisig import LedgerSettings, MultisigConfig
from .utils import async_command

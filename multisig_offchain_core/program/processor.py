"""Entry point of the multisig program: decode an instruction and dispatch it."""

import logging
from collections.abc import Callable

from multisig_offchain_core.blockchain.ledger import InstructionContext, Program
from multisig_offchain_core.models.base import ProgramId, validate_identity
from multisig_offchain_core.models.instructions import (
    ApproveTransaction,
    CancelTransaction,
    CreateWallet,
    ExecuteTransaction,
    Instruction,
    ProposeTransaction,
    decode_instruction,
)

from .exceptions import InvalidInstructionError
from .instructions.approve_transaction import process_approve_transaction
from .instructions.cancel_transaction import process_cancel_transaction
from .instructions.create_wallet import process_create_wallet
from .instructions.execute_transaction import process_execute_transaction
from .instructions.propose_transaction import process_propose_transaction

logger = logging.getLogger(__name__)

DEFAULT_PROGRAM_ID: ProgramId = bytes.fromhex(
    "4d756c74697369673131313131313131313131313131313131313131313131ff"
)

HANDLERS: dict[type, Callable[[InstructionContext, Instruction], None]] = {
    CreateWallet: process_create_wallet,
    ProposeTransaction: process_propose_transaction,
    ApproveTransaction: process_approve_transaction,
    ExecuteTransaction: process_execute_transaction,
    CancelTransaction: process_cancel_transaction,
}


class MultisigProgram(Program):
    """Multisig wallet program registered with a ledger."""

    def __init__(self, program_id: ProgramId = DEFAULT_PROGRAM_ID) -> None:
        self.program_id = validate_identity(program_id, "program id")

    def process(self, ctx: InstructionContext, instruction_data: bytes) -> None:
        try:
            instruction = decode_instruction(instruction_data)
        except ValueError as e:
            raise InvalidInstructionError(str(e)) from e

        logger.debug("Processing %s", type(instruction).__name__)
        HANDLERS[type(instruction)](ctx, instruction)

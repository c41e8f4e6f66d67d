"""Instructions understood by the multisig program"""

from dataclasses import dataclass
from typing import Union

import cbor2

from multisig_offchain_core.models.base import (
    CBOR_DECODE_ERRORS,
    Identity,
    Lamports,
    TaggedRecord,
)


@dataclass
class CreateWallet(TaggedRecord):
    """Payer creates a wallet with an owner set and threshold"""

    CONSTR_ID = 0
    owners: list[Identity]
    threshold: int


@dataclass
class ProposeTransaction(TaggedRecord):
    """Owner proposes a transfer out of the wallet"""

    CONSTR_ID = 1
    amount: Lamports
    recipient: Identity
    expires_in_hours: int


@dataclass
class ApproveTransaction(TaggedRecord):
    """Owner approves a pending proposal"""

    CONSTR_ID = 2


@dataclass
class ExecuteTransaction(TaggedRecord):
    """Anyone triggers the transfer of an approved proposal"""

    CONSTR_ID = 3


@dataclass
class CancelTransaction(TaggedRecord):
    """Owner cancels a pending proposal"""

    CONSTR_ID = 4


# Type alias for instruction variants
Instruction = Union[  # noqa
    CreateWallet,
    ProposeTransaction,
    ApproveTransaction,
    ExecuteTransaction,
    CancelTransaction,
]

INSTRUCTION_VARIANTS: dict[int, type[TaggedRecord]] = {
    variant.tag(): variant
    for variant in (
        CreateWallet,
        ProposeTransaction,
        ApproveTransaction,
        ExecuteTransaction,
        CancelTransaction,
    )
}


def decode_instruction(data: bytes) -> Instruction:
    """Decode instruction data into its variant.

    Raises:
        ValueError: If the data is not a known instruction
    """
    try:
        decoded = cbor2.loads(data)
    except CBOR_DECODE_ERRORS as err:
        raise ValueError(f"Undecodable instruction data: {err}") from err

    if (
        not isinstance(decoded, cbor2.CBORTag)
        or decoded.tag not in INSTRUCTION_VARIANTS
    ):
        raise ValueError("Unknown instruction")

    return INSTRUCTION_VARIANTS[decoded.tag].from_cbor(data)

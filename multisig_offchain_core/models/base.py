"""Base types used in the models."""

from dataclasses import dataclass, fields
from typing import Any, ClassVar, TypeVar

import cbor2

Identity = bytes
AccountAddress = bytes
ProgramId = bytes
PosixTime = int
Lamports = int

IDENTITY_SIZE = 32
SIGNATURE_SIZE = 64
MAX_OWNERS = 10
U64_MAX = 2**64 - 1
I64_MAX = 2**63 - 1

EMPTY_IDENTITY: Identity = bytes(IDENTITY_SIZE)


def validate_identity(value: bytes, label: str = "identity") -> bytes:
    """Check that a value is a 32-byte key or address."""
    if not isinstance(value, (bytes, bytearray)):
        raise ValueError(f"{label} must be bytes, got {type(value).__name__}")
    if len(value) != IDENTITY_SIZE:
        raise ValueError(f"{label} must be {IDENTITY_SIZE} bytes long")
    return bytes(value)


def identity_from_hex(hex_str: str, label: str = "identity") -> Identity:
    """Parse a hex encoded key or address."""
    try:
        value = bytes.fromhex(hex_str.strip())
    except (ValueError, AttributeError) as err:
        raise ValueError(f"Invalid {label} hex format") from err
    return validate_identity(value, label)


def short_hex(value: bytes, length: int = 8) -> str:
    """Abbreviated hex used in log lines."""
    return value.hex()[:length]


def is_u64(value: int) -> bool:
    """True for a non-negative integer that fits in 64 bits."""
    if isinstance(value, bool) or not isinstance(value, int):
        return False
    return 0 <= value <= U64_MAX


T = TypeVar("T", bound="TaggedRecord")

# CBORDecodeError is not a ValueError on every cbor2 release
CBOR_DECODE_ERRORS = (cbor2.CBORDecodeError, ValueError, TypeError, EOFError)


def as_lists(value: Any) -> Any:
    """Turn decoded CBOR arrays, which may arrive as tuples, into lists."""
    if isinstance(value, (list, tuple)):
        return [as_lists(item) for item in value]
    return value


@dataclass
class TaggedRecord:
    """Dataclass serialized as a constructor-tagged CBOR array.

    The tag is ``TAG_BASE + CONSTR_ID`` and the array holds the dataclass
    fields in declaration order.
    """

    CONSTR_ID: ClassVar[int] = 0
    TAG_BASE: ClassVar[int] = 121

    @classmethod
    def tag(cls) -> int:
        return cls.TAG_BASE + cls.CONSTR_ID

    def to_primitive(self) -> list:
        return [getattr(self, f.name) for f in fields(self)]

    @classmethod
    def from_primitive(cls: type[T], values: list) -> T:
        return cls(*values)

    def to_cbor(self) -> bytes:
        """Encode the record as tagged CBOR."""
        return cbor2.dumps(cbor2.CBORTag(self.tag(), self.to_primitive()))

    @classmethod
    def from_cbor(cls: type[T], data: bytes) -> T:
        """Decode a record, rejecting data that carries another tag."""
        try:
            decoded = cbor2.loads(data)
        except CBOR_DECODE_ERRORS as err:
            raise ValueError(f"Undecodable {cls.__name__} data: {err}") from err

        if not isinstance(decoded, cbor2.CBORTag) or decoded.tag != cls.tag():
            raise ValueError(f"Data is not a {cls.__name__} record")

        values = decoded.value
        if not isinstance(values, (list, tuple)) or len(values) != len(fields(cls)):
            raise ValueError(f"Malformed {cls.__name__} record")

        try:
            return cls.from_primitive(as_lists(values))
        except TypeError as err:
            raise ValueError(f"Malformed {cls.__name__} record: {err}") from err

    @classmethod
    def has_tag(cls, data: bytes) -> bool:
        """Cheap check used when scanning accounts for a record type."""
        try:
            decoded = cbor2.loads(data)
        except CBOR_DECODE_ERRORS:
            return False
        return isinstance(decoded, cbor2.CBORTag) and decoded.tag == cls.tag()

"""
Clarity values used as contract-call arguments and results.

Each value type is a frozen dataclass that validates its payload on
construction and knows its consensus serialization, so a malformed argument
fails where it is built instead of on the node.
"""
import re
import struct
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any, Dict, Iterable, Mapping, Optional, Tuple

from .c32 import c32_address, c32_address_decode
from ..exceptions import DecodeError

MAX_UINT128 = 2 ** 128 - 1
MIN_INT128 = -(2 ** 127)
MAX_INT128 = 2 ** 127 - 1

CONTRACT_NAME_PATTERN = re.compile(r"^[a-zA-Z]([a-zA-Z0-9]|[-_])*$")
MAX_CONTRACT_NAME_LENGTH = 40
MAX_CLARITY_NAME_LENGTH = 128
CLARITY_NAME_PATTERN = re.compile(r"^[a-zA-Z]([a-zA-Z0-9]|[-_!?+<>=/*])*$")


class ClarityType(IntEnum):
    INT = 0x00
    UINT = 0x01
    BUFFER = 0x02
    BOOL_TRUE = 0x03
    BOOL_FALSE = 0x04
    PRINCIPAL_STANDARD = 0x05
    PRINCIPAL_CONTRACT = 0x06
    RESPONSE_OK = 0x07
    RESPONSE_ERR = 0x08
    OPTIONAL_NONE = 0x09
    OPTIONAL_SOME = 0x0A
    LIST = 0x0B
    TUPLE = 0x0C
    STRING_ASCII = 0x0D
    STRING_UTF8 = 0x0E


def _u32(value: int) -> bytes:
    return struct.pack(">I", value)


class ClarityValue(ABC):
    """Base class of all Clarity values."""

    @property
    @abstractmethod
    def type_id(self) -> ClarityType:
        ...

    @abstractmethod
    def _payload(self) -> bytes:
        ...

    def serialize(self) -> bytes:
        return bytes([self.type_id]) + self._payload()

    def to_hex(self) -> str:
        return "0x" + self.serialize().hex()


@dataclass(frozen=True)
class IntCV(ClarityValue):
    value: int

    def __post_init__(self):
        if isinstance(self.value, bool) or not isinstance(self.value, int):
            raise TypeError(f"int value must be an int, got {type(self.value).__name__}")
        if not MIN_INT128 <= self.value <= MAX_INT128:
            raise ValueError(f"int value out of 128-bit signed range: {self.value}")

    @property
    def type_id(self) -> ClarityType:
        return ClarityType.INT

    def _payload(self) -> bytes:
        return self.value.to_bytes(16, "big", signed=True)


@dataclass(frozen=True)
class UIntCV(ClarityValue):
    value: int

    def __post_init__(self):
        if isinstance(self.value, bool) or not isinstance(self.value, int):
            raise TypeError(f"uint value must be an int, got {type(self.value).__name__}")
        if not 0 <= self.value <= MAX_UINT128:
            raise ValueError(f"uint value out of 128-bit unsigned range: {self.value}")

    @property
    def type_id(self) -> ClarityType:
        return ClarityType.UINT

    def _payload(self) -> bytes:
        return self.value.to_bytes(16, "big")


@dataclass(frozen=True)
class BufferCV(ClarityValue):
    value: bytes

    def __post_init__(self):
        if not isinstance(self.value, (bytes, bytearray)):
            raise TypeError("buffer value must be bytes")
        object.__setattr__(self, "value", bytes(self.value))

    @property
    def type_id(self) -> ClarityType:
        return ClarityType.BUFFER

    def _payload(self) -> bytes:
        return _u32(len(self.value)) + self.value


@dataclass(frozen=True)
class BoolCV(ClarityValue):
    value: bool

    @property
    def type_id(self) -> ClarityType:
        return ClarityType.BOOL_TRUE if self.value else ClarityType.BOOL_FALSE

    def _payload(self) -> bytes:
        return b""


@dataclass(frozen=True)
class StandardPrincipalCV(ClarityValue):
    version: int
    hash160: bytes

    def __post_init__(self):
        if not 0 <= self.version < 32:
            raise ValueError(f"principal version out of range: {self.version}")
        if len(self.hash160) != 20:
            raise ValueError(f"principal hash160 must be 20 bytes, got {len(self.hash160)}")

    @classmethod
    def from_address(cls, address: str) -> "StandardPrincipalCV":
        """
        Raises:
            ValueError: If the address does not decode
        """
        try:
            version, hash160 = c32_address_decode(address)
        except DecodeError as e:
            raise ValueError(str(e)) from e
        return cls(version, hash160)

    @property
    def address(self) -> str:
        return c32_address(self.version, self.hash160)

    @property
    def type_id(self) -> ClarityType:
        return ClarityType.PRINCIPAL_STANDARD

    def _payload(self) -> bytes:
        return bytes([self.version]) + self.hash160


@dataclass(frozen=True)
class ContractPrincipalCV(ClarityValue):
    issuer: StandardPrincipalCV
    contract_name: str

    def __post_init__(self):
        name = self.contract_name
        if not 1 <= len(name) <= MAX_CONTRACT_NAME_LENGTH or not CONTRACT_NAME_PATTERN.match(name):
            raise ValueError(f"Invalid contract name: {name!r}")

    @property
    def contract_id(self) -> str:
        return f"{self.issuer.address}.{self.contract_name}"

    @property
    def type_id(self) -> ClarityType:
        return ClarityType.PRINCIPAL_CONTRACT

    def _payload(self) -> bytes:
        name = self.contract_name.encode("ascii")
        return self.issuer._payload() + bytes([len(name)]) + name


@dataclass(frozen=True)
class ResponseOkCV(ClarityValue):
    value: ClarityValue

    @property
    def type_id(self) -> ClarityType:
        return ClarityType.RESPONSE_OK

    def _payload(self) -> bytes:
        return self.value.serialize()


@dataclass(frozen=True)
class ResponseErrCV(ClarityValue):
    value: ClarityValue

    @property
    def type_id(self) -> ClarityType:
        return ClarityType.RESPONSE_ERR

    def _payload(self) -> bytes:
        return self.value.serialize()


@dataclass(frozen=True)
class NoneCV(ClarityValue):

    @property
    def type_id(self) -> ClarityType:
        return ClarityType.OPTIONAL_NONE

    def _payload(self) -> bytes:
        return b""


@dataclass(frozen=True)
class SomeCV(ClarityValue):
    value: ClarityValue

    @property
    def type_id(self) -> ClarityType:
        return ClarityType.OPTIONAL_SOME

    def _payload(self) -> bytes:
        return self.value.serialize()


@dataclass(frozen=True)
class ListCV(ClarityValue):
    items: Tuple[ClarityValue, ...] = ()

    def __post_init__(self):
        items = tuple(self.items)
        for item in items:
            if not isinstance(item, ClarityValue):
                raise TypeError(f"list items must be Clarity values, got {type(item).__name__}")
        object.__setattr__(self, "items", items)

    @property
    def type_id(self) -> ClarityType:
        return ClarityType.LIST

    def _payload(self) -> bytes:
        return _u32(len(self.items)) + b"".join(item.serialize() for item in self.items)


@dataclass(frozen=True)
class TupleCV(ClarityValue):
    data: Mapping[str, ClarityValue] = field(default_factory=dict)

    def __post_init__(self):
        data = dict(self.data)
        for key, value in data.items():
            if (
                not isinstance(key, str)
                or len(key) > MAX_CLARITY_NAME_LENGTH
                or not CLARITY_NAME_PATTERN.fullmatch(key)
            ):
                raise ValueError(f"Invalid tuple key: {key!r}")
            if not isinstance(value, ClarityValue):
                raise TypeError(f"tuple value for {key!r} must be a Clarity value")
        object.__setattr__(self, "data", data)

    def __hash__(self):
        return hash(tuple(sorted(self.data.items())))

    @property
    def type_id(self) -> ClarityType:
        return ClarityType.TUPLE

    def _payload(self) -> bytes:
        parts = [_u32(len(self.data))]
        for key in sorted(self.data):
            name = key.encode("ascii")
            parts.append(bytes([len(name)]) + name + self.data[key].serialize())
        return b"".join(parts)


@dataclass(frozen=True)
class StringAsciiCV(ClarityValue):
    value: str

    def __post_init__(self):
        try:
            self.value.encode("ascii")
        except UnicodeEncodeError:
            raise ValueError(f"string-ascii value contains non-ASCII characters: {self.value!r}")

    @property
    def type_id(self) -> ClarityType:
        return ClarityType.STRING_ASCII

    def _payload(self) -> bytes:
        data = self.value.encode("ascii")
        return _u32(len(data)) + data


@dataclass(frozen=True)
class StringUtf8CV(ClarityValue):
    value: str

    @property
    def type_id(self) -> ClarityType:
        return ClarityType.STRING_UTF8

    def _payload(self) -> bytes:
        data = self.value.encode("utf-8")
        return _u32(len(data)) + data


# Constructors named after the call sites that build arguments

def int_cv(value: int) -> IntCV:
    return IntCV(value)


def uint_cv(value: int) -> UIntCV:
    return UIntCV(value)


def buffer_cv(value: bytes) -> BufferCV:
    return BufferCV(value)


def bool_cv(value: bool) -> BoolCV:
    return BoolCV(bool(value))


def true_cv() -> BoolCV:
    return BoolCV(True)


def false_cv() -> BoolCV:
    return BoolCV(False)


def standard_principal_cv(address: str) -> StandardPrincipalCV:
    return StandardPrincipalCV.from_address(address)


def contract_principal_cv(address: str, contract_name: str) -> ContractPrincipalCV:
    return ContractPrincipalCV(StandardPrincipalCV.from_address(address), contract_name)


def principal_cv(principal: str) -> ClarityValue:
    """Build a standard or contract principal from ``address`` or ``address.name``."""
    address, sep, name = principal.partition(".")
    if sep:
        return contract_principal_cv(address, name)
    return standard_principal_cv(address)


def none_cv() -> NoneCV:
    return NoneCV()


def some_cv(value: ClarityValue) -> SomeCV:
    return SomeCV(value)


def optional_cv(value: Optional[ClarityValue]) -> ClarityValue:
    return NoneCV() if value is None else SomeCV(value)


def list_cv(items: Iterable[ClarityValue]) -> ListCV:
    return ListCV(tuple(items))


def tuple_cv(data: Mapping[str, ClarityValue]) -> TupleCV:
    return TupleCV(dict(data))


def string_ascii_cv(value: str) -> StringAsciiCV:
    return StringAsciiCV(value)


def string_utf8_cv(value: str) -> StringUtf8CV:
    return StringUtf8CV(value)


def response_ok_cv(value: ClarityValue) -> ResponseOkCV:
    return ResponseOkCV(value)


def response_err_cv(value: ClarityValue) -> ResponseErrCV:
    return ResponseErrCV(value)

"""
Post-conditions: declared upper bounds on asset outflow.

The chain aborts a transaction whose execution would violate one of its
post-conditions, so a buyer can cap what a marketplace call may spend.
"""
import struct
from dataclasses import dataclass
from enum import IntEnum

from .c32 import c32_address_decode
from ..exceptions import DecodeError

MAX_U64 = 2 ** 64 - 1


class PostConditionMode(IntEnum):
    ALLOW = 0x01
    DENY = 0x02


class FungibleConditionCode(IntEnum):
    EQUAL = 0x01
    GREATER = 0x02
    GREATER_EQUAL = 0x03
    LESS = 0x04
    LESS_EQUAL = 0x05


# Wire prefixes
_ASSET_STX = 0x00
_PRINCIPAL_STANDARD = 0x02


@dataclass(frozen=True)
class STXPostCondition:
    """Constraint on the STX a principal sends during a transaction."""
    principal: str
    condition_code: FungibleConditionCode
    amount: int

    def __post_init__(self):
        if isinstance(self.amount, bool) or not isinstance(self.amount, int):
            raise TypeError("post-condition amount must be an int (micro-STX)")
        if not 0 <= self.amount <= MAX_U64:
            raise ValueError(f"post-condition amount out of range: {self.amount}")
        try:
            c32_address_decode(self.principal)
        except DecodeError as e:
            raise ValueError(f"Invalid post-condition principal: {e}") from e
        object.__setattr__(self, "condition_code", FungibleConditionCode(self.condition_code))

    @property
    def bounds_outflow(self) -> bool:
        """True when the condition caps how much STX can leave the principal."""
        return self.condition_code in (
            FungibleConditionCode.LESS_EQUAL,
            FungibleConditionCode.LESS,
            FungibleConditionCode.EQUAL,
        )

    def serialize(self) -> bytes:
        version, hash160 = c32_address_decode(self.principal)
        return (
            bytes([_ASSET_STX, _PRINCIPAL_STANDARD, version])
            + hash160
            + bytes([self.condition_code])
            + struct.pack(">Q", self.amount)
        )

    def to_hex(self) -> str:
        return self.serialize().hex()


def make_standard_stx_post_condition(
    address: str,
    condition_code: FungibleConditionCode,
    amount: int,
) -> STXPostCondition:
    return STXPostCondition(address, condition_code, amount)


def max_spend(address: str, amount: int) -> STXPostCondition:
    """The post-condition every payment-bearing call should carry."""
    return STXPostCondition(address, FungibleConditionCode.LESS_EQUAL, amount)

"""
c32check encoding of Stacks addresses.

A Stacks address is ``S`` + a version character + the c32 encoding of the
20-byte hash160 followed by a 4-byte double-sha256 checksum.
"""
import hashlib
from typing import Tuple

from ..exceptions import DecodeError

C32_ALPHABET = "0123456789ABCDEFGHJKMNPQRSTVWXYZ"

# Address versions
MAINNET_SINGLE_SIG = 22  # 'P'
MAINNET_MULTI_SIG = 20   # 'M'
TESTNET_SINGLE_SIG = 26  # 'T'
TESTNET_MULTI_SIG = 21   # 'N'


def _normalize(text: str) -> str:
    return text.upper().replace("O", "0").replace("L", "1").replace("I", "1")


def c32_checksum(version: int, data: bytes) -> bytes:
    payload = bytes([version]) + data
    return hashlib.sha256(hashlib.sha256(payload).digest()).digest()[:4]


def c32_encode(data: bytes) -> str:
    """Encode bytes as c32; each leading zero byte becomes one '0'."""
    leading_zeros = len(data) - len(data.lstrip(b"\x00"))
    n = int.from_bytes(data, "big")
    digits = []
    while n > 0:
        n, rem = divmod(n, 32)
        digits.append(C32_ALPHABET[rem])
    return "0" * leading_zeros + "".join(reversed(digits))


def c32_decode(text: str) -> bytes:
    """
    Decode a c32 string; each leading '0' becomes one zero byte.

    Raises:
        DecodeError: If the string contains non-c32 characters
    """
    text = _normalize(text)
    n = 0
    for char in text:
        index = C32_ALPHABET.find(char)
        if index < 0:
            raise DecodeError(f"Invalid c32 character {char!r}")
        n = n * 32 + index
    leading_zeros = len(text) - len(text.lstrip("0"))
    body = n.to_bytes((n.bit_length() + 7) // 8, "big") if n else b""
    return b"\x00" * leading_zeros + body


def c32_address(version: int, hash160: bytes) -> str:
    """
    Build a Stacks address from a version and a 20-byte hash160.

    Raises:
        ValueError: If the version or hash length is out of range
    """
    if not 0 <= version < 32:
        raise ValueError(f"Address version must be in [0, 32), got {version}")
    if len(hash160) != 20:
        raise ValueError(f"hash160 must be 20 bytes, got {len(hash160)}")
    checksum = c32_checksum(version, hash160)
    return "S" + C32_ALPHABET[version] + c32_encode(hash160 + checksum)


def c32_address_decode(address: str) -> Tuple[int, bytes]:
    """
    Split a Stacks address into (version, hash160).

    Raises:
        DecodeError: If the address is malformed or its checksum is wrong
    """
    if not isinstance(address, str) or len(address) < 5:
        raise DecodeError(f"Invalid Stacks address: {address!r}")
    address = _normalize(address)
    if address[0] != "S":
        raise DecodeError(f"Stacks address must start with 'S': {address!r}")

    version = C32_ALPHABET.find(address[1])
    if version < 0:
        raise DecodeError(f"Invalid address version character in {address!r}")

    decoded = c32_decode(address[2:])
    if len(decoded) < 5:
        raise DecodeError(f"Stacks address too short: {address!r}")
    data, checksum = decoded[:-4], decoded[-4:]
    if len(data) != 20:
        raise DecodeError(f"Stacks address must encode a 20-byte hash, got {len(data)} bytes")
    if c32_checksum(version, data) != checksum:
        raise DecodeError(f"Invalid checksum in Stacks address {address!r}")
    return version, data


def is_valid_address(address: str) -> bool:
    try:
        c32_address_decode(address)
    except DecodeError:
        return False
    return True

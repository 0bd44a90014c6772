"""
Decoding of serialized Clarity values returned by the node.
"""
import struct
from typing import Any, Tuple, Union

from .values import (
    ClarityType, ClarityValue, IntCV, UIntCV, BufferCV, BoolCV,
    StandardPrincipalCV, ContractPrincipalCV, ResponseOkCV, ResponseErrCV,
    NoneCV, SomeCV, ListCV, TupleCV, StringAsciiCV, StringUtf8CV,
)
from ..exceptions import ContractCallError, DecodeError

# Nesting bound; the node never returns anything this deep
MAX_DEPTH = 64


class _Reader:
    def __init__(self, data: bytes):
        self.data = data
        self.offset = 0

    def take(self, size: int) -> bytes:
        end = self.offset + size
        if end > len(self.data):
            raise DecodeError(
                f"Unexpected end of Clarity value at offset {self.offset} (needed {size} bytes)"
            )
        chunk = self.data[self.offset:end]
        self.offset = end
        return chunk

    def u8(self) -> int:
        return self.take(1)[0]

    def u32(self) -> int:
        return struct.unpack(">I", self.take(4))[0]


def _hex_to_bytes(value: str) -> bytes:
    text = value[2:] if value.startswith(("0x", "0X")) else value
    try:
        return bytes.fromhex(text)
    except ValueError as e:
        raise DecodeError(f"Invalid hex in Clarity value: {e}") from e


def deserialize_cv(data: Union[bytes, str]) -> ClarityValue:
    """
    Deserialize a Clarity value from bytes or a hex string.

    Raises:
        DecodeError: If the input is malformed or has trailing bytes
    """
    if isinstance(data, str):
        raw = _hex_to_bytes(data)
    elif isinstance(data, (bytes, bytearray)):
        raw = bytes(data)
    else:
        raise DecodeError(f"Clarity value must be bytes or a hex string, got {type(data).__name__}")
    reader = _Reader(raw)
    value = _read_value(reader, 0)
    if reader.offset != len(raw):
        raise DecodeError(f"Trailing bytes after Clarity value ({len(raw) - reader.offset} bytes)")
    return value


def _read_principal(reader: _Reader) -> StandardPrincipalCV:
    version = reader.u8()
    hash160 = reader.take(20)
    try:
        return StandardPrincipalCV(version, hash160)
    except ValueError as e:
        raise DecodeError(str(e)) from e


def _read_value(reader: _Reader, depth: int) -> ClarityValue:
    if depth > MAX_DEPTH:
        raise DecodeError("Clarity value nested too deeply")

    type_byte = reader.u8()
    try:
        clarity_type = ClarityType(type_byte)
    except ValueError:
        raise DecodeError(f"Unknown Clarity type prefix 0x{type_byte:02x}")

    if clarity_type == ClarityType.INT:
        return IntCV(int.from_bytes(reader.take(16), "big", signed=True))
    if clarity_type == ClarityType.UINT:
        return UIntCV(int.from_bytes(reader.take(16), "big"))
    if clarity_type == ClarityType.BUFFER:
        return BufferCV(reader.take(reader.u32()))
    if clarity_type == ClarityType.BOOL_TRUE:
        return BoolCV(True)
    if clarity_type == ClarityType.BOOL_FALSE:
        return BoolCV(False)
    if clarity_type == ClarityType.PRINCIPAL_STANDARD:
        return _read_principal(reader)
    if clarity_type == ClarityType.PRINCIPAL_CONTRACT:
        issuer = _read_principal(reader)
        name = reader.take(reader.u8())
        try:
            return ContractPrincipalCV(issuer, name.decode("ascii"))
        except (UnicodeDecodeError, ValueError) as e:
            raise DecodeError(f"Invalid contract name in principal: {e}") from e
    if clarity_type == ClarityType.RESPONSE_OK:
        return ResponseOkCV(_read_value(reader, depth + 1))
    if clarity_type == ClarityType.RESPONSE_ERR:
        return ResponseErrCV(_read_value(reader, depth + 1))
    if clarity_type == ClarityType.OPTIONAL_NONE:
        return NoneCV()
    if clarity_type == ClarityType.OPTIONAL_SOME:
        return SomeCV(_read_value(reader, depth + 1))
    if clarity_type == ClarityType.LIST:
        count = reader.u32()
        return ListCV(tuple(_read_value(reader, depth + 1) for _ in range(count)))
    if clarity_type == ClarityType.TUPLE:
        count = reader.u32()
        data = {}
        for _ in range(count):
            try:
                key = reader.take(reader.u8()).decode("ascii")
            except UnicodeDecodeError as e:
                raise DecodeError(f"Invalid tuple key: {e}") from e
            data[key] = _read_value(reader, depth + 1)
        try:
            return TupleCV(data)
        except ValueError as e:
            raise DecodeError(str(e)) from e
    if clarity_type == ClarityType.STRING_ASCII:
        try:
            return StringAsciiCV(reader.take(reader.u32()).decode("ascii"))
        except UnicodeDecodeError as e:
            raise DecodeError(f"Invalid string-ascii value: {e}") from e
    # STRING_UTF8
    try:
        return StringUtf8CV(reader.take(reader.u32()).decode("utf-8"))
    except UnicodeDecodeError as e:
        raise DecodeError(f"Invalid string-utf8 value: {e}") from e


def cv_to_value(cv: ClarityValue) -> Any:
    """
    Convert a Clarity value into plain Python data.

    A top-level ``(ok v)`` unwraps to ``v`` and a top-level ``(err v)`` raises
    ContractCallError with the converted ``v`` attached. Responses nested
    inside lists, tuples or optionals never raise: ``(ok v)`` becomes ``v``
    and ``(err v)`` becomes ``{"err": v}``.
    """
    if isinstance(cv, ResponseErrCV):
        value = _err_payload(cv.value)
        raise ContractCallError(f"Contract returned error: {value!r}", value=value, error_code="CONTRACT_ERR")
    if isinstance(cv, ResponseOkCV):
        return _to_value(cv.value)
    return _to_value(cv)


def _to_value(cv: ClarityValue) -> Any:
    if isinstance(cv, (IntCV, UIntCV)):
        return cv.value
    if isinstance(cv, BoolCV):
        return cv.value
    if isinstance(cv, BufferCV):
        return cv.value
    if isinstance(cv, (StringAsciiCV, StringUtf8CV)):
        return cv.value
    if isinstance(cv, StandardPrincipalCV):
        return cv.address
    if isinstance(cv, ContractPrincipalCV):
        return cv.contract_id
    if isinstance(cv, NoneCV):
        return None
    if isinstance(cv, SomeCV):
        return _to_value(cv.value)
    if isinstance(cv, ResponseOkCV):
        return _to_value(cv.value)
    if isinstance(cv, ResponseErrCV):
        return {"err": _to_value(cv.value)}
    if isinstance(cv, ListCV):
        return [_to_value(item) for item in cv.items]
    if isinstance(cv, TupleCV):
        return {key: _to_value(value) for key, value in cv.data.items()}
    raise DecodeError(f"Cannot convert {type(cv).__name__} to a Python value")


def _err_payload(cv: ClarityValue) -> Any:
    # an err payload may itself hold a response; report its value as-is
    if isinstance(cv, (ResponseOkCV, ResponseErrCV)):
        return _err_payload(cv.value)
    return _to_value(cv)


def hex_to_value(data: str) -> Any:
    """Deserialize a hex-encoded Clarity value and convert it."""
    return cv_to_value(deserialize_cv(data))

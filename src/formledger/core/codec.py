from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Any, ClassVar, Union

import numpy as np

from .errors import InvalidValueKind


NUMERIC_WIDTH = 8
UINT64_MAX = 2**64 - 1
MAX_TYPE_TAG = 255

# Numeric payloads are unsigned 64-bit big-endian.
_NUMERIC_DTYPE = np.dtype(">u8")


class ResponseType(IntEnum):
    """Declared response type of a question.

    The integer values are the wire tags. Any other tag in [0, 255] is a legal
    but unrecognized type: its payloads are stored and returned as opaque bytes.
    """

    NUMERIC = 0
    TEXT = 1

    @classmethod
    def from_any(cls, value: Any) -> "ResponseType | int":
        if isinstance(value, cls):
            return value
        if isinstance(value, bool):
            raise ValueError("Unsupported response type: booleans are not type tags")

        if isinstance(value, (int, np.integer)):
            tag = int(value)
        else:
            v = str(value).strip().lower()
            aliases: dict[str, ResponseType] = {
                "numeric": cls.NUMERIC,
                "number": cls.NUMERIC,
                "uint": cls.NUMERIC,
                "int": cls.NUMERIC,
                "text": cls.TEXT,
                "string": cls.TEXT,
                "str": cls.TEXT,
            }
            if v in aliases:
                return aliases[v]
            if not (v.isascii() and v.isdigit()):
                raise ValueError(f"Unsupported response type: {value!r}. Use 'numeric', 'text' or an integer tag.")
            tag = int(v)

        if tag < 0 or tag > MAX_TYPE_TAG:
            raise ValueError(f"response type tag must be in [0, {MAX_TYPE_TAG}], got {tag}")
        try:
            return cls(tag)
        except ValueError:
            return tag


def response_type_name(response_type: int) -> str:
    if response_type == ResponseType.NUMERIC:
        return "numeric"
    if response_type == ResponseType.TEXT:
        return "text"
    return "opaque"


@dataclass(frozen=True)
class NumericValue:
    value: int
    kind: ClassVar[str] = "numeric"


@dataclass(frozen=True)
class TextValue:
    value: str
    kind: ClassVar[str] = "text"


@dataclass(frozen=True)
class OpaqueValue:
    value: bytes
    kind: ClassVar[str] = "opaque"


ResponseValue = Union[NumericValue, TextValue, OpaqueValue]


def _is_bytes_like(value: Any) -> bool:
    return isinstance(value, (bytes, bytearray, memoryview))


def _as_uint64(value: Any) -> int:
    if isinstance(value, bool):
        raise InvalidValueKind("numeric responses must be integers, got a boolean")
    if isinstance(value, (int, np.integer)):
        v = int(value)
    elif isinstance(value, str):
        s = value.strip()
        if not (s.isascii() and s.isdigit()):
            raise InvalidValueKind(f"numeric responses must be non-negative integers, got {value!r}")
        v = int(s)
    else:
        raise InvalidValueKind(f"numeric responses must be integers, got {type(value).__name__}")
    if v < 0 or v > UINT64_MAX:
        raise InvalidValueKind(f"numeric response out of range [0, 2**64 - 1]: {v}")
    return v


def encode(value: Any, response_type: int) -> bytes:
    """Encode a logical response value into its stored payload."""

    if response_type == ResponseType.NUMERIC:
        v = _as_uint64(value)
        return np.asarray(v, dtype=_NUMERIC_DTYPE).tobytes()

    if response_type == ResponseType.TEXT:
        if isinstance(value, str):
            try:
                return value.encode("utf-8")
            except UnicodeEncodeError as ex:
                raise InvalidValueKind("text response is not encodable as UTF-8") from ex
        if _is_bytes_like(value):
            return bytes(value)
        raise InvalidValueKind(f"text responses must be str or bytes, got {type(value).__name__}")

    # Unrecognized type: lenient pass-through, never fails.
    if _is_bytes_like(value):
        return bytes(value)
    return str(value).encode("utf-8", errors="surrogatepass")


def decode_value(payload: bytes | bytearray | memoryview, response_type: int) -> ResponseValue:
    raw = bytes(payload)

    if response_type == ResponseType.NUMERIC:
        if len(raw) != NUMERIC_WIDTH:
            raise InvalidValueKind(f"numeric payload must be {NUMERIC_WIDTH} bytes, got {len(raw)}")
        return NumericValue(int(np.frombuffer(raw, dtype=_NUMERIC_DTYPE)[0]))

    if response_type == ResponseType.TEXT:
        try:
            return TextValue(raw.decode("utf-8"))
        except UnicodeDecodeError as ex:
            raise InvalidValueKind("text payload is not valid UTF-8") from ex

    return OpaqueValue(raw)


def decode(payload: bytes | bytearray | memoryview, response_type: int) -> int | str | bytes:
    """Decode a stored payload back into its logical value."""
    return decode_value(payload, response_type).value


def to_hex(payload: bytes) -> str:
    return "0x" + bytes(payload).hex()


def from_hex(text: str) -> bytes:
    s = str(text).strip()
    if s[:2].lower() == "0x":
        s = s[2:]
    try:
        return bytes.fromhex(s)
    except ValueError as ex:
        raise ValueError(f"Invalid hex payload: {text!r}") from ex
